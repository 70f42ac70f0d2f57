"""
asset-digest config package public API.

Purpose
- Export config loading/validation entrypoints and public error types.

Functional requirements
- Support loading from ``digest.toml`` (or YAML) + ``ASSET_DIGEST_`` env overrides.
- Fail fast with clear structured validation/load errors.
"""

from asset_digest.config.loader import (
    ConfigLoadError,
    dump_effective_config,
    load_config,
    load_digest_config,
    normalize_paths,
)
from asset_digest.config.schema import (
    DEFAULT_CONFIG,
    PATH_FIELDS,
    ConfigValidationError,
    ConfigValidationIssue,
    ConfigValidationResult,
    DigestConfig,
    assert_valid_config,
    build_digest_config,
    default_config,
    merge_config,
    validate_config,
)

__all__ = [
    "ConfigLoadError",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "DEFAULT_CONFIG",
    "DigestConfig",
    "PATH_FIELDS",
    "assert_valid_config",
    "build_digest_config",
    "default_config",
    "dump_effective_config",
    "load_config",
    "load_digest_config",
    "merge_config",
    "normalize_paths",
]
