"""Stable constants shared across asset-digest modules."""

from __future__ import annotations

from typing import Final

# Placeholder defaults. The single capture group yields the asset path.
DEFAULT_PATTERN: Final[str] = r"DIGEST\((\/?[^\)]*)\)"
DEFAULT_REFERENCE_FILES: Final[str] = r"\.html$"
DEFAULT_ENVIRONMENTS: Final[tuple[str, ...]] = ("production",)

# Hash rendering.
DEFAULT_PRECISION: Final[int] = 8
MIN_SAFE_PRECISION: Final[int] = 6
DEFAULT_ALGORITHM: Final[str] = "sha1"
SUPPORTED_ALGORITHMS: Final[dict[str, int]] = {
    "md5": 32,
    "sha1": 40,
    "sha256": 64,
}
HASH_SEPARATOR: Final[str] = "-"

# Config discovery.
DEFAULT_CONFIG_FILE: Final[str] = "digest.toml"
ENV_PREFIX: Final[str] = "ASSET_DIGEST_"
DEFAULT_ENVIRONMENT: Final[str] = "development"

MANIFEST_INDENT: Final[int] = 4

__all__ = [
    "DEFAULT_ALGORITHM",
    "DEFAULT_CONFIG_FILE",
    "DEFAULT_ENVIRONMENT",
    "DEFAULT_ENVIRONMENTS",
    "DEFAULT_PATTERN",
    "DEFAULT_PRECISION",
    "DEFAULT_REFERENCE_FILES",
    "ENV_PREFIX",
    "HASH_SEPARATOR",
    "MANIFEST_INDENT",
    "MIN_SAFE_PRECISION",
    "SUPPORTED_ALGORITHMS",
]
