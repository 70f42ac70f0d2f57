"""
asset-digest: configuration schema and validation.

File: src/asset_digest/config/schema.py

Purpose
- Define authoritative configuration defaults and strict validation rules.
- Materialize validated settings as an immutable ``DigestConfig``.

Functional requirements
- Validate config payloads and return structured errors (field path + message).
- Reject unknown keys and malformed patterns before any file I/O happens.

Non-functional requirements
- Keep rules deterministic and easy to audit.
"""

from __future__ import annotations

import copy
import os
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Final, TypedDict

from asset_digest.constants import (
    DEFAULT_ALGORITHM,
    DEFAULT_ENVIRONMENTS,
    DEFAULT_PATTERN,
    DEFAULT_PRECISION,
    DEFAULT_REFERENCE_FILES,
    SUPPORTED_ALGORITHMS,
)

PATTERN_FLAGS: Final[dict[str, re.RegexFlag]] = {
    "IGNORECASE": re.IGNORECASE,
    "MULTILINE": re.MULTILINE,
    "DOTALL": re.DOTALL,
}
LOG_FORMATS: Final[tuple[str, ...]] = ("json", "text")
LOG_LEVELS: Final[tuple[str, ...]] = ("CRITICAL", "DEBUG", "ERROR", "INFO", "WARNING")

PATH_FIELDS: Final[tuple[tuple[str, ...], ...]] = (
    ("paths", "public_root"),
    ("paths", "manifest"),
    ("observability", "log_file"),
)


class DigestSettings(TypedDict):
    pattern: str
    pattern_flags: list[str]
    discard_non_filename_pattern_parts: bool
    reference_files: str
    precision: int
    algorithm: str
    always_run: bool
    environments: list[str]
    prepend_host: dict[str, str]
    infixes: list[str]


class PathsSettings(TypedDict):
    public_root: str
    manifest: str


class ObservabilitySettings(TypedDict):
    log_level: str
    log_format: str
    log_file: str


class AssetDigestSettings(TypedDict):
    digest: DigestSettings
    paths: PathsSettings
    observability: ObservabilitySettings


DEFAULT_CONFIG: Final[AssetDigestSettings] = {
    "digest": {
        "pattern": DEFAULT_PATTERN,
        "pattern_flags": [],
        "discard_non_filename_pattern_parts": True,
        "reference_files": DEFAULT_REFERENCE_FILES,
        "precision": DEFAULT_PRECISION,
        "algorithm": DEFAULT_ALGORITHM,
        "always_run": False,
        "environments": list(DEFAULT_ENVIRONMENTS),
        "prepend_host": {},
        "infixes": [],
    },
    "paths": {
        "public_root": "public",
        "manifest": "",
    },
    "observability": {
        "log_level": "WARNING",
        "log_format": "text",
        "log_file": "",
    },
}


@dataclass(frozen=True, slots=True)
class ConfigValidationIssue:
    """Single structured validation failure."""

    path: str
    message: str


@dataclass(frozen=True, slots=True)
class ConfigValidationResult:
    """Validation result with normalized config when no issues were found."""

    config: dict[str, Any] | None
    issues: tuple[ConfigValidationIssue, ...]

    @property
    def is_valid(self) -> bool:
        return self.config is not None and not self.issues


class ConfigValidationError(ValueError):
    """Raised when strict config validation fails."""

    def __init__(self, issues: Sequence[ConfigValidationIssue]) -> None:
        self.issues = tuple(issues)
        if not self.issues:
            rendered = "unknown validation failure"
        else:
            rendered = "\n".join(f"- {item.path}: {item.message}" for item in self.issues)
        super().__init__(f"invalid config:\n{rendered}")


class _IssueCollector:
    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: list[ConfigValidationIssue] = []

    def add(self, path: str, message: str) -> None:
        self._items.append(ConfigValidationIssue(path=path, message=message))

    def items(self) -> tuple[ConfigValidationIssue, ...]:
        return tuple(self._items)

    @property
    def has_issues(self) -> bool:
        return bool(self._items)


@dataclass(frozen=True, slots=True)
class DigestConfig:
    """Validated, immutable settings consumed by the fingerprinting engine."""

    public_root: Path
    pattern: re.Pattern[str] = field(default_factory=lambda: re.compile(DEFAULT_PATTERN))
    discard_non_filename_pattern_parts: bool = True
    reference_files: re.Pattern[str] = field(
        default_factory=lambda: re.compile(DEFAULT_REFERENCE_FILES)
    )
    precision: int = DEFAULT_PRECISION
    algorithm: str = DEFAULT_ALGORITHM
    always_run: bool = False
    environments: tuple[str, ...] = DEFAULT_ENVIRONMENTS
    prepend_host: Mapping[str, str] = field(default_factory=dict)
    manifest: Path | None = None
    infixes: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        issues = _IssueCollector()
        _check_pattern_groups(self.pattern, "digest.pattern", issues)
        _check_precision(self.precision, self.algorithm, "digest.precision", issues)
        if issues.has_issues:
            raise ConfigValidationError(issues.items())
        # Absolute, normalized roots make resolved paths comparable as cache keys.
        object.__setattr__(self, "public_root", Path(os.path.abspath(self.public_root)))
        if self.manifest is not None:
            object.__setattr__(self, "manifest", Path(os.path.abspath(self.manifest)))
        object.__setattr__(self, "environments", tuple(self.environments))
        object.__setattr__(self, "infixes", tuple(self.infixes))
        object.__setattr__(self, "prepend_host", dict(self.prepend_host))

    def should_run(self, environment: str, *, force: bool = False) -> bool:
        """Return ``True`` when fingerprinting is enabled for ``environment``."""

        return force or self.always_run or environment in self.environments

    def host_prefix(self, environment: str) -> str | None:
        """Return the URL prefix configured for ``environment``, if any."""

        return self.prepend_host.get(environment)


def default_config() -> AssetDigestSettings:
    """Return a deep copy of deterministic built-in defaults."""

    return copy.deepcopy(DEFAULT_CONFIG)


def merge_config(base: Mapping[str, object], overlay: Mapping[str, object]) -> dict[str, Any]:
    """Deterministically deep-merge ``overlay`` onto ``base``."""

    merged = _deep_copy_mapping(base)
    _merge_into(merged, overlay)
    return merged


def validate_config(config: Mapping[str, object] | object) -> ConfigValidationResult:
    """Validate config and return structured issues with deterministic paths."""

    issues = _IssueCollector()
    root = _as_object(config, "<root>", issues)
    if root is None:
        return ConfigValidationResult(config=None, issues=issues.items())

    _reject_unknown_keys(root, set(DEFAULT_CONFIG), "", issues)
    normalized: dict[str, Any] = {
        "digest": _validate_digest(root.get("digest", {}), "digest", issues),
        "paths": _validate_paths(root.get("paths", {}), "paths", issues),
        "observability": _validate_observability(
            root.get("observability", {}), "observability", issues
        ),
    }

    if issues.has_issues:
        return ConfigValidationResult(config=None, issues=issues.items())
    return ConfigValidationResult(config=normalized, issues=())


def assert_valid_config(config: Mapping[str, object] | object) -> dict[str, Any]:
    """Validate config and raise ``ConfigValidationError`` on failure."""

    result = validate_config(config)
    if result.config is None:
        raise ConfigValidationError(result.issues)
    return result.config


def build_digest_config(config: Mapping[str, object] | object) -> DigestConfig:
    """Validate ``config`` and materialize it as a ``DigestConfig``."""

    valid = assert_valid_config(config)
    digest = valid["digest"]
    paths = valid["paths"]

    flags = 0
    for flag_name in digest["pattern_flags"]:
        flags |= PATTERN_FLAGS[flag_name]

    manifest_text = paths["manifest"]
    return DigestConfig(
        public_root=Path(paths["public_root"]),
        pattern=re.compile(digest["pattern"], flags),
        discard_non_filename_pattern_parts=digest["discard_non_filename_pattern_parts"],
        reference_files=re.compile(digest["reference_files"]),
        precision=digest["precision"],
        algorithm=digest["algorithm"],
        always_run=digest["always_run"],
        environments=tuple(digest["environments"]),
        prepend_host=dict(digest["prepend_host"]),
        manifest=Path(manifest_text) if manifest_text else None,
        infixes=tuple(digest["infixes"]),
    )


def _validate_digest(value: object, path: str, issues: _IssueCollector) -> dict[str, Any]:
    payload = _as_object(value, path, issues) or {}
    _reject_unknown_keys(payload, set(DEFAULT_CONFIG["digest"]), path, issues)
    defaults = DEFAULT_CONFIG["digest"]
    merged = merge_config(defaults, payload)

    flags = 0
    flag_names = _as_str_list(merged["pattern_flags"], _join(path, "pattern_flags"), issues)
    for flag_name in flag_names or []:
        flag = PATTERN_FLAGS.get(flag_name.upper())
        if flag is None:
            expected = ", ".join(sorted(PATTERN_FLAGS))
            issues.add(
                _join(path, "pattern_flags"),
                f"unknown flag {flag_name!r}; expected one of: {expected}",
            )
            continue
        flags |= flag

    pattern = _as_regex(merged["pattern"], _join(path, "pattern"), issues, flags=flags)
    if pattern is not None:
        _check_pattern_groups(pattern, _join(path, "pattern"), issues)
    reference_files = _as_regex(merged["reference_files"], _join(path, "reference_files"), issues)

    algorithm = _as_str(merged["algorithm"], _join(path, "algorithm"), issues)
    if algorithm is not None and algorithm not in SUPPORTED_ALGORITHMS:
        expected = ", ".join(sorted(SUPPORTED_ALGORITHMS))
        issues.add(
            _join(path, "algorithm"),
            f"invalid value {algorithm!r}; expected one of: {expected}",
        )
        algorithm = None

    precision = _as_int(merged["precision"], _join(path, "precision"), issues, minimum=1)
    if precision is not None and algorithm is not None:
        _check_precision(precision, algorithm, _join(path, "precision"), issues)

    prepend_host = _as_str_mapping(merged["prepend_host"], _join(path, "prepend_host"), issues)

    return {
        "pattern": pattern.pattern if pattern is not None else None,
        "pattern_flags": [name.upper() for name in flag_names or []],
        "discard_non_filename_pattern_parts": _as_bool(
            merged["discard_non_filename_pattern_parts"],
            _join(path, "discard_non_filename_pattern_parts"),
            issues,
        ),
        "reference_files": reference_files.pattern if reference_files is not None else None,
        "precision": precision,
        "algorithm": algorithm,
        "always_run": _as_bool(merged["always_run"], _join(path, "always_run"), issues),
        "environments": _as_str_list(merged["environments"], _join(path, "environments"), issues),
        "prepend_host": prepend_host,
        "infixes": _as_str_list(merged["infixes"], _join(path, "infixes"), issues),
    }


def _validate_paths(value: object, path: str, issues: _IssueCollector) -> dict[str, Any]:
    payload = _as_object(value, path, issues) or {}
    _reject_unknown_keys(payload, set(DEFAULT_CONFIG["paths"]), path, issues)
    merged = merge_config(DEFAULT_CONFIG["paths"], payload)
    return {
        "public_root": _as_path_text(merged["public_root"], _join(path, "public_root"), issues),
        "manifest": _as_optional_path_text(merged["manifest"], _join(path, "manifest"), issues),
    }


def _validate_observability(value: object, path: str, issues: _IssueCollector) -> dict[str, Any]:
    payload = _as_object(value, path, issues) or {}
    _reject_unknown_keys(payload, set(DEFAULT_CONFIG["observability"]), path, issues)
    merged = merge_config(DEFAULT_CONFIG["observability"], payload)

    level = _as_str(merged["log_level"], _join(path, "log_level"), issues)
    if level is not None:
        level = level.upper()
        if level not in LOG_LEVELS:
            issues.add(
                _join(path, "log_level"),
                f"invalid value {level!r}; expected one of: {', '.join(LOG_LEVELS)}",
            )
            level = None
    log_format = _as_str(merged["log_format"], _join(path, "log_format"), issues)
    if log_format is not None and log_format not in LOG_FORMATS:
        issues.add(
            _join(path, "log_format"),
            f"invalid value {log_format!r}; expected one of: {', '.join(LOG_FORMATS)}",
        )
        log_format = None
    return {
        "log_level": level,
        "log_format": log_format,
        "log_file": _as_optional_path_text(merged["log_file"], _join(path, "log_file"), issues),
    }


def _check_pattern_groups(pattern: re.Pattern[str], path: str, issues: _IssueCollector) -> None:
    if pattern.groups != 1:
        issues.add(path, f"must have exactly one capturing group, found {pattern.groups}")


def _check_precision(precision: int, algorithm: str, path: str, issues: _IssueCollector) -> None:
    full_length = SUPPORTED_ALGORITHMS.get(algorithm)
    if full_length is None:
        issues.add("digest.algorithm", f"unsupported digest algorithm {algorithm!r}")
        return
    if isinstance(precision, bool) or not isinstance(precision, int):
        issues.add(path, f"expected integer, got {type(precision).__name__}")
        return
    if not 1 <= precision <= full_length:
        issues.add(path, f"must be between 1 and {full_length} for {algorithm}")


def _as_object(value: object, path: str, issues: _IssueCollector) -> dict[str, object] | None:
    if not isinstance(value, Mapping):
        issues.add(path, f"expected object, got {type(value).__name__}")
        return None
    out: dict[str, object] = {}
    for key, item in value.items():
        if not isinstance(key, str):
            issues.add(path, f"object key must be string, got {type(key).__name__}")
            continue
        out[key] = item
    return out


def _as_str(value: object, path: str, issues: _IssueCollector) -> str | None:
    if not isinstance(value, str):
        issues.add(path, f"expected string, got {type(value).__name__}")
        return None
    parsed = value.strip()
    if not parsed:
        issues.add(path, "must not be empty")
        return None
    return parsed


def _as_path_text(value: object, path: str, issues: _IssueCollector) -> str | None:
    parsed = _as_str(value, path, issues)
    if parsed is None:
        return None
    if "\x00" in parsed:
        issues.add(path, "must not contain NUL bytes")
        return None
    return parsed


def _as_optional_path_text(value: object, path: str, issues: _IssueCollector) -> str | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return ""
    return _as_path_text(value, path, issues)


def _as_bool(value: object, path: str, issues: _IssueCollector) -> bool | None:
    if isinstance(value, bool):
        return value
    issues.add(path, f"expected boolean, got {type(value).__name__}")
    return None


def _as_int(
    value: object,
    path: str,
    issues: _IssueCollector,
    *,
    minimum: int | None = None,
) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        issues.add(path, f"expected integer, got {type(value).__name__}")
        return None
    if minimum is not None and value < minimum:
        issues.add(path, f"must be >= {minimum}")
        return None
    return value


def _as_regex(
    value: object,
    path: str,
    issues: _IssueCollector,
    *,
    flags: int = 0,
) -> re.Pattern[str] | None:
    if not isinstance(value, str) or not value:
        issues.add(path, "expected a non-empty regular expression string")
        return None
    try:
        return re.compile(value, flags)
    except re.error as exc:
        issues.add(path, f"invalid regular expression: {exc}")
        return None


def _as_str_list(value: object, path: str, issues: _IssueCollector) -> list[str] | None:
    if isinstance(value, str) or not isinstance(value, Sequence):
        issues.add(path, f"expected list of strings, got {type(value).__name__}")
        return None
    items: list[str] = []
    for index, item in enumerate(value):
        parsed = _as_str(item, f"{path}[{index}]", issues)
        if parsed is not None:
            items.append(parsed)
    return items


def _as_str_mapping(value: object, path: str, issues: _IssueCollector) -> dict[str, str] | None:
    payload = _as_object(value, path, issues)
    if payload is None:
        return None
    out: dict[str, str] = {}
    for key in sorted(payload):
        parsed = _as_str(payload[key], _join(path, key), issues)
        if parsed is not None:
            out[key] = parsed
    return out


def _reject_unknown_keys(
    payload: Mapping[str, object],
    allowed: set[str],
    path: str,
    issues: _IssueCollector,
) -> None:
    for key in sorted(payload):
        if key not in allowed:
            issues.add(_join(path, key), "unknown field")


def _join(path: str, key: str) -> str:
    if not path:
        return key
    return f"{path}.{key}"


def _merge_into(target: dict[str, Any], overlay: Mapping[str, object]) -> None:
    for key in sorted(overlay):
        value = overlay[key]
        existing = target.get(key)
        if isinstance(value, Mapping) and isinstance(existing, dict):
            _merge_into(existing, value)
            continue
        target[key] = _deep_copy_value(value)


def _deep_copy_mapping(value: Mapping[str, object]) -> dict[str, Any]:
    return {key: _deep_copy_value(item) for key, item in value.items()}


def _deep_copy_value(value: object) -> Any:
    if isinstance(value, Mapping):
        return _deep_copy_mapping(value)
    if isinstance(value, list):
        return [_deep_copy_value(item) for item in value]
    return value


__all__ = [
    "AssetDigestSettings",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "DEFAULT_CONFIG",
    "DigestConfig",
    "PATH_FIELDS",
    "PATTERN_FLAGS",
    "assert_valid_config",
    "build_digest_config",
    "default_config",
    "merge_config",
    "validate_config",
]
