"""
asset-digest: single-run orchestration.

File: src/asset_digest/fingerprint/runner.py

Purpose
- Gate fingerprinting on the active environment.
- Plan (scan + order) before any mutation, then rewrite sequentially and emit the manifest.

Functional requirements
- A dependency cycle aborts the run with the public tree untouched.
- Any fatal error leaves the manifest unwritten.
- Outside the allowed environments placeholders are stripped to bare paths
  (only when decorations are discarded) and nothing is renamed.
"""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final

from asset_digest.config.schema import DigestConfig
from asset_digest.constants import MIN_SAFE_PRECISION
from asset_digest.fingerprint.digest_cache import DigestCache, Rename
from asset_digest.fingerprint.discovery import discover_reference_files
from asset_digest.fingerprint.graph import (
    DependencyEdge,
    build_dependency_edges,
    schedule_reference_files,
)
from asset_digest.fingerprint.manifest import write_manifest
from asset_digest.fingerprint.paths import PathResolver, relative_posix_path
from asset_digest.fingerprint.rewriter import (
    RewriteEngine,
    RewriteOutcome,
    strip_reference_files,
)
from asset_digest.observability.diagnostics import DiagnosticsSink, LoggerDiagnostics
from asset_digest.observability.logging import get_logger

__all__ = [
    "DigestPlan",
    "DigestRunResult",
    "plan_digest",
    "run_digest",
]

ON_DEMAND_WARNING: Final[str] = "Not intended to be run with on-demand compilation (watch mode)"
LOW_PRECISION_WARNING: Final[str] = (
    f"Name collision more likely when less than {MIN_SAFE_PRECISION} digits of SHA used."
)

_LOGGER = get_logger("runner")


@dataclass(frozen=True, slots=True)
class DigestPlan:
    """Read-only view of the dependency scan and the resulting processing order."""

    public_root: Path
    reference_files: tuple[Path, ...]
    edges: tuple[DependencyEdge, ...]
    order: tuple[Path, ...]

    def to_dict(self) -> dict[str, object]:
        root = self.public_root
        return {
            "reference_files": [relative_posix_path(path, root) for path in self.reference_files],
            "edges": [
                [
                    relative_posix_path(edge.dependency, root),
                    relative_posix_path(edge.dependent, root),
                ]
                for edge in self.edges
            ],
            "order": [relative_posix_path(path, root) for path in self.order],
        }


@dataclass(frozen=True, slots=True)
class DigestRunResult:
    """Outcome of one ``run_digest`` invocation."""

    environment: str
    public_root: Path
    fingerprinted: bool
    outcomes: tuple[RewriteOutcome, ...] = ()
    digests: Mapping[Path, str | None] = field(default_factory=dict)
    renames: tuple[Rename, ...] = ()
    manifest: dict[str, str] | None = None
    manifest_path: Path | None = None

    @property
    def order(self) -> tuple[Path, ...]:
        return tuple(outcome.path for outcome in self.outcomes)

    @property
    def missing_targets(self) -> tuple[Path, ...]:
        return tuple(sorted(path for path, digest in self.digests.items() if digest is None))

    def to_dict(self) -> dict[str, object]:
        root = self.public_root
        return {
            "environment": self.environment,
            "fingerprinted": self.fingerprinted,
            "processed": [relative_posix_path(path, root) for path in self.order],
            "rewritten": [
                relative_posix_path(outcome.path, root)
                for outcome in self.outcomes
                if outcome.written
            ],
            "renames": {
                relative_posix_path(rename.source, root): relative_posix_path(
                    rename.destination, root
                )
                for rename in self.renames
            },
            "missing": [relative_posix_path(path, root) for path in self.missing_targets],
            "manifest_path": str(self.manifest_path) if self.manifest_path is not None else None,
        }


def plan_digest(config: DigestConfig, files: Sequence[Path] | None = None) -> DigestPlan:
    """Scan reference files and compute their processing order without mutating anything."""

    reference_files = _reference_files(config, files)
    resolver = PathResolver(config.public_root)
    edges = build_dependency_edges(reference_files, config.pattern, resolver)
    order = schedule_reference_files(edges, reference_files)
    return DigestPlan(
        public_root=config.public_root,
        reference_files=tuple(reference_files),
        edges=tuple(edges),
        order=tuple(order),
    )


def run_digest(
    config: DigestConfig,
    *,
    environment: str,
    diagnostics: DiagnosticsSink | None = None,
    force: bool = False,
    incremental: bool = False,
    files: Sequence[Path] | None = None,
) -> DigestRunResult:
    """Fingerprint the public tree for ``environment`` and return what changed."""

    sink = diagnostics if diagnostics is not None else LoggerDiagnostics(get_logger())

    if not config.should_run(environment, force=force):
        _LOGGER.info("fingerprinting disabled for environment %r", environment)
        outcomes: list[RewriteOutcome] = []
        if config.discard_non_filename_pattern_parts:
            outcomes = strip_reference_files(_reference_files(config, files), config.pattern)
        return DigestRunResult(
            environment=environment,
            public_root=config.public_root,
            fingerprinted=False,
            outcomes=tuple(outcomes),
        )

    if incremental:
        sink.warn(ON_DEMAND_WARNING)
    if config.precision < MIN_SAFE_PRECISION:
        sink.warn(LOW_PRECISION_WARNING, precision=str(config.precision))

    plan = plan_digest(config, files)
    _LOGGER.info(
        "fingerprinting %d reference file(s) for environment %r",
        len(plan.order),
        environment,
    )

    cache = DigestCache(
        diagnostics=sink,
        precision=config.precision,
        algorithm=config.algorithm,
        infixes=config.infixes,
    )
    engine = RewriteEngine(
        pattern=config.pattern,
        resolver=PathResolver(config.public_root),
        cache=cache,
        discard_non_filename_pattern_parts=config.discard_non_filename_pattern_parts,
        host_prefix=config.host_prefix(environment),
    )
    outcomes = engine.rewrite_all(plan.order)

    manifest: dict[str, str] | None = None
    if config.manifest is not None:
        manifest = write_manifest(config.manifest, cache.entries, config.public_root)
        _LOGGER.info("wrote manifest with %d entries to %s", len(manifest), config.manifest)

    return DigestRunResult(
        environment=environment,
        public_root=config.public_root,
        fingerprinted=True,
        outcomes=tuple(outcomes),
        digests=dict(cache.entries),
        renames=cache.renames,
        manifest=manifest,
        manifest_path=config.manifest,
    )


def _reference_files(config: DigestConfig, files: Sequence[Path] | None) -> list[Path]:
    if files is None:
        return discover_reference_files(config.public_root, config.reference_files)
    # Graph nodes are keyed by normalized absolute paths.
    return [Path(os.path.normpath(os.path.abspath(path))) for path in files]
