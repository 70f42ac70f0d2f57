"""Fingerprinting engine: scan, order, hash, rename, rewrite, and record."""

from asset_digest.fingerprint.digest_cache import DigestCache, Rename
from asset_digest.fingerprint.discovery import discover_reference_files
from asset_digest.fingerprint.errors import DigestIOError
from asset_digest.fingerprint.graph import (
    CyclicDependencyError,
    DependencyEdge,
    DependencyGraph,
    build_dependency_edges,
    schedule_reference_files,
)
from asset_digest.fingerprint.manifest import build_manifest, render_manifest, write_manifest
from asset_digest.fingerprint.paths import (
    PathResolver,
    add_hash_to_path,
    add_infix_to_path,
    relative_posix_path,
)
from asset_digest.fingerprint.placeholders import (
    PlaceholderMatch,
    iter_placeholders,
    strip_placeholders,
    substitute_placeholders,
)
from asset_digest.fingerprint.rewriter import RewriteEngine, RewriteOutcome, strip_reference_files
from asset_digest.fingerprint.runner import DigestPlan, DigestRunResult, plan_digest, run_digest

__all__ = [
    "CyclicDependencyError",
    "DependencyEdge",
    "DependencyGraph",
    "DigestCache",
    "DigestIOError",
    "DigestPlan",
    "DigestRunResult",
    "PathResolver",
    "PlaceholderMatch",
    "Rename",
    "RewriteEngine",
    "RewriteOutcome",
    "add_hash_to_path",
    "add_infix_to_path",
    "build_dependency_edges",
    "build_manifest",
    "discover_reference_files",
    "iter_placeholders",
    "plan_digest",
    "relative_posix_path",
    "render_manifest",
    "run_digest",
    "schedule_reference_files",
    "strip_placeholders",
    "strip_reference_files",
    "substitute_placeholders",
    "write_manifest",
]
