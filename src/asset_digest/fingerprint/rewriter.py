"""
asset-digest: reference-file rewriting.

File: src/asset_digest/fingerprint/rewriter.py

Purpose
- Replace every placeholder in a reference file with its fingerprinted path.
- Strip placeholders down to bare paths when fingerprinting is disabled.

Functional requirements
- Each reference file is read once and written back once, in place.
- Placeholders are handled left to right; every target goes through the digest cache.
- A failed target keeps its captured path and gets no host prefix.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from asset_digest.fingerprint.digest_cache import DigestCache
from asset_digest.fingerprint.errors import DigestIOError
from asset_digest.fingerprint.paths import PathResolver, add_hash_to_path
from asset_digest.fingerprint.placeholders import PlaceholderMatch, substitute_placeholders
from asset_digest.observability.logging import get_logger
from asset_digest.utils.fs import atomic_write, encode_text_exact, read_text_exact

__all__ = [
    "RewriteEngine",
    "RewriteOutcome",
    "strip_reference_files",
]

_LOGGER = get_logger("rewriter")


@dataclass(frozen=True, slots=True)
class RewriteOutcome:
    """What happened to one reference file."""

    path: Path
    placeholders: int
    written: bool


class RewriteEngine:
    """Rewrites reference files in a caller-supplied dependency order."""

    def __init__(
        self,
        *,
        pattern: re.Pattern[str],
        resolver: PathResolver,
        cache: DigestCache,
        discard_non_filename_pattern_parts: bool = True,
        host_prefix: str | None = None,
    ) -> None:
        self._pattern = pattern
        self._resolver = resolver
        self._cache = cache
        self._discard = discard_non_filename_pattern_parts
        self._host_prefix = host_prefix

    @property
    def cache(self) -> DigestCache:
        return self._cache

    def rewrite_all(self, ordered_files: Iterable[Path]) -> list[RewriteOutcome]:
        """Rewrite ``ordered_files`` strictly in sequence."""

        return [self.rewrite_file(path) for path in ordered_files]

    def rewrite_file(self, reference: Path) -> RewriteOutcome:
        """Fingerprint every placeholder in ``reference`` and write the result back."""

        content = _read(reference)
        rewritten, count = substitute_placeholders(
            self._pattern,
            content,
            lambda placeholder: self._replacement(placeholder, reference),
        )
        if count == 0:
            return RewriteOutcome(path=reference, placeholders=0, written=False)

        _write(reference, rewritten)
        _LOGGER.debug("rewrote %s (%d placeholder(s))", reference, count)
        return RewriteOutcome(path=reference, placeholders=count, written=True)

    def hashed_url(self, captured_path: str, reference: Path) -> str:
        """Return the path a placeholder's capture should become."""

        target = self._resolver.resolve(captured_path, reference)
        digest = self._cache.obtain(target)
        if digest is None:
            return captured_path
        url = add_hash_to_path(captured_path, digest)
        if self._host_prefix is not None:
            url = self._host_prefix + url
        return url

    def _replacement(self, placeholder: PlaceholderMatch, reference: Path) -> str:
        url = self.hashed_url(placeholder.path, reference)
        if self._discard:
            return url
        return placeholder.replace_path(url)


def strip_reference_files(
    reference_files: Iterable[Path],
    pattern: re.Pattern[str],
) -> list[RewriteOutcome]:
    """Reduce every placeholder to its captured path; nothing is hashed or renamed."""

    outcomes: list[RewriteOutcome] = []
    for reference in reference_files:
        content = _read(reference)
        stripped, count = substitute_placeholders(
            pattern, content, lambda placeholder: placeholder.path
        )
        written = stripped != content
        if written:
            _write(reference, stripped)
        outcomes.append(RewriteOutcome(path=reference, placeholders=count, written=written))
    return outcomes


def _read(path: Path) -> str:
    try:
        return read_text_exact(path)
    except OSError as exc:
        raise DigestIOError("read", path, exc) from exc


def _write(path: Path, content: str) -> None:
    try:
        atomic_write(path, encode_text_exact(content))
    except OSError as exc:
        raise DigestIOError("write", path, exc) from exc
