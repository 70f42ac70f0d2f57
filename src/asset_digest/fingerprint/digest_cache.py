"""
asset-digest: memoizing digest cache.

File: src/asset_digest/fingerprint/digest_cache.py

Purpose
- Hash and rename each target file at most once per run.
- Remember failures so a missing target is reported once and never retried.

Functional requirements
- Keys are normalized absolute pre-rename paths; entries never change once set.
- A hit returns the stored digest (or ``None`` for a failed target) without I/O.
- Infix siblings (for example ``logo@2x.png``) are renamed with the primary's digest.
"""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType

from asset_digest.constants import DEFAULT_ALGORITHM, DEFAULT_PRECISION
from asset_digest.fingerprint.errors import DigestIOError
from asset_digest.fingerprint.paths import add_hash_to_path, add_infix_to_path
from asset_digest.observability.diagnostics import DiagnosticsSink
from asset_digest.utils.fs import is_regular_file, replace_file
from asset_digest.utils.hashing import truncated_file_digest

__all__ = ["DigestCache", "Rename"]


@dataclass(frozen=True, slots=True)
class Rename:
    """A physical rename performed while fingerprinting."""

    source: Path
    destination: Path


class DigestCache:
    """Lazily computes, records, and applies target-file digests."""

    __slots__ = ("_algorithm", "_diagnostics", "_entries", "_infixes", "_precision", "_renames")

    def __init__(
        self,
        *,
        diagnostics: DiagnosticsSink,
        precision: int = DEFAULT_PRECISION,
        algorithm: str = DEFAULT_ALGORITHM,
        infixes: Sequence[str] = (),
    ) -> None:
        self._diagnostics = diagnostics
        self._precision = precision
        self._algorithm = algorithm
        self._infixes = tuple(infixes)
        self._entries: dict[Path, str | None] = {}
        self._renames: list[Rename] = []

    @property
    def entries(self) -> Mapping[Path, str | None]:
        """Read-only view of every resolved target and its digest (``None`` on failure)."""
        return MappingProxyType(self._entries)

    @property
    def renames(self) -> tuple[Rename, ...]:
        return tuple(self._renames)

    def obtain(self, target: Path) -> str | None:
        """Return the digest for ``target``, hashing and renaming it on first use."""

        if target in self._entries:
            return self._entries[target]

        if not self._is_valid_target(target):
            self._entries[target] = None
            return None

        try:
            digest = truncated_file_digest(target, self._precision, algorithm=self._algorithm)
        except OSError as exc:
            raise DigestIOError("hash", target, exc) from exc

        self._move_with_siblings(target, digest)
        self._entries[target] = digest
        return digest

    def _is_valid_target(self, target: Path) -> bool:
        if not os.path.lexists(target):
            self._diagnostics.warn(
                f"Missing hashed version of file {target}. Skipping.", path=str(target)
            )
            return False
        return is_regular_file(target)

    def _move_with_siblings(self, target: Path, digest: str) -> None:
        hashed = Path(add_hash_to_path(str(target), digest, flavor=os.path))
        self._rename(target, hashed)

        for infix in self._infixes:
            sibling = Path(add_infix_to_path(str(target), infix, flavor=os.path))
            if not is_regular_file(sibling):
                continue
            hashed_sibling = Path(add_infix_to_path(str(hashed), infix, flavor=os.path))
            self._rename(sibling, hashed_sibling)

    def _rename(self, source: Path, destination: Path) -> None:
        try:
            replace_file(source, destination)
        except OSError as exc:
            raise DigestIOError("rename", source, exc) from exc
        self._renames.append(Rename(source=source, destination=destination))
