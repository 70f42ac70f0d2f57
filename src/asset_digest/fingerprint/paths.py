"""
asset-digest: placeholder path resolution and filename mutation.

File: src/asset_digest/fingerprint/paths.py

Purpose
- Map a captured placeholder path to the absolute file it names.
- Insert digests and infixes into filenames without touching directories.

Functional requirements
- Root-relative captures (leading ``/``) and captures without a referencing
  file resolve against the public root; everything else resolves against
  the referencing file's directory.
- ``.`` and ``..`` segments are normalized away; case is preserved.
- URL paths always use POSIX separators, filesystem paths use ``os.path``.
"""

from __future__ import annotations

import os
import posixpath
from pathlib import Path
from types import ModuleType

from asset_digest.constants import HASH_SEPARATOR

PathLike = str | os.PathLike[str]

ROOT_MARKER = "/"

__all__ = [
    "PathResolver",
    "add_hash_to_path",
    "add_infix_to_path",
    "relative_posix_path",
]


class PathResolver:
    """Resolve captured placeholder paths against a fixed public root."""

    __slots__ = ("_root",)

    def __init__(self, public_root: PathLike) -> None:
        self._root = os.path.normpath(os.path.abspath(public_root))

    @property
    def public_root(self) -> Path:
        return Path(self._root)

    def resolve(self, captured_path: str, referenced_from: PathLike | None = None) -> Path:
        """Return the normalized absolute path ``captured_path`` points at."""

        if referenced_from is None or captured_path.startswith(ROOT_MARKER):
            base = self._root
            relative = captured_path.lstrip(ROOT_MARKER)
        else:
            base = os.path.dirname(os.path.abspath(referenced_from))
            relative = captured_path
        return Path(os.path.normpath(os.path.join(base, relative)))


def add_hash_to_path(path: str, digest: str | None, *, flavor: ModuleType = posixpath) -> str:
    """
    Insert ``-<digest>`` immediately before the extension of ``path``.

    ``digest`` of ``None`` (or empty) returns ``path`` unchanged. ``flavor``
    selects the path module: ``posixpath`` for URLs, ``os.path`` for files.
    """

    if not digest:
        return path
    return _insert_before_extension(path, HASH_SEPARATOR + digest, flavor)


def add_infix_to_path(path: str, infix: str, *, flavor: ModuleType = posixpath) -> str:
    """Insert ``infix`` (for example ``@2x``) immediately before the extension of ``path``."""

    return _insert_before_extension(path, infix, flavor)


def relative_posix_path(path: PathLike, root: PathLike) -> str:
    """Return ``path`` relative to ``root`` using POSIX separators."""

    relative = os.path.relpath(os.path.abspath(path), os.path.abspath(root))
    return relative.replace(os.sep, "/")


def _insert_before_extension(path: str, insert: str, flavor: ModuleType) -> str:
    directory, name = flavor.split(path)
    stem, extension = flavor.splitext(name)
    new_name = f"{stem}{insert}{extension}"
    if directory in ("", "."):
        return new_name
    return flavor.normpath(flavor.join(directory, new_name))
