"""
asset-digest: filesystem utilities

File: src/asset_digest/utils/fs.py

Purpose
- Provide atomic writes, guarded renames, and deterministic tree walks.

Functional requirements
- Atomic writes use temp files in the destination directory and replace in a single step.
- Renames are single-step replacements within one directory.
- Tree walks yield regular files only, in sorted order.
"""

from __future__ import annotations

import contextlib
import os
import stat
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

PathLike = str | os.PathLike[str]

__all__ = [
    "atomic_write",
    "encode_text_exact",
    "is_regular_file",
    "iter_regular_files",
    "read_text_exact",
    "replace_file",
]


def atomic_write(path: PathLike, data: bytes | str, *, encoding: str = "utf-8") -> None:
    """
    Atomically write ``data`` to ``path``.

    The write strategy is:
    1. create temp file in the same directory,
    2. write + flush + fsync file data,
    3. replace target via ``os.replace``.
    """

    target = Path(path)
    target_parent = target.parent.resolve(strict=True)
    if not target_parent.is_dir():
        raise NotADirectoryError(f"{target_parent!s} is not a directory")

    fd, temp_name = tempfile.mkstemp(
        prefix=f".{target.name}.",
        suffix=".tmp",
        dir=str(target_parent),
    )
    temp_path = Path(temp_name)

    try:
        if isinstance(data, bytes):
            with os.fdopen(fd, "wb") as file_handle:
                file_handle.write(data)
                file_handle.flush()
                os.fsync(file_handle.fileno())
        else:
            # newline="" keeps the caller's line endings byte-for-byte.
            with os.fdopen(fd, "w", encoding=encoding, newline="") as file_handle:
                file_handle.write(data)
                file_handle.flush()
                os.fsync(file_handle.fileno())

        _copy_mode(target, temp_path)
        os.replace(temp_path, target)
    except Exception:
        with contextlib.suppress(OSError):
            temp_path.unlink(missing_ok=True)
        raise


def is_regular_file(path: PathLike) -> bool:
    """Return ``True`` when ``path`` exists and is a regular file (symlinks followed)."""

    try:
        mode = os.stat(path).st_mode
    except (FileNotFoundError, NotADirectoryError):
        return False
    return stat.S_ISREG(mode)


def replace_file(source: PathLike, destination: PathLike) -> None:
    """Move ``source`` to ``destination`` in one step, replacing any previous file there."""

    if Path(source) == Path(destination):
        return
    os.replace(source, destination)


def iter_regular_files(root: PathLike) -> Iterator[Path]:
    """Yield every regular file under ``root`` in deterministic sorted order."""

    base = Path(root)
    for current_dir, dir_names, file_names in os.walk(base, topdown=True, followlinks=False):
        dir_names.sort()
        file_names.sort()
        current = Path(current_dir)
        for file_name in file_names:
            file_path = current / file_name
            try:
                mode = file_path.stat().st_mode
            except FileNotFoundError:
                # Dangling symlink or a file removed mid-walk.
                continue
            if stat.S_ISREG(mode):
                yield file_path


def _copy_mode(source: Path, destination: Path) -> None:
    try:
        mode = source.stat().st_mode
    except FileNotFoundError:
        return
    os.chmod(destination, stat.S_IMODE(mode))


def read_text_exact(path: PathLike, *, encoding: str = "utf-8") -> str:
    """Read ``path`` as text without newline translation; undecodable bytes survive a rewrite."""

    return Path(path).read_bytes().decode(encoding, "surrogateescape")


def encode_text_exact(text: str, *, encoding: str = "utf-8") -> bytes:
    """Inverse of ``read_text_exact``."""

    return text.encode(encoding, "surrogateescape")
