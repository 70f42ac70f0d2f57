"""Reference-file discovery under the public root."""

from __future__ import annotations

import os
import re
from pathlib import Path

from asset_digest.fingerprint.errors import DigestIOError
from asset_digest.fingerprint.paths import relative_posix_path
from asset_digest.utils.fs import iter_regular_files

__all__ = ["discover_reference_files"]


def discover_reference_files(
    public_root: str | os.PathLike[str],
    matcher: re.Pattern[str],
) -> list[Path]:
    """
    Return every regular file under ``public_root`` whose root-relative POSIX
    path matches ``matcher`` (``re.search`` semantics), in sorted walk order.
    """

    root = Path(os.path.normpath(os.path.abspath(public_root)))
    if not root.is_dir():
        raise DigestIOError(
            "scan", root, NotADirectoryError(f"public root is not a directory: {root}")
        )
    return [
        path
        for path in iter_regular_files(root)
        if matcher.search(relative_posix_path(path, root)) is not None
    ]
