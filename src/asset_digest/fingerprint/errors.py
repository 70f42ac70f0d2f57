"""Error types raised by the fingerprinting engine."""

from __future__ import annotations

import os
from pathlib import Path


class DigestIOError(OSError):
    """A read, write, or rename of ``path`` failed for a reason other than a missing target."""

    def __init__(self, operation: str, path: str | os.PathLike[str], cause: BaseException) -> None:
        self.operation = operation
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"unable to {operation} {self.path!s}: {cause}")


__all__ = ["DigestIOError"]
