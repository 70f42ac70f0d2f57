"""
asset-digest: hashing utilities

File: src/asset_digest/utils/hashing.py

Purpose
- Provide deterministic content digests for files and raw bytes.
- Render digests as lowercase hex truncated to a configured precision.

Functional requirements
- Identical bytes always yield identical digests across runs and platforms.
- A file that cannot be read propagates ``OSError``; no partial digest is returned.

Non-functional requirements
- Standard library only; files are streamed in fixed-size chunks.
"""

from __future__ import annotations

import hashlib
import os
from pathlib import Path

from asset_digest.constants import DEFAULT_ALGORITHM, SUPPORTED_ALGORITHMS

PathLike = str | os.PathLike[str]

_FILE_READ_CHUNK_BYTES = 1024 * 1024

__all__ = [
    "digest_file",
    "digest_length",
    "truncated_file_digest",
]


def digest_length(algorithm: str = DEFAULT_ALGORITHM) -> int:
    """Return the full hex length produced by ``algorithm``."""

    try:
        return SUPPORTED_ALGORITHMS[algorithm]
    except KeyError:
        expected = ", ".join(sorted(SUPPORTED_ALGORITHMS))
        raise ValueError(
            f"unsupported digest algorithm {algorithm!r}; expected one of: {expected}"
        ) from None


def digest_file(
    path: PathLike,
    *,
    algorithm: str = DEFAULT_ALGORITHM,
    chunk_size: int = _FILE_READ_CHUNK_BYTES,
) -> str:
    """Return the full lowercase hex digest for a file read in chunks."""

    if chunk_size <= 0:
        raise ValueError("chunk_size must be > 0")
    digest_length(algorithm)
    digest = hashlib.new(algorithm)
    with Path(path).open("rb") as file_handle:
        while True:
            chunk = file_handle.read(chunk_size)
            if not chunk:
                break
            digest.update(chunk)
    return digest.hexdigest()


def truncated_file_digest(
    path: PathLike,
    precision: int,
    *,
    algorithm: str = DEFAULT_ALGORITHM,
) -> str:
    """
    Return the first ``precision`` hex characters of the digest of ``path``.

    ``precision`` must lie in ``[1, digest_length(algorithm)]`` so the result
    is always exactly ``precision`` characters long.
    """

    full_length = digest_length(algorithm)
    if isinstance(precision, bool) or not isinstance(precision, int):
        raise TypeError(f"precision must be an integer, got {type(precision).__name__}")
    if not 1 <= precision <= full_length:
        raise ValueError(f"precision must be between 1 and {full_length} for {algorithm}")
    return digest_file(path, algorithm=algorithm)[:precision]
