"""Utility exports for filesystem and hashing helpers."""

from asset_digest.utils.fs import (
    atomic_write,
    encode_text_exact,
    is_regular_file,
    iter_regular_files,
    read_text_exact,
    replace_file,
)
from asset_digest.utils.hashing import (
    digest_file,
    digest_length,
    truncated_file_digest,
)

__all__ = [
    "atomic_write",
    "digest_file",
    "digest_length",
    "encode_text_exact",
    "is_regular_file",
    "iter_regular_files",
    "read_text_exact",
    "replace_file",
    "truncated_file_digest",
]
