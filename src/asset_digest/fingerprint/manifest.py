"""Manifest of original to fingerprinted paths, relative to the public root."""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from pathlib import Path

from asset_digest.constants import MANIFEST_INDENT
from asset_digest.fingerprint.errors import DigestIOError
from asset_digest.fingerprint.paths import add_hash_to_path, relative_posix_path
from asset_digest.utils.fs import atomic_write

__all__ = [
    "build_manifest",
    "render_manifest",
    "write_manifest",
]


def build_manifest(
    digests: Mapping[Path, str | None],
    public_root: str | os.PathLike[str],
) -> dict[str, str]:
    """
    Map each hashed target's root-relative POSIX path to its hashed counterpart.

    Failed targets and targets outside ``public_root`` are omitted.
    """

    manifest: dict[str, str] = {}
    for target, digest in digests.items():
        if not digest:
            continue
        relative = relative_posix_path(target, public_root)
        if relative == ".." or relative.startswith("../"):
            continue
        manifest[relative] = add_hash_to_path(relative, digest)
    return dict(sorted(manifest.items()))


def render_manifest(manifest: Mapping[str, str]) -> str:
    """Serialize ``manifest`` as deterministic, indented JSON."""

    return json.dumps(dict(manifest), indent=MANIFEST_INDENT, sort_keys=True, ensure_ascii=False)


def write_manifest(
    destination: str | os.PathLike[str],
    digests: Mapping[Path, str | None],
    public_root: str | os.PathLike[str],
) -> dict[str, str]:
    """Build the manifest and write it atomically to ``destination``."""

    manifest = build_manifest(digests, public_root)
    target = Path(destination)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        atomic_write(target, render_manifest(manifest) + "\n")
    except OSError as exc:
        raise DigestIOError("write manifest", target, exc) from exc
    return manifest
