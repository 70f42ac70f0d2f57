"""Unit tests for fingerprint.manifest."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from asset_digest.fingerprint.errors import DigestIOError
from asset_digest.fingerprint.manifest import build_manifest, render_manifest, write_manifest


@pytest.mark.unit
def test_build_manifest_maps_relative_paths_and_skips_failures(tmp_path: Path) -> None:
    digests = {
        tmp_path / "css" / "app.css": "0123abcd",
        tmp_path / "app.js": "deadbeef",
        tmp_path / "missing.png": None,
    }

    manifest = build_manifest(digests, tmp_path)

    assert manifest == {
        "app.js": "app-deadbeef.js",
        "css/app.css": "css/app-0123abcd.css",
    }
    assert list(manifest) == sorted(manifest)


@pytest.mark.unit
def test_build_manifest_omits_targets_outside_root(tmp_path: Path) -> None:
    root = tmp_path / "public"
    digests = {
        tmp_path / "shared" / "lib.js": "aaaa1111",
        root / "index.css": "bbbb2222",
    }

    assert build_manifest(digests, root) == {"index.css": "index-bbbb2222.css"}


@pytest.mark.unit
def test_render_manifest_is_deterministic() -> None:
    rendered = render_manifest({"b.css": "b-1.css", "a.css": "a-2.css"})

    assert rendered == '{\n    "a.css": "a-2.css",\n    "b.css": "b-1.css"\n}'


@pytest.mark.unit
def test_write_manifest_creates_parent_directories(tmp_path: Path) -> None:
    destination = tmp_path / "build" / "meta" / "manifest.json"

    written = write_manifest(destination, {tmp_path / "app.css": "cafebabe"}, tmp_path)

    assert written == {"app.css": "app-cafebabe.css"}
    text = destination.read_text(encoding="utf-8")
    assert text.endswith("}\n")
    assert json.loads(text) == written


@pytest.mark.unit
def test_empty_manifest_is_still_written(tmp_path: Path) -> None:
    destination = tmp_path / "manifest.json"

    assert write_manifest(destination, {}, tmp_path) == {}
    assert destination.read_text(encoding="utf-8") == "{}\n"


@pytest.mark.unit
def test_write_manifest_wraps_os_errors(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("file, not a directory", encoding="utf-8")

    with pytest.raises(DigestIOError) as error:
        write_manifest(blocker / "manifest.json", {}, tmp_path)

    assert error.value.operation == "write manifest"
