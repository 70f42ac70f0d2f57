"""
asset-digest — end-to-end smoke test

File: tests/smoke/test_end_to_end.py

Purpose
- Run ``python -m asset_digest`` as a subprocess over a realistic public tree and
  check renamed assets, rewritten references, nested dependencies, and the manifest.
"""

from __future__ import annotations

import hashlib
import json
import os
import subprocess
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
SRC_PATH = PROJECT_ROOT / "src"


def _run_cli(cwd: Path, *args: str) -> subprocess.CompletedProcess[str]:
    env = os.environ.copy()
    existing_pythonpath = env.get("PYTHONPATH")
    src_pythonpath = str(SRC_PATH)
    env["PYTHONPATH"] = (
        src_pythonpath if not existing_pythonpath else f"{src_pythonpath}:{existing_pythonpath}"
    )
    env.pop("ASSET_DIGEST_ENV", None)
    return subprocess.run(
        [sys.executable, "-m", "asset_digest", *args],
        cwd=cwd,
        text=True,
        capture_output=True,
        check=False,
        env=env,
    )


def _write(path: Path, contents: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(contents, encoding="utf-8")


def _sha1(data: bytes) -> str:
    return hashlib.sha1(data).hexdigest()[:8]


@pytest.mark.smoke
def test_end_to_end_fingerprint_run(tmp_path: Path) -> None:
    _write(
        tmp_path / "digest.toml",
        """
[digest]
infixes = ["@2x"]

[digest.prepend_host]
production = "https://cdn.example.com"

[paths]
public_root = "public"
manifest = "build/manifest.json"
""".strip(),
    )
    public = tmp_path / "public"
    _write(public / "img" / "logo.png", "logo-1x")
    _write(public / "img" / "logo@2x.png", "logo-2x")
    _write(public / "partials" / "header.html", '<img src="DIGEST(/img/logo.png)">')
    _write(
        public / "index.html",
        '<link href="DIGEST(/partials/header.html)"><img src="DIGEST(/img/logo.png)">',
    )

    completed = _run_cli(tmp_path, "run", "--env", "production", "--json")

    assert completed.returncode == 0, completed.stderr
    payload = json.loads(completed.stdout)
    assert payload["processed"] == ["partials/header.html", "index.html"]

    logo = _sha1(b"logo-1x")
    header_text = f'<img src="https://cdn.example.com/img/logo-{logo}.png">'
    header = _sha1(header_text.encode("utf-8"))
    assert (public / "img" / f"logo-{logo}.png").read_text(encoding="utf-8") == "logo-1x"
    assert (public / "img" / f"logo-{logo}@2x.png").read_text(encoding="utf-8") == "logo-2x"
    assert (public / "partials" / f"header-{header}.html").read_text(
        encoding="utf-8"
    ) == header_text
    assert (public / "index.html").read_text(encoding="utf-8") == (
        f'<link href="https://cdn.example.com/partials/header-{header}.html">'
        f'<img src="https://cdn.example.com/img/logo-{logo}.png">'
    )

    manifest = json.loads((tmp_path / "build" / "manifest.json").read_text(encoding="utf-8"))
    assert manifest == {
        "img/logo.png": f"img/logo-{logo}.png",
        "partials/header.html": f"partials/header-{header}.html",
    }


@pytest.mark.smoke
def test_end_to_end_cycle_exit_code(tmp_path: Path) -> None:
    _write(tmp_path / "public" / "a.html", "DIGEST(b.html)")
    _write(tmp_path / "public" / "b.html", "DIGEST(a.html)")

    completed = _run_cli(tmp_path, "run", "--env", "production")

    assert completed.returncode == 3
    assert "dependency cycle" in completed.stderr
    assert (tmp_path / "public" / "a.html").read_text(encoding="utf-8") == "DIGEST(b.html)"
