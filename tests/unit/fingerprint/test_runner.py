"""
asset-digest — unit tests for the single-run orchestration

File: tests/unit/fingerprint/test_runner.py

Purpose
- Exercise ``run_digest`` and ``plan_digest`` against small on-disk public trees.

What this test file should cover
- Renames, rewrites, and manifest output for a plain run.
- Dependency ordering between reference files.
- Cycles and I/O failures aborting before any manifest is written.
- Environment gating, stripping, and run-level warnings.
"""

from __future__ import annotations

import hashlib
import json
import tempfile
from pathlib import Path

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from asset_digest.config.schema import DigestConfig
from asset_digest.fingerprint import runner as runner_module
from asset_digest.fingerprint.errors import DigestIOError
from asset_digest.fingerprint.graph import CyclicDependencyError
from asset_digest.fingerprint.runner import (
    LOW_PRECISION_WARNING,
    ON_DEMAND_WARNING,
    plan_digest,
    run_digest,
)
from asset_digest.observability.diagnostics import RecordingDiagnostics


def _sha1(data: bytes, precision: int = 8) -> str:
    return hashlib.sha1(data).hexdigest()[:precision]


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def _snapshot(root: Path) -> dict[str, bytes]:
    return {
        path.relative_to(root).as_posix(): path.read_bytes()
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


@pytest.mark.unit
def test_single_reference_is_fingerprinted_with_manifest(tmp_path: Path) -> None:
    root = tmp_path / "public"
    _write(root / "app.css", "body{}")
    _write(root / "index.html", '<link href="DIGEST(/app.css)">')
    manifest_path = tmp_path / "manifest.json"
    config = DigestConfig(public_root=root, manifest=manifest_path)

    result = run_digest(config, environment="production", diagnostics=RecordingDiagnostics())

    digest = _sha1(b"body{}")
    assert result.fingerprinted is True
    assert (root / "index.html").read_text(encoding="utf-8") == (
        f'<link href="/app-{digest}.css">'
    )
    assert not (root / "app.css").exists()
    assert (root / f"app-{digest}.css").read_text(encoding="utf-8") == "body{}"
    assert json.loads(manifest_path.read_text(encoding="utf-8")) == {
        "app.css": f"app-{digest}.css"
    }
    assert result.manifest == {"app.css": f"app-{digest}.css"}
    assert result.to_dict()["renames"] == {"app.css": f"app-{digest}.css"}


@pytest.mark.unit
def test_dependencies_are_rewritten_before_their_dependents(tmp_path: Path) -> None:
    root = tmp_path / "public"
    _write(root / "img.png", "PNG")
    _write(root / "a.html", "DIGEST(b.html)")
    _write(root / "b.html", "DIGEST(img.png)")
    config = DigestConfig(public_root=root)

    result = run_digest(config, environment="production", diagnostics=RecordingDiagnostics())

    img_digest = _sha1(b"PNG")
    rewritten_b = f"img-{img_digest}.png"
    b_digest = _sha1(rewritten_b.encode("utf-8"))
    assert result.order == (root / "b.html", root / "a.html")
    assert (root / f"b-{b_digest}.html").read_text(encoding="utf-8") == rewritten_b
    assert (root / "a.html").read_text(encoding="utf-8") == f"b-{b_digest}.html"
    assert (root / f"img-{img_digest}.png").exists()


@pytest.mark.unit
def test_cycle_aborts_before_any_mutation(tmp_path: Path) -> None:
    root = tmp_path / "public"
    _write(root / "a.html", "DIGEST(b.html)")
    _write(root / "b.html", "DIGEST(a.html)")
    _write(root / "c.html", "DIGEST(app.css)")
    _write(root / "app.css", "body{}")
    manifest_path = tmp_path / "manifest.json"
    before = _snapshot(root)

    with pytest.raises(CyclicDependencyError) as error:
        run_digest(
            DigestConfig(public_root=root, manifest=manifest_path),
            environment="production",
            diagnostics=RecordingDiagnostics(),
        )

    assert error.value.members == (str(root / "a.html"), str(root / "b.html"))
    assert _snapshot(root) == before
    assert not manifest_path.exists()


@pytest.mark.unit
def test_disabled_environment_strips_placeholders(tmp_path: Path) -> None:
    root = tmp_path / "public"
    _write(root / "app.css", "body{}")
    _write(root / "index.html", "DIGEST(/app.css)")
    manifest_path = tmp_path / "manifest.json"
    config = DigestConfig(public_root=root, manifest=manifest_path)

    result = run_digest(config, environment="development", diagnostics=RecordingDiagnostics())

    assert result.fingerprinted is False
    assert (root / "index.html").read_text(encoding="utf-8") == "/app.css"
    assert (root / "app.css").exists()
    assert not manifest_path.exists()


@pytest.mark.unit
def test_disabled_environment_keeping_decorations_changes_nothing(tmp_path: Path) -> None:
    root = tmp_path / "public"
    _write(root / "app.css", "body{}")
    _write(root / "index.html", "DIGEST(/app.css)")
    before = _snapshot(root)
    config = DigestConfig(public_root=root, discard_non_filename_pattern_parts=False)

    result = run_digest(config, environment="development", diagnostics=RecordingDiagnostics())

    assert result.outcomes == ()
    assert _snapshot(root) == before


@pytest.mark.unit
def test_force_and_always_run_override_environment_gate(tmp_path: Path) -> None:
    root = tmp_path / "public"
    _write(root / "app.css", "body{}")
    _write(root / "index.html", "DIGEST(/app.css)")

    forced = run_digest(
        DigestConfig(public_root=root),
        environment="test",
        diagnostics=RecordingDiagnostics(),
        force=True,
    )

    assert forced.fingerprinted is True
    assert DigestConfig(public_root=root, always_run=True).should_run("test") is True


@pytest.mark.unit
def test_run_level_warnings_are_reported(tmp_path: Path) -> None:
    root = tmp_path / "public"
    _write(root / "index.html", "no placeholders")
    diagnostics = RecordingDiagnostics()

    run_digest(
        DigestConfig(public_root=root, precision=4),
        environment="production",
        diagnostics=diagnostics,
        incremental=True,
    )

    assert diagnostics.messages == (ON_DEMAND_WARNING, LOW_PRECISION_WARNING)


@pytest.mark.unit
def test_missing_target_is_reported_and_excluded_from_manifest(tmp_path: Path) -> None:
    root = tmp_path / "public"
    _write(root / "index.html", "DIGEST(/gone.js)")
    manifest_path = tmp_path / "manifest.json"
    diagnostics = RecordingDiagnostics()

    result = run_digest(
        DigestConfig(public_root=root, manifest=manifest_path),
        environment="production",
        diagnostics=diagnostics,
    )

    assert result.missing_targets == (root / "gone.js",)
    assert result.to_dict()["missing"] == ["gone.js"]
    assert (root / "index.html").read_text(encoding="utf-8") == "/gone.js"
    assert json.loads(manifest_path.read_text(encoding="utf-8")) == {}
    assert len(diagnostics.records) == 1


@pytest.mark.unit
def test_io_failure_leaves_manifest_unwritten(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    root = tmp_path / "public"
    _write(root / "app.css", "body{}")
    _write(root / "index.html", "DIGEST(/app.css)")
    manifest_path = tmp_path / "manifest.json"

    def _broken_rewrite_all(self: object, ordered_files: object) -> list[object]:
        raise DigestIOError("write", root / "index.html", PermissionError("denied"))

    monkeypatch.setattr(runner_module.RewriteEngine, "rewrite_all", _broken_rewrite_all)

    with pytest.raises(DigestIOError):
        run_digest(
            DigestConfig(public_root=root, manifest=manifest_path),
            environment="production",
            diagnostics=RecordingDiagnostics(),
        )

    assert not manifest_path.exists()


@pytest.mark.unit
def test_explicit_file_list_bypasses_discovery(tmp_path: Path) -> None:
    root = tmp_path / "public"
    _write(root / "app.css", "body{}")
    chosen = _write(root / "chosen.html", "DIGEST(/app.css)")
    ignored = _write(root / "ignored.html", "DIGEST(/app.css)")

    result = run_digest(
        DigestConfig(public_root=root),
        environment="production",
        diagnostics=RecordingDiagnostics(),
        files=[chosen],
    )

    assert result.order == (chosen,)
    assert ignored.read_text(encoding="utf-8") == "DIGEST(/app.css)"


@pytest.mark.unit
def test_relative_file_list_keeps_dependency_order(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    root = tmp_path.resolve() / "public"
    _write(root / "img.png", "PNG")
    _write(root / "a.html", "DIGEST(/b.html)")
    _write(root / "b.html", "DIGEST(/img.png)")
    monkeypatch.chdir(tmp_path)
    files = [Path("public/a.html"), Path("./public/sub/../b.html")]
    config = DigestConfig(public_root=root)

    plan = plan_digest(config, files)
    result = run_digest(
        config, environment="production", diagnostics=RecordingDiagnostics(), files=files
    )

    assert plan.order == (root / "b.html", root / "a.html")
    assert result.order == (root / "b.html", root / "a.html")
    img_digest = _sha1(b"PNG")
    b_digest = _sha1(f"/img-{img_digest}.png".encode("utf-8"))
    assert (root / "a.html").read_text(encoding="utf-8") == f"/b-{b_digest}.html"


@pytest.mark.unit
def test_plan_digest_is_read_only(tmp_path: Path) -> None:
    root = tmp_path / "public"
    _write(root / "img.png", "PNG")
    _write(root / "a.html", "DIGEST(b.html)")
    _write(root / "b.html", "DIGEST(img.png)")
    before = _snapshot(root)

    plan = plan_digest(DigestConfig(public_root=root))

    assert _snapshot(root) == before
    assert plan.to_dict() == {
        "reference_files": ["a.html", "b.html"],
        "edges": [["b.html", "a.html"], ["img.png", "b.html"]],
        "order": ["b.html", "a.html"],
    }


@pytest.mark.unit
def test_missing_public_root_raises_digest_io_error(tmp_path: Path) -> None:
    with pytest.raises(DigestIOError) as error:
        plan_digest(DigestConfig(public_root=tmp_path / "nope"))

    assert error.value.operation == "scan"


@pytest.mark.unit
@settings(max_examples=25, deadline=None, suppress_health_check=[HealthCheck.too_slow])
@given(
    references=st.lists(
        st.lists(st.sampled_from(["a.css", "b.js", "c.png", "missing.gif"]), max_size=4),
        min_size=1,
        max_size=4,
    )
)
def test_every_target_is_renamed_at_most_once(references: list[list[str]]) -> None:
    with tempfile.TemporaryDirectory() as scratch:
        root = Path(scratch) / "public"
        for name in ("a.css", "b.js", "c.png"):
            _write(root / name, name)
        for index, targets in enumerate(references):
            _write(root / f"page{index}.html", " ".join(f"DIGEST(/{t})" for t in targets))

        result = run_digest(
            DigestConfig(public_root=root),
            environment="production",
            diagnostics=RecordingDiagnostics(),
        )

        sources = [rename.source for rename in result.renames]
        assert len(sources) == len(set(sources))
        referenced = {name for targets in references for name in targets}
        assert {path.name for path in result.digests} == referenced
        for name in referenced - {"missing.gif"}:
            assert not (root / name).exists()
