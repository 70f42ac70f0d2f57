"""Unit tests for fingerprint.placeholders."""

from __future__ import annotations

import re

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from asset_digest.constants import DEFAULT_PATTERN
from asset_digest.fingerprint.placeholders import (
    iter_placeholders,
    strip_placeholders,
    substitute_placeholders,
)

PATTERN = re.compile(DEFAULT_PATTERN)


@pytest.mark.unit
def test_iter_placeholders_yields_spans_left_to_right() -> None:
    content = '<link href="DIGEST(/app.css)"><script src="DIGEST(js/app.js)"></script>'

    found = list(iter_placeholders(PATTERN, content))

    assert [item.path for item in found] == ["/app.css", "js/app.js"]
    assert [item.text for item in found] == ["DIGEST(/app.css)", "DIGEST(js/app.js)"]
    first = found[0]
    assert content[first.start : first.end] == first.text
    assert content[first.path_start : first.path_end] == "/app.css"


@pytest.mark.unit
def test_scans_are_restartable_and_independent() -> None:
    content = "DIGEST(/a.css) DIGEST(/b.css)"

    iterator = iter_placeholders(PATTERN, content)
    assert next(iterator).path == "/a.css"

    # A second scan starts from the beginning regardless of the first one.
    assert [item.path for item in iter_placeholders(PATTERN, content)] == ["/a.css", "/b.css"]
    assert next(iterator).path == "/b.css"


@pytest.mark.unit
def test_matches_without_participating_group_are_skipped() -> None:
    pattern = re.compile(r"ASSET(?:\[(\w+\.css)\]|\{\})")

    found = list(iter_placeholders(pattern, "ASSET{} ASSET[a.css]"))

    assert [item.path for item in found] == ["a.css"]


@pytest.mark.unit
def test_replace_path_keeps_decorations() -> None:
    (placeholder,) = iter_placeholders(PATTERN, "x DIGEST(/app.css) y")

    assert placeholder.replace_path("/app-1234.css") == "DIGEST(/app-1234.css)"


@pytest.mark.unit
def test_substitute_counts_replacements() -> None:
    content, count = substitute_placeholders(
        PATTERN, "a DIGEST(/x.css) b DIGEST(/y.css) c", lambda item: item.path.upper()
    )

    assert content == "a /X.CSS b /Y.CSS c"
    assert count == 2


@pytest.mark.unit
def test_strip_reduces_placeholders_to_paths() -> None:
    assert strip_placeholders(PATTERN, '<a href="DIGEST(/app.css)">') == '<a href="/app.css">'


_plain_text = st.text(alphabet="abcdefghijklmnopqrstuvwxyz <>=\"/.\n", max_size=40)
_asset_path = st.text(alphabet="abcdefghijklmnopqrstuvwxyz/.-_", min_size=1, max_size=20)
_placeholder = _asset_path.map(lambda path: f"DIGEST({path})")


@pytest.mark.unit
@settings(max_examples=200, deadline=None)
@given(segments=st.lists(st.one_of(_plain_text, _placeholder), max_size=12))
def test_stripping_is_idempotent(segments: list[str]) -> None:
    content = "".join(segments)

    once = strip_placeholders(PATTERN, content)

    assert strip_placeholders(PATTERN, once) == once
    assert "DIGEST(" not in once
