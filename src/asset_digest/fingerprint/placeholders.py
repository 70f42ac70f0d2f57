"""Placeholder scanning and substitution over reference-file content."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass

__all__ = [
    "PlaceholderMatch",
    "iter_placeholders",
    "strip_placeholders",
    "substitute_placeholders",
]


@dataclass(frozen=True, slots=True)
class PlaceholderMatch:
    """One placeholder occurrence with its full span and the captured path span."""

    start: int
    end: int
    path_start: int
    path_end: int
    text: str
    path: str

    def replace_path(self, replacement: str) -> str:
        """Return the placeholder text with only the captured path swapped out."""

        offset_start = self.path_start - self.start
        offset_end = self.path_end - self.start
        return self.text[:offset_start] + replacement + self.text[offset_end:]


def iter_placeholders(pattern: re.Pattern[str], content: str) -> Iterator[PlaceholderMatch]:
    """
    Yield every non-overlapping placeholder in ``content``, left to right.

    Each call starts a fresh scan; no cursor state is shared between calls.
    Matches whose capture group did not participate are skipped.
    """

    for match in pattern.finditer(content):
        path = match.group(1)
        if path is None:
            continue
        path_start, path_end = match.span(1)
        yield PlaceholderMatch(
            start=match.start(),
            end=match.end(),
            path_start=path_start,
            path_end=path_end,
            text=match.group(0),
            path=path,
        )


def substitute_placeholders(
    pattern: re.Pattern[str],
    content: str,
    replacer: Callable[[PlaceholderMatch], str],
) -> tuple[str, int]:
    """Replace each placeholder with ``replacer(match)``; return new content and count."""

    pieces: list[str] = []
    cursor = 0
    count = 0
    for placeholder in iter_placeholders(pattern, content):
        pieces.append(content[cursor : placeholder.start])
        pieces.append(replacer(placeholder))
        cursor = placeholder.end
        count += 1
    pieces.append(content[cursor:])
    return "".join(pieces), count


def strip_placeholders(pattern: re.Pattern[str], content: str) -> str:
    """Reduce every placeholder to its bare captured path."""

    stripped, _ = substitute_placeholders(pattern, content, lambda placeholder: placeholder.path)
    return stripped
