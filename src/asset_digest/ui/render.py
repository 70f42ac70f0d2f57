"""Output rendering for the asset-digest CLI.

Purpose
- Provide a thin rendering layer for deterministic plain-text CLI output.
- Keep JSON output byte-stable for scripting.
"""

from __future__ import annotations

import json
import sys
from collections.abc import Mapping, Sequence
from typing import TextIO


class CLIRenderer:
    """Thin CLI output renderer writing to a single stream."""

    def __init__(self, *, stream: TextIO | None = None, verbose: bool = False) -> None:
        self.verbose = verbose
        self._stream = stream if stream is not None else sys.stdout

    def heading(self, text: str) -> None:
        """Print a heading line."""

        print(text, file=self._stream)

    def kv(self, key: str, value: object) -> None:
        """Print a key: value pair."""

        print(f"{key}: {value}", file=self._stream)

    def section(self, title: str) -> None:
        """Print a section header with a preceding blank line."""

        print(f"\n{title}", file=self._stream)

    def warning(self, text: str) -> None:
        print(f"  Warning: {text}", file=self._stream)

    def items(self, entries: Sequence[str], *, prefix: str = "- ") -> None:
        """Print a bulleted list."""

        for entry in entries:
            print(f"  {prefix}{entry}", file=self._stream)

    def table(
        self,
        headers: Sequence[str],
        rows: Sequence[Sequence[str]],
        *,
        title: str | None = None,
    ) -> None:
        """Print a formatted ASCII table."""

        if not rows:
            return

        col_count = len(headers)
        widths = [len(h) for h in headers]
        for row in rows:
            for i in range(min(len(row), col_count)):
                widths[i] = max(widths[i], len(str(row[i])))

        def _pad(cells: Sequence[str]) -> str:
            parts: list[str] = []
            for i in range(col_count):
                cell = str(cells[i]) if i < len(cells) else ""
                parts.append(cell.ljust(widths[i]))
            return "  ".join(parts).rstrip()

        if title:
            self.section(title)
        print(f"  {_pad(list(headers))}", file=self._stream)
        print(f"  {'  '.join('-' * w for w in widths)}", file=self._stream)
        for row in rows:
            print(f"  {_pad(list(row))}", file=self._stream)

    def json(self, payload: Mapping[str, object]) -> None:
        """Print ``payload`` as deterministic indented JSON."""

        print(json.dumps(payload, sort_keys=True, indent=2, ensure_ascii=False), file=self._stream)


def create_renderer(*, stream: TextIO | None = None, verbose: bool = False) -> CLIRenderer:
    """Create a CLI renderer with the given settings."""

    return CLIRenderer(stream=stream, verbose=verbose)


__all__ = ["CLIRenderer", "create_renderer"]
