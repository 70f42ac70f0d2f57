"""Module entrypoint for ``python -m asset_digest``."""

from __future__ import annotations

from asset_digest.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
