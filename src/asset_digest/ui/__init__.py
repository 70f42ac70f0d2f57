"""Command-line surface for asset-digest."""

from asset_digest.ui.cli import build_parser, run_cli
from asset_digest.ui.render import CLIRenderer, create_renderer

__all__ = ["CLIRenderer", "build_parser", "create_renderer", "run_cli"]
