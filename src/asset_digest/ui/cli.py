"""Command-line interface router for asset-digest."""

from __future__ import annotations

import argparse
import os
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Final, TextIO

from asset_digest import __version__
from asset_digest.config import build_digest_config, load_config
from asset_digest.constants import DEFAULT_ENVIRONMENT, ENV_PREFIX
from asset_digest.fingerprint import plan_digest, relative_posix_path, run_digest
from asset_digest.observability import (
    LoggerDiagnostics,
    RecordingDiagnostics,
    get_logger,
    logging_config_from_settings,
    setup_logging,
    shutdown_logging,
)
from asset_digest.ui.render import CLIRenderer, create_renderer

ENVIRONMENT_VARIABLE: Final[str] = f"{ENV_PREFIX}ENV"


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse command router for all supported CLI workflows."""

    parser = argparse.ArgumentParser(
        prog="asset-digest",
        description=(
            "asset-digest: fingerprint static assets referenced from build output.\n\n"
            "Common workflows:\n"
            "  asset-digest run --env production   Hash, rename, and rewrite references\n"
            "  asset-digest plan                   Show reference order without changes\n"
            "  asset-digest config                 Print the effective configuration\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to a TOML or YAML config (default: ./digest.toml if present).",
    )
    common.add_argument(
        "--public-root",
        default=None,
        help="Build output directory to fingerprint (overrides paths.public_root).",
    )
    common.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=False,
        help="Enable debug logging.",
    )
    common.add_argument("--json", action="store_true", help="Emit deterministic JSON output")

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser(
        "run",
        parents=[common],
        help="Fingerprint assets and rewrite reference files in place.",
    )
    run_parser.add_argument(
        "--env",
        dest="environment",
        default=None,
        help=(
            f"Active build environment (default: ${ENVIRONMENT_VARIABLE} "
            f"or {DEFAULT_ENVIRONMENT!r})."
        ),
    )
    run_parser.add_argument(
        "--force",
        action="store_true",
        help="Fingerprint even when the environment is not in digest.environments.",
    )
    run_parser.add_argument(
        "--watch",
        action="store_true",
        help="Declare an on-demand (watch) build; renames are irreversible, so this warns.",
    )
    run_parser.add_argument("--manifest", default=None, help="Write a JSON manifest here.")
    run_parser.add_argument(
        "--precision", type=int, default=None, help="Hex digits of the digest to embed."
    )
    run_parser.set_defaults(handler=_cmd_run)

    plan_parser = subparsers.add_parser(
        "plan",
        parents=[common],
        help="Print reference-file dependencies and processing order without touching files.",
    )
    plan_parser.set_defaults(handler=_cmd_plan)

    config_parser = subparsers.add_parser(
        "config",
        parents=[common],
        help="Print the effective configuration.",
    )
    config_parser.set_defaults(handler=_cmd_config)

    return parser


def run_cli(
    argv: Sequence[str] | None = None,
    *,
    stdout: TextIO | None = None,
    environ: Mapping[str, str] | None = None,
    cwd: Path | None = None,
) -> int:
    """Parse ``argv`` and dispatch; configuration and engine errors propagate to the caller."""

    parser = build_parser()
    args = parser.parse_args(argv)
    args.environ = dict(os.environ if environ is None else environ)

    config = load_config(
        args.config_path,
        cli_overrides=_cli_overrides(args),
        environ=args.environ,
        cwd=cwd,
    )
    handle = setup_logging(
        logging_config_from_settings(config["observability"], verbose=args.verbose)
    )
    try:
        renderer = create_renderer(stream=stdout, verbose=args.verbose)
        return int(args.handler(args, config, renderer))
    finally:
        shutdown_logging(handle)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _cmd_run(args: argparse.Namespace, config: dict[str, Any], renderer: CLIRenderer) -> int:
    digest_config = build_digest_config(config)
    environment = _resolve_environment(args)
    diagnostics = RecordingDiagnostics(forward_to=LoggerDiagnostics(get_logger()))

    result = run_digest(
        digest_config,
        environment=environment,
        diagnostics=diagnostics,
        force=args.force,
        incremental=args.watch,
    )

    if args.json:
        payload = result.to_dict()
        payload["warnings"] = [record.as_dict() for record in diagnostics.records]
        renderer.json(payload)
        return 0

    root = result.public_root
    renderer.heading(f"asset-digest run (environment: {environment})")
    renderer.kv("public root", root)
    renderer.kv("fingerprinted", "yes" if result.fingerprinted else "no")
    renderer.kv("reference files", len(result.outcomes))
    renderer.table(
        ("original", "renamed"),
        [
            (relative_posix_path(item.source, root), relative_posix_path(item.destination, root))
            for item in result.renames
        ],
        title="Renamed files:",
    )
    if result.manifest_path is not None:
        renderer.kv("manifest", result.manifest_path)
    if diagnostics.records:
        renderer.section("Warnings:")
        for message in diagnostics.messages:
            renderer.warning(message)
    return 0


def _cmd_plan(args: argparse.Namespace, config: dict[str, Any], renderer: CLIRenderer) -> int:
    plan = plan_digest(build_digest_config(config))
    if args.json:
        renderer.json(plan.to_dict())
        return 0

    root = plan.public_root
    renderer.heading("asset-digest plan")
    renderer.kv("public root", root)
    renderer.kv("reference files", len(plan.reference_files))
    renderer.section("Processing order:")
    renderer.items([relative_posix_path(path, root) for path in plan.order])
    renderer.table(
        ("dependency", "dependent"),
        [
            (relative_posix_path(edge.dependency, root), relative_posix_path(edge.dependent, root))
            for edge in plan.edges
        ],
        title="Dependencies:",
    )
    return 0


def _cmd_config(args: argparse.Namespace, config: dict[str, Any], renderer: CLIRenderer) -> int:
    renderer.json(config)
    return 0


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _cli_overrides(args: argparse.Namespace) -> dict[str, object]:
    overrides: dict[str, object] = {
        "paths.public_root": args.public_root,
        "paths.manifest": getattr(args, "manifest", None),
        "digest.precision": getattr(args, "precision", None),
    }
    return {key: value for key, value in overrides.items() if value is not None}


def _resolve_environment(args: argparse.Namespace) -> str:
    if args.environment:
        return str(args.environment).strip()
    from_env = args.environ.get(ENVIRONMENT_VARIABLE, "").strip()
    return from_env or DEFAULT_ENVIRONMENT


__all__ = ["ENVIRONMENT_VARIABLE", "build_parser", "run_cli"]
