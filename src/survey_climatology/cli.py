"""
Command-line interface for the application.

This module provides the main entry point for the CLI.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from survey_climatology import __version__
from survey_climatology.config import get_settings
from survey_climatology.errors import ClimatologyError
from survey_climatology.flows.climatology import GROUPINGS, build_climatology
from survey_climatology.raster.grid import build_grid
from survey_climatology.schemas import Result


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="survey-climatology",
        description="Effort-normalized density climatologies from survey sightings",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("info", help="Show application info")
    subparsers.add_parser("grid", help="Show grid metadata for the configured extent")

    build_parser = subparsers.add_parser("build", help="Build climatology layers")
    build_parser.add_argument("observations", type=Path, help="Observation table (CSV)")
    build_parser.add_argument("effort", type=Path, help="Effort table (CSV)")
    build_parser.add_argument(
        "--by",
        choices=GROUPINGS,
        default="species",
        help="Group by raw species code or common-name group (default: species)",
    )
    build_parser.add_argument(
        "--group",
        action="append",
        dest="groups",
        default=None,
        help="Only build this species/group (repeatable)",
    )

    return parser


def run_build(args: argparse.Namespace) -> Result:
    """Run the build flow and wrap the outcome."""
    try:
        summary = build_climatology(args.observations, args.effort, args.by, args.groups)
    except (ClimatologyError, ValueError, FileNotFoundError) as e:
        return Result(success=False, message="Build failed", error=str(e))
    return Result(
        success=True,
        message=f"Built {len(summary['groups'])} climatology layer(s)",
        data=summary,
    )


def cmd_info(_args: argparse.Namespace) -> int:
    """Handle the 'info' command."""
    settings = get_settings()
    print(f"Application: {settings.app_name}")
    print(f"Version: {__version__}")
    print(f"Environment: {settings.app_env}")
    print(f"Debug: {settings.debug}")
    print(f"Data dir: {settings.data_dir}")
    return 0


def cmd_grid(_args: argparse.Namespace) -> int:
    """Handle the 'grid' command."""
    settings = get_settings()
    grid = build_grid(settings.extent, settings.resolution, settings.crs)
    print(json.dumps(grid.metadata(), indent=2))
    return 0


def cmd_build(args: argparse.Namespace) -> int:
    """Handle the 'build' command."""
    if args.debug:
        print(f"Debug mode enabled. Settings: {get_settings()}")

    result = run_build(args)
    if result.success:
        print(f"Success: {result.message}")
        for warning in (result.data or {}).get("warnings", []):
            print(f"Warning: {warning}", file=sys.stderr)
        return 0
    else:
        print(f"Error: {result.error}", file=sys.stderr)
        return 1


def main() -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "info": cmd_info,
        "grid": cmd_grid,
        "build": cmd_build,
    }

    handler = commands.get(args.command)
    if handler:
        return handler(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
