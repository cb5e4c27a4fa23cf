"""Sluice CLI entry points.

This module exposes the serve and run commands.
It maps argparse commands onto the service and pipeline runner.
"""

from __future__ import annotations

import argparse
from typing import Sequence

from cli.run_command import add_run_command, run_run_command
from cli.serve_command import add_serve_command, run_serve_command
from core.config import SluiceConfig


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="sluice", description="Sluice ETL pipeline CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)
    add_serve_command(subparsers)
    add_run_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the Sluice CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    config = SluiceConfig.from_env()
    if args.command == "serve":
        return run_serve_command(config, args)
    if args.command == "run":
        return run_run_command(config, args)
    parser.error(f"Unsupported command: {args.command}")
    return 2
