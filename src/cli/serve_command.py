"""Serve CLI command wiring."""

from __future__ import annotations

import argparse
from dataclasses import replace
from typing import Any

from core.config import SluiceConfig
from core.errors import SluiceDependencyError
from core.logging_config import get_logger
from service.app import create_default_app

_LOGGER = get_logger(__name__)


def add_serve_command(subparsers: Any) -> None:
    """Register serve subcommand."""
    parser = subparsers.add_parser("serve", help="Serve the pipeline endpoint over HTTP")
    parser.add_argument("--host", help="Override SLUICE_HOST for this command")
    parser.add_argument("--port", type=int, help="Override PORT for this command")


def run_serve_command(config: SluiceConfig, args: argparse.Namespace) -> int:
    """Handle serve command invocation."""
    try:
        import uvicorn
    except ImportError as error:
        raise SluiceDependencyError(
            "Serving requires uvicorn, but it is not installed. Install uvicorn and retry."
        ) from error
    if args.host:
        config = replace(config, host=args.host)
    if args.port:
        config = replace(config, port=args.port, port_from_env=True)
    _LOGGER.info("starting_server")
    if not config.port_from_env:
        _LOGGER.info("defaulting_port", port=config.port)
    _LOGGER.info("listening", host=config.host, port=config.port)
    uvicorn.run(create_default_app(config), host=config.host, port=config.port)
    return 0
