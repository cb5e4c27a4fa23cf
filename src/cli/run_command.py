"""Pipeline-file CLI command wiring.

This module registers the run subcommand, which executes one pipeline
file through the same runner the service uses.
"""

from __future__ import annotations

import argparse
from typing import Any

from core.config import SluiceConfig
from core.pipeline_spec import load_pipeline_file
from extract.http_transport import HttpxTransport
from load.bigquery_loader import BigQueryTableLoader
from pipeline.runner import run_pipeline


def add_run_command(subparsers: Any) -> None:
    """Register run subcommand."""
    parser = subparsers.add_parser("run", help="Run one pipeline from a JSON or YAML file")
    parser.add_argument("pipeline_file", help="Path to a .json, .yaml or .yml pipeline file")


def run_run_command(config: SluiceConfig, args: argparse.Namespace) -> int:
    """Handle run command invocation."""
    request = load_pipeline_file(args.pipeline_file)
    with HttpxTransport(timeout=config.http_timeout, user_agent=config.user_agent) as transport:
        result = run_pipeline(request, transport, BigQueryTableLoader())
    print(f"table_ref={result.table_ref}")
    print(f"columns={','.join(result.columns)}")
    return 0
