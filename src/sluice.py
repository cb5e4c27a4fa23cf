"""Public SDK surface for Sluice.

This module provides a stable import path for embedding pipeline runs.
It re-exports the runner, the parser, and the typed models.
"""

from __future__ import annotations

from core.config import SluiceConfig
from core.pipeline_spec import load_pipeline_file, parse_pipeline_request
from core.types import (
    ConvertTweak,
    Extraction,
    LoadTarget,
    PipelineRequest,
    PipelineRunResult,
    PreExtraction,
    UnzipTweak,
)
from extract.http_transport import HttpxTransport
from extract.template_expander import expand_templates
from load.bigquery_loader import BigQueryTableLoader
from pipeline.runner import run_pipeline
from service.app import create_app, create_default_app

__all__ = [
    "BigQueryTableLoader",
    "ConvertTweak",
    "Extraction",
    "HttpxTransport",
    "LoadTarget",
    "PipelineRequest",
    "PipelineRunResult",
    "PreExtraction",
    "SluiceConfig",
    "UnzipTweak",
    "create_app",
    "create_default_app",
    "expand_templates",
    "load_pipeline_file",
    "parse_pipeline_request",
    "run_pipeline",
]
