"""FastAPI application exposing one pipeline-run endpoint.

Each POST carries a full pipeline document. The response is ``200 {}`` on
success and ``500 {"error": "Internal Server Error"}`` on any failure; the
error kind is only logged.
"""

from __future__ import annotations

from typing import Callable, Mapping, Protocol

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from core.config import SluiceConfig
from core.constants import INTERNAL_ERROR_BODY
from core.errors import SluiceError
from core.logging_config import get_logger
from core.pipeline_spec import parse_pipeline_request
from core.types import PipelineRequest, PipelineRunResult, TransportResponse
from extract.http_transport import HttpxTransport
from load.bigquery_loader import BigQueryTableLoader, TableLoader
from pipeline.runner import run_pipeline

_LOGGER = get_logger(__name__)


class ClosableTransport(Protocol):
    """Transport built per request and closed after the run."""

    def send(self, method: str, url: str, form_body: Mapping[str, str]) -> TransportResponse: ...

    def close(self) -> None: ...


def create_app(
    transport_factory: Callable[[], ClosableTransport],
    loader: TableLoader,
) -> FastAPI:
    """Build the service application.

    Args:
        transport_factory: Builds a fresh transport for each request.
        loader: Destination table loader shared across requests.

    Returns:
        Configured FastAPI app.
    """
    app = FastAPI(title="Sluice pipeline service", version="0.1")

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, error: Exception) -> JSONResponse:
        _LOGGER.error("request_failed", error_type=type(error).__name__, error=str(error))
        return _internal_error()

    @app.get("/health")
    def health() -> dict[str, bool]:
        return {"ok": True}

    @app.post("/")
    async def run(request: Request) -> JSONResponse:
        try:
            payload = await request.json()
            pipeline_request = parse_pipeline_request(payload)
            await run_in_threadpool(_run_request, pipeline_request, transport_factory, loader)
        except SluiceError as error:
            _LOGGER.error("request_failed", error_type=type(error).__name__, error=str(error))
            return _internal_error()
        except ValueError as error:
            _LOGGER.error("request_decode_failed", error=str(error))
            return _internal_error()
        return JSONResponse(content={}, status_code=200)

    return app


def create_default_app(config: SluiceConfig) -> FastAPI:
    """Build the app with the httpx transport and the BigQuery loader.

    Args:
        config: Runtime configuration.

    Returns:
        Configured FastAPI app.
    """

    def _transport_factory() -> HttpxTransport:
        return HttpxTransport(timeout=config.http_timeout, user_agent=config.user_agent)

    return create_app(_transport_factory, BigQueryTableLoader())


def _run_request(
    pipeline_request: PipelineRequest,
    transport_factory: Callable[[], ClosableTransport],
    loader: TableLoader,
) -> PipelineRunResult:
    transport = transport_factory()
    try:
        return run_pipeline(pipeline_request, transport, loader)
    finally:
        transport.close()


def _internal_error() -> JSONResponse:
    return JSONResponse(content=dict(INTERNAL_ERROR_BODY), status_code=500)
