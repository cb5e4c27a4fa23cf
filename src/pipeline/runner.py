"""Pipeline orchestration for one request-to-load run.

This module runs pre-extraction, extraction, the tweak chain, header
parsing, and loading in order. The first failure aborts the run before
any load starts.
"""

from __future__ import annotations

from core.byte_stream import Closable, close_quietly
from core.errors import SluiceError
from core.logging_config import get_logger
from core.types import PipelineRequest, PipelineRunResult
from extract.http_request import open_request
from extract.http_transport import HttpTransport
from extract.pre_extraction import resolve_pre_extraction
from load.bigquery_loader import TableLoader
from load.csv_header import extract_csv_header
from tweaks.tweak_chain import apply_tweaks, validate_tweaks

_LOGGER = get_logger(__name__)


class PipelineRunner:
    """Single-use runner tracking the current stage and open stream."""

    def __init__(
        self,
        request: PipelineRequest,
        transport: HttpTransport,
        loader: TableLoader,
    ) -> None:
        self._request = request
        self._transport = transport
        self._loader = loader
        self._stage = "validate"
        self._stream: Closable | None = None

    def run(self) -> PipelineRunResult:
        """Execute the pipeline and return the load summary."""
        try:
            result = self._run_stages()
        except SluiceError as error:
            self._release()
            _LOGGER.error(
                "pipeline_failed",
                stage=self._stage,
                error_type=type(error).__name__,
                error=str(error),
                table_ref=self._request.loading.table_ref,
            )
            raise
        except BaseException:
            self._release()
            raise
        self._release()
        _LOGGER.info(
            "pipeline_completed",
            table_ref=result.table_ref,
            column_count=len(result.columns),
            tweak_count=len(self._request.tweaks),
        )
        return result

    def _run_stages(self) -> PipelineRunResult:
        request = self._request
        validate_tweaks(request.tweaks)
        self._stage = "pre_extraction"
        extraction = resolve_pre_extraction(
            request.pre_extraction, request.extraction, self._transport
        )
        self._stage = "extraction"
        response_stream = open_request(
            self._transport, extraction.method, extraction.url, extraction.body
        )
        self._stage = "tweaks"
        # Each stage closes its own input on failure, so only the header stream is held.
        tweaked_stream = apply_tweaks(request.tweaks, response_stream)
        self._stage = "csv_header"
        header = extract_csv_header(tweaked_stream)
        self._stream = header.stream
        self._stage = "load"
        self._loader.load_table(request.loading, header.columns, header.stream)
        return PipelineRunResult(table_ref=request.loading.table_ref, columns=header.columns)

    def _release(self) -> None:
        close_quietly(self._stream)
        self._stream = None


def run_pipeline(
    request: PipelineRequest,
    transport: HttpTransport,
    loader: TableLoader,
) -> PipelineRunResult:
    """Run one pipeline from fetch to table load.

    Args:
        request: Validated pipeline request.
        transport: Transport for pre-extraction and extraction fetches.
        loader: Destination table loader.

    Returns:
        Destination table and loaded column names.

    Raises:
        SluiceConfigError: If a tweak kind or pattern is invalid.
        SluiceExtractionError: If a fetch fails.
        SluiceTransformError: If a tweak fails.
        SluiceFormatError: If the CSV header is missing.
        SluiceLoadError: If the table load fails.
    """
    return PipelineRunner(request, transport, loader).run()
