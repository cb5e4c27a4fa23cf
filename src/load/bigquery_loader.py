"""BigQuery table loader.

This module truncates and reloads a destination table from a CSV row
stream. Every column is loaded as STRING.
"""

from __future__ import annotations

from typing import Any, BinaryIO, Callable, Protocol, Sequence

from core.errors import SluiceDependencyError, SluiceError, SluiceLoadError
from core.logging_config import get_logger
from core.types import LoadTarget

_LOGGER = get_logger(__name__)


class TableLoader(Protocol):
    """Load contract consumed by the pipeline runner."""

    def load_table(self, target: LoadTarget, columns: Sequence[str], stream: BinaryIO) -> None: ...


class BigQueryTableLoader:
    """Load CSV rows into BigQuery with truncate-then-load semantics.

    Args:
        client_factory: Optional callable building a client for a project id.
            Defaults to ``google.cloud.bigquery.Client``.
    """

    def __init__(self, client_factory: Callable[[str], Any] | None = None) -> None:
        self._client_factory = client_factory

    def load_table(self, target: LoadTarget, columns: Sequence[str], stream: BinaryIO) -> None:
        """Replace the destination table contents with the streamed rows.

        Args:
            target: Destination table.
            columns: Sanitized column names, in file order.
            stream: CSV rows positioned after the header.

        Raises:
            SluiceDependencyError: If google-cloud-bigquery is missing.
            SluiceLoadError: If the client or the load job fails.
        """
        bigquery = _import_bigquery()
        job_config = build_job_config(bigquery, columns)
        try:
            client = self._build_client(bigquery, target.project_id)
            job = client.load_table_from_file(stream, target.table_ref, job_config=job_config)
            job.result()
        except SluiceError:
            raise
        except Exception as error:
            raise SluiceLoadError(f"Failed to load {target.table_ref}: {error}") from error
        _LOGGER.info(
            "table_loaded",
            table_ref=target.table_ref,
            column_count=len(columns),
            output_rows=getattr(job, "output_rows", None),
        )

    def _build_client(self, bigquery: Any, project_id: str) -> Any:
        if self._client_factory is not None:
            return self._client_factory(project_id)
        return bigquery.Client(project=project_id)


def build_job_config(bigquery: Any, columns: Sequence[str]) -> Any:
    """Build the CSV load job configuration.

    Args:
        bigquery: The ``google.cloud.bigquery`` module.
        columns: Sanitized column names.

    Returns:
        ``LoadJobConfig`` with a STRING schema and WRITE_TRUNCATE disposition.
    """
    return bigquery.LoadJobConfig(
        source_format=bigquery.SourceFormat.CSV,
        schema=[bigquery.SchemaField(name, "STRING") for name in columns],
        skip_leading_rows=0,
        allow_quoted_newlines=True,
        write_disposition=bigquery.WriteDisposition.WRITE_TRUNCATE,
    )


def _import_bigquery() -> Any:
    try:
        from google.cloud import bigquery
    except ImportError as error:
        raise SluiceDependencyError(
            "BigQuery loading requires google-cloud-bigquery, but it is not installed. "
            "Install google-cloud-bigquery to load tables."
        ) from error
    return bigquery
