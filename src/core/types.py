"""Shared typed models.

This module defines the immutable pipeline models used by the parser,
the extraction and tweak stages, the loader, and the service layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Mapping, Union

from core.byte_stream import ByteStream
from core.constants import TWEAK_CONVERT, TWEAK_UNZIP


@dataclass(frozen=True)
class PreExtraction:
    """Auxiliary fetch whose response supplies values for the real request.

    Attributes:
        method: HTTP method, empty when pre-extraction is disabled.
        url: Target URL, empty when pre-extraction is disabled.
        body: Form fields sent with the auxiliary request.
        pattern: Regex matched against the auxiliary response body.
    """

    method: str = ""
    url: str = ""
    body: Mapping[str, str] = field(default_factory=dict)
    pattern: str = ""

    @property
    def is_configured(self) -> bool:
        """Return whether an auxiliary fetch should run."""
        return bool(self.method or self.url)


@dataclass(frozen=True)
class Extraction:
    """Primary fetch producing the dataset payload.

    Attributes:
        method: HTTP method.
        url: Target URL.
        body: Form fields, or templates when a pre-extraction runs first.
    """

    method: str
    url: str
    body: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class UnzipTweak:
    """Unwrap the first entry of a zip archive."""

    call: Literal["unzip"] = TWEAK_UNZIP


@dataclass(frozen=True)
class ConvertTweak:
    """Re-encode a stream from ``charset`` to UTF-8.

    Attributes:
        charset: Source encoding label, e.g. ``Shift_JIS``.
    """

    charset: str
    call: Literal["convert"] = TWEAK_CONVERT


Tweak = Union[UnzipTweak, ConvertTweak]


@dataclass(frozen=True)
class LoadTarget:
    """Destination table identifiers.

    Attributes:
        project_id: Warehouse project id.
        dataset_id: Dataset id inside the project.
        table_id: Table id inside the dataset.
    """

    project_id: str
    dataset_id: str
    table_id: str

    @property
    def table_ref(self) -> str:
        """Return the fully-qualified ``project.dataset.table`` reference."""
        return f"{self.project_id}.{self.dataset_id}.{self.table_id}"


@dataclass(frozen=True)
class PipelineRequest:
    """Full configuration for one pipeline run.

    Attributes:
        pre_extraction: Optional auxiliary fetch.
        extraction: Primary fetch.
        tweaks: Ordered stream transforms.
        loading: Destination table.
    """

    pre_extraction: PreExtraction
    extraction: Extraction
    tweaks: tuple[Tweak, ...]
    loading: LoadTarget


@dataclass(frozen=True)
class TransportResponse:
    """Raw HTTP response handed back by a transport.

    Attributes:
        stream: Response body stream, owned by the caller.
        status_code: HTTP status code.
    """

    stream: ByteStream
    status_code: int


@dataclass(frozen=True)
class PipelineRunResult:
    """Summary of a successful pipeline run.

    Attributes:
        table_ref: Fully-qualified destination table.
        columns: Sanitized column names loaded into the table.
    """

    table_ref: str
    columns: tuple[str, ...]
