"""CSV header extraction.

This module reads the first CSV record off a byte stream, turns it into
column names the warehouse accepts, and hands back the stream positioned
at the first data row.
"""

from __future__ import annotations

import csv
import io
import unicodedata
from dataclasses import dataclass
from typing import BinaryIO, Iterator

from core.byte_stream import ByteStream, ChainedStream, close_quietly
from core.constants import (
    CANONICAL_ENCODING,
    COLUMN_NAME_EXTRA_CHARS,
    COLUMN_NAME_REPLACEMENT,
    UTF8_BOM,
)
from core.errors import SluiceFormatError

_ALLOWED_CATEGORY_PREFIXES = ("L", "N", "M")
_ALLOWED_CATEGORIES = frozenset({"Pc", "Pd"})


@dataclass(frozen=True)
class CsvHeader:
    """Parsed header and the stream positioned after it.

    Attributes:
        columns: Sanitized column names in file order.
        stream: Remaining row bytes. Closing it closes the whole chain.
    """

    columns: tuple[str, ...]
    stream: BinaryIO


def extract_csv_header(stream: ByteStream | None) -> CsvHeader:
    """Read and sanitize the CSV header record.

    Args:
        stream: Transformed payload, or None when an earlier stage found no data.

    Returns:
        Sanitized column names and the remaining stream.

    Raises:
        SluiceFormatError: If there is no data or no header record can be
            parsed. The stream is closed first.
    """
    if stream is None:
        raise SluiceFormatError("No data to load: the payload stream is empty.")
    reader = io.BufferedReader(ChainedStream(stream))
    try:
        raw_columns = _read_header_record(reader)
    except (csv.Error, OSError, UnicodeError) as error:
        close_quietly(reader)
        raise SluiceFormatError(f"Failed to parse CSV header: {error}") from error
    except BaseException:
        close_quietly(reader)
        raise
    if raw_columns is None:
        close_quietly(reader)
        raise SluiceFormatError("Failed to parse CSV header: the payload has no records.")
    columns = tuple(sanitize_column_name(name) for name in raw_columns)
    return CsvHeader(columns=columns, stream=reader)


def sanitize_column_name(name: str) -> str:
    """Replace characters the warehouse rejects in column names with ``_``.

    Letters, numbers, marks, connector and dash punctuation, and
    ``& % = + : ' < > # |`` are kept.

    Args:
        name: Raw header field.

    Returns:
        Sanitized column name.
    """
    return "".join(char if _is_allowed(char) else COLUMN_NAME_REPLACEMENT for char in name)


def _is_allowed(char: str) -> bool:
    if char in COLUMN_NAME_EXTRA_CHARS:
        return True
    category = unicodedata.category(char)
    return category.startswith(_ALLOWED_CATEGORY_PREFIXES) or category in _ALLOWED_CATEGORIES


def _read_header_record(reader: io.BufferedReader) -> list[str] | None:
    """Parse the first non-blank record, consuming only its lines."""
    records = csv.reader(_iter_lines(reader), strict=False)
    for record in records:
        if record:
            return record
    return None


def _iter_lines(reader: io.BufferedReader) -> Iterator[str]:
    """Yield decoded lines one at a time so no row data is read ahead."""
    first_line = True
    while True:
        line = reader.readline()
        if not line:
            return
        if first_line and line.startswith(UTF8_BOM):
            line = line[len(UTF8_BOM):]
        first_line = False
        yield line.decode(CANONICAL_ENCODING, errors="replace")
