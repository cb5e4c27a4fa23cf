"""Zip archive unwrapping tweak.

The whole archive is buffered in memory because the zip central directory
sits at the end of the file. Only the first entry is returned.
"""

from __future__ import annotations

import io
import zipfile
import zlib

from core.byte_stream import ByteStream, ChainedStream, close_quietly
from core.errors import SluiceTransformError
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)


def unzip_stream(stream: ByteStream) -> ByteStream | None:
    """Return a stream over the first entry of a zip archive.

    Args:
        stream: Archive bytes. Always closed by this call.

    Returns:
        Stream over the first entry in archive order, or None when the
        archive has no entries.

    Raises:
        SluiceTransformError: If the stream cannot be read or is not a zip archive.
    """
    try:
        payload = stream.read()
    except OSError as error:
        raise SluiceTransformError(f"Failed to read archive stream: {error}") from error
    finally:
        close_quietly(stream)
    try:
        archive = zipfile.ZipFile(io.BytesIO(payload))
    except (zipfile.BadZipFile, OSError) as error:
        raise SluiceTransformError(f"Malformed zip archive: {error}") from error
    entries = archive.infolist()
    if not entries:
        archive.close()
        _LOGGER.warning("unzip_empty_archive", archive_size=len(payload))
        return None
    first_entry = entries[0]
    try:
        entry_stream = archive.open(first_entry)
    except (zipfile.BadZipFile, NotImplementedError, RuntimeError) as error:
        archive.close()
        raise SluiceTransformError(
            f"Failed to open zip entry '{first_entry.filename}': {error}"
        ) from error
    _LOGGER.info(
        "unzip_entry_opened",
        entry_name=first_entry.filename,
        entry_count=len(entries),
        entry_size=first_entry.file_size,
    )
    return ArchiveEntryStream(entry_stream, entry_stream, archive)


class ArchiveEntryStream(ChainedStream):
    """Entry stream that reports corrupt entry data as a transform error."""

    def readinto(self, buffer: memoryview | bytearray) -> int:  # type: ignore[override]
        try:
            return super().readinto(buffer)
        except (zipfile.BadZipFile, zlib.error, EOFError) as error:
            raise SluiceTransformError(f"Corrupt zip entry data: {error}") from error
