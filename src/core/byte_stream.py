"""Closable byte streams passed between pipeline stages.

Every stage receives a readable binary stream and hands a new one to the
next stage. Wrappers close their inner stream when closed, so only the
outermost stream ever needs to be closed.
"""

from __future__ import annotations

import io
from typing import Iterator, Protocol

from core.logging_config import get_logger

_LOGGER = get_logger(__name__)


class ByteStream(Protocol):
    """Sequentially read, closable byte source."""

    def read(self, size: int = -1, /) -> bytes: ...

    def close(self) -> None: ...


class Closable(Protocol):
    """Any resource with a close method."""

    def close(self) -> None: ...


class ChainedStream(io.RawIOBase):
    """Read from one source and close a chain of resources.

    Args:
        source: Stream the bytes are read from.
        closers: Resources closed, in order, when this stream closes.
            Defaults to ``source`` itself.
    """

    def __init__(self, source: ByteStream, *closers: Closable) -> None:
        super().__init__()
        self._source = source
        self._closers: tuple[Closable, ...] = closers or (source,)

    def readable(self) -> bool:
        return True

    def readinto(self, buffer: memoryview | bytearray) -> int:  # type: ignore[override]
        data = self._source.read(len(buffer))
        size = len(data)
        buffer[:size] = data
        return size

    def close(self) -> None:
        if self.closed:
            return
        try:
            for closer in self._closers:
                closer.close()
        finally:
            super().close()


class ChunkStream(io.RawIOBase):
    """Expose an iterator of byte chunks as a readable stream.

    Args:
        chunks: Byte chunks in stream order.
        closer: Resource released when the stream closes.
    """

    def __init__(self, chunks: Iterator[bytes], closer: Closable) -> None:
        super().__init__()
        self._chunks = chunks
        self._closer = closer
        self._pending = b""

    def readable(self) -> bool:
        return True

    def readinto(self, buffer: memoryview | bytearray) -> int:  # type: ignore[override]
        while not self._pending:
            chunk = next(self._chunks, None)
            if chunk is None:
                return 0
            self._pending = chunk
        size = min(len(buffer), len(self._pending))
        buffer[:size] = self._pending[:size]
        self._pending = self._pending[size:]
        return size

    def close(self) -> None:
        if self.closed:
            return
        try:
            self._closer.close()
        finally:
            super().close()


def close_quietly(stream: Closable | None) -> None:
    """Close a stream on an error path without masking the original error.

    Args:
        stream: Stream to close, or None when there is nothing to release.
    """
    if stream is None:
        return
    try:
        stream.close()
    except Exception as error:
        _LOGGER.warning("stream_close_failed", error=str(error), error_type=type(error).__name__)
