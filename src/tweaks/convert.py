"""Character-set conversion tweak.

Bytes are decoded lazily with an incremental decoder and re-encoded as
UTF-8, so the payload is never fully materialized.
"""

from __future__ import annotations

import codecs
import io

from core.byte_stream import ByteStream, close_quietly
from core.constants import CANONICAL_ENCODING, CHARSET_LABEL_ALIASES, STREAM_CHUNK_SIZE
from core.errors import SluiceTransformError


class TranscodingStream(io.RawIOBase):
    """Decode an inner stream from ``encoding`` and yield UTF-8 bytes.

    Invalid byte sequences become U+FFFD. Closing this stream closes the
    inner stream.
    """

    def __init__(self, source: ByteStream, encoding: str) -> None:
        super().__init__()
        self._source = source
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._pending = b""
        self._exhausted = False

    def readable(self) -> bool:
        return True

    def readinto(self, buffer: memoryview | bytearray) -> int:  # type: ignore[override]
        while not self._pending and not self._exhausted:
            self._fill()
        size = min(len(buffer), len(self._pending))
        buffer[:size] = self._pending[:size]
        self._pending = self._pending[size:]
        return size

    def _fill(self) -> None:
        chunk = self._source.read(STREAM_CHUNK_SIZE)
        if not chunk:
            self._exhausted = True
            text = self._decoder.decode(b"", final=True)
        else:
            text = self._decoder.decode(chunk)
        self._pending = text.encode(CANONICAL_ENCODING)

    def close(self) -> None:
        if self.closed:
            return
        try:
            self._source.close()
        finally:
            super().close()


def convert_stream(stream: ByteStream, charset: str) -> ByteStream:
    """Wrap a stream so it reads as UTF-8.

    Args:
        stream: Source bytes in ``charset``. Ownership passes to the result.
        charset: Encoding label such as ``Shift_JIS`` or ``windows-1252``.

    Returns:
        Lazily transcoding stream.

    Raises:
        SluiceTransformError: If the charset label is not recognized. The
            input stream is closed first.
    """
    try:
        encoding = resolve_charset(charset)
    except SluiceTransformError:
        close_quietly(stream)
        raise
    return TranscodingStream(stream, encoding)


def resolve_charset(label: str) -> str:
    """Map an encoding label onto a Python codec name.

    Args:
        label: Encoding label, matched case-insensitively.

    Returns:
        Canonical codec name.

    Raises:
        SluiceTransformError: If no codec matches the label.
    """
    normalized_label = label.strip().lower()
    codec_name = CHARSET_LABEL_ALIASES.get(normalized_label, normalized_label)
    try:
        codec_info = codecs.lookup(codec_name)
    except LookupError as error:
        raise SluiceTransformError(f"Unsupported charset label: '{label}'") from error
    if not _is_text_encoding(codec_info):
        raise SluiceTransformError(f"Unsupported charset label: '{label}'")
    return codec_info.name


def _is_text_encoding(codec_info: codecs.CodecInfo) -> bool:
    """Reject bytes-to-bytes codecs such as ``zlib`` or ``base64``."""
    return getattr(codec_info, "_is_text_encoding", True)
