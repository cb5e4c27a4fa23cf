"""Ordered tweak chain.

Tweaks are folded left to right; each consumes the previous stage's stream
and returns a new one that owns it.
"""

from __future__ import annotations

from typing import Sequence

from core.byte_stream import ByteStream, close_quietly
from core.constants import SUPPORTED_TWEAK_CALLS
from core.errors import SluiceConfigError
from core.logging_config import get_logger
from core.types import ConvertTweak, Tweak, UnzipTweak
from tweaks.convert import convert_stream
from tweaks.unzip import unzip_stream

_LOGGER = get_logger(__name__)


def validate_tweaks(tweaks: Sequence[object]) -> None:
    """Reject any tweak that is not a recognized variant.

    Args:
        tweaks: Candidate tweak chain.

    Raises:
        SluiceConfigError: If a tweak has an unknown kind.
    """
    for index, tweak in enumerate(tweaks):
        if not isinstance(tweak, (UnzipTweak, ConvertTweak)):
            raise SluiceConfigError(
                f"Unsupported call {_describe(tweak)!r} in tweak #{index + 1}. "
                f"Use one of: {', '.join(SUPPORTED_TWEAK_CALLS)}."
            )


def apply_tweak(tweak: Tweak, stream: ByteStream) -> ByteStream | None:
    """Apply one tweak to a stream.

    Args:
        tweak: Tweak variant.
        stream: Input stream, owned by the tweak once it starts.

    Returns:
        Output stream, or None when the tweak found no data.

    Raises:
        SluiceConfigError: If the tweak kind is unknown. The stream is left untouched.
        SluiceTransformError: If the transform fails. The stream is closed.
    """
    if isinstance(tweak, UnzipTweak):
        return unzip_stream(stream)
    if isinstance(tweak, ConvertTweak):
        return convert_stream(stream, tweak.charset)
    raise SluiceConfigError(f"Unsupported call: {_describe(tweak)}")


def apply_tweaks(tweaks: Sequence[Tweak], stream: ByteStream) -> ByteStream | None:
    """Fold a tweak chain over a stream in declared order.

    When a stage yields no data, later stages are skipped.

    Args:
        tweaks: Ordered tweak chain.
        stream: Input stream, owned by the chain.

    Returns:
        Final stream, or None when a stage yielded no data.
    """
    current: ByteStream | None = stream
    for index, tweak in enumerate(tweaks):
        if current is None:
            _LOGGER.warning("tweak_chain_no_data", skipped_from=index + 1)
            return None
        try:
            current = apply_tweak(tweak, current)
        except SluiceConfigError:
            close_quietly(current)
            raise
        _LOGGER.info("tweak_applied", index=index + 1, call=tweak.call, has_data=current is not None)
    return current


def _describe(tweak: object) -> str:
    return str(getattr(tweak, "call", type(tweak).__name__))
