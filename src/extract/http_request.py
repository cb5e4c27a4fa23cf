"""Shared request primitive for primary and pre-extraction fetches."""

from __future__ import annotations

from typing import Mapping

from core.byte_stream import ByteStream, close_quietly
from core.constants import MAX_SUCCESS_STATUS, MIN_SUCCESS_STATUS
from core.errors import SluiceConfigError, SluiceExtractionError
from extract.http_transport import HttpTransport


def open_request(
    transport: HttpTransport,
    method: str,
    url: str,
    body: Mapping[str, str],
) -> ByteStream:
    """Send one request and return its body stream.

    Args:
        transport: Transport used to send the request.
        method: HTTP method.
        url: Target URL.
        body: Form fields.

    Returns:
        Response body stream, owned by the caller.

    Raises:
        SluiceConfigError: If method or url is empty.
        SluiceExtractionError: If the transport fails or the status is not 1xx/2xx.
    """
    if not method or not url:
        raise SluiceConfigError(
            f"Request needs a method and a url, got method={method!r} url={url!r}."
        )
    response = transport.send(method, url, body)
    if not MIN_SUCCESS_STATUS <= response.status_code <= MAX_SUCCESS_STATUS:
        close_quietly(response.stream)
        raise SluiceExtractionError(
            f"Response failed with status code: {response.status_code} "
            f"and body: {dict(body)}"
        )
    return response.stream
