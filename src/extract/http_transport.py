"""HTTP transport backed by httpx.

The transport sends one form-encoded request and hands back the response
body as a streamed, closable byte stream. It is passed explicitly to the
pipeline so tests can substitute a fake.
"""

from __future__ import annotations

from types import TracebackType
from typing import Iterator, Mapping, Protocol
from urllib.parse import urlencode

import httpx

from core.byte_stream import ChunkStream
from core.constants import DEFAULT_USER_AGENT, FORM_CONTENT_TYPE
from core.errors import SluiceExtractionError
from core.logging_config import get_logger
from core.types import TransportResponse

_LOGGER = get_logger(__name__)


class HttpTransport(Protocol):
    """Transport contract consumed by the request primitive."""

    def send(self, method: str, url: str, form_body: Mapping[str, str]) -> TransportResponse: ...


class HttpxTransport:
    """Send pipeline requests with an ``httpx.Client``.

    Args:
        client: Optional preconfigured client. When omitted the transport
            builds and owns one.
        timeout: Timeout in seconds for an owned client, None for no timeout.
        user_agent: User-Agent header for an owned client.
    """

    def __init__(
        self,
        client: httpx.Client | None = None,
        timeout: float | None = None,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self._owns_client = client is None
        self._client = client if client is not None else httpx.Client(
            follow_redirects=True,
            timeout=timeout,
            headers={"User-Agent": user_agent},
        )

    def send(self, method: str, url: str, form_body: Mapping[str, str]) -> TransportResponse:
        """Send a form-encoded request and open the response body as a stream.

        Args:
            method: HTTP method.
            url: Target URL.
            form_body: Form fields, sent url-encoded when non-empty.

        Returns:
            Streamed response body and status code.

        Raises:
            SluiceExtractionError: If the request cannot be built or sent.
        """
        encoded_body = urlencode(sorted(form_body.items()))
        headers = {"Content-Type": FORM_CONTENT_TYPE} if form_body else {}
        try:
            request = self._client.build_request(
                method,
                url,
                content=encoded_body.encode("utf-8"),
                headers=headers,
            )
            response = self._client.send(request, stream=True)
        except (httpx.HTTPError, httpx.InvalidURL) as error:
            _LOGGER.error("http_request_failed", method=method, url=url, error=str(error))
            raise SluiceExtractionError(f"{method} {url} failed: {error}") from error
        _LOGGER.info("http_response", method=method, url=url, status_code=response.status_code)
        stream = ChunkStream(_iter_response_bytes(response, method, url), response)
        return TransportResponse(stream=stream, status_code=response.status_code)

    def close(self) -> None:
        """Close the underlying client when this transport owns it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "HttpxTransport":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()


def _iter_response_bytes(response: httpx.Response, method: str, url: str) -> Iterator[bytes]:
    try:
        yield from response.iter_bytes()
    except httpx.HTTPError as error:
        raise SluiceExtractionError(f"{method} {url} body read failed: {error}") from error
