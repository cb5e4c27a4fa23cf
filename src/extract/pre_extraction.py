"""Pre-extraction resolver.

A pre-extraction is an auxiliary fetch whose response body is scanned with
a regex; the primary extraction body is then rebuilt from templates
expanded against every match.
"""

from __future__ import annotations

from dataclasses import replace

from core.byte_stream import close_quietly
from core.constants import CANONICAL_ENCODING
from core.errors import SluiceExtractionError
from core.logging_config import get_logger
from core.pipeline_spec import compile_pattern
from core.types import Extraction, PreExtraction
from extract.http_request import open_request
from extract.http_transport import HttpTransport
from extract.template_expander import expand_templates

_LOGGER = get_logger(__name__)


def resolve_pre_extraction(
    pre_extraction: PreExtraction,
    base_extraction: Extraction,
    transport: HttpTransport,
) -> Extraction:
    """Compute the extraction to run after an optional pre-extraction.

    Args:
        pre_extraction: Auxiliary fetch configuration.
        base_extraction: Primary extraction whose body holds templates.
        transport: Transport used for the auxiliary fetch.

    Returns:
        ``base_extraction`` itself when no pre-extraction is configured,
        otherwise a copy whose body is the expanded templates.

    Raises:
        SluiceConfigError: If the pattern is invalid.
        SluiceExtractionError: If the auxiliary fetch fails.
    """
    if not pre_extraction.is_configured:
        return base_extraction
    pattern = compile_pattern(pre_extraction.pattern)
    content = _read_text(pre_extraction, transport)
    body = expand_templates(base_extraction.body, pattern, content)
    _LOGGER.info(
        "pre_extraction_resolved",
        url=pre_extraction.url,
        content_length=len(content),
        body_keys=sorted(body),
    )
    return replace(base_extraction, body=body)


def _read_text(pre_extraction: PreExtraction, transport: HttpTransport) -> str:
    stream = open_request(transport, pre_extraction.method, pre_extraction.url, pre_extraction.body)
    try:
        payload = stream.read()
    except OSError as error:
        raise SluiceExtractionError(
            f"Failed to read pre-extraction response from {pre_extraction.url}: {error}"
        ) from error
    finally:
        close_quietly(stream)
    return payload.decode(CANONICAL_ENCODING, errors="replace")
