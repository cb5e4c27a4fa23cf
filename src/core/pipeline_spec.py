"""Typed pipeline document parsing.

This module validates the JSON document accepted by the service endpoint
and the JSON/YAML pipeline files accepted by the CLI. It produces one
strict ``PipelineRequest`` so every entry point runs the same validated
pipeline description, and configuration mistakes fail before any network
call is made.
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Mapping, Sequence, cast

from core.constants import SUPPORTED_PIPELINE_FILE_EXTENSIONS, SUPPORTED_TWEAK_CALLS, TWEAK_CONVERT
from core.errors import SluiceConfigError, SluiceDependencyError
from core.types import (
    ConvertTweak,
    Extraction,
    LoadTarget,
    PipelineRequest,
    PreExtraction,
    Tweak,
    UnzipTweak,
)

_ROOT_FIELDS = ("PreExtraction", "Extraction", "Tweaks", "Loading")
_PRE_EXTRACTION_FIELDS = ("Method", "Url", "Body", "Pattern")
_EXTRACTION_FIELDS = ("Method", "Url", "Body")
_TWEAK_FIELDS = ("Call", "Args")
_LOADING_FIELDS = ("ProjectID", "DatasetID", "TableID")


def parse_pipeline_request(payload: object) -> PipelineRequest:
    """Validate a pipeline document and build a typed request.

    Field names match case-insensitively, so ``Url``, ``url`` and ``URL``
    are the same field.

    Args:
        payload: Decoded JSON/YAML document.

    Returns:
        Fully validated pipeline request.

    Raises:
        SluiceConfigError: If the document does not describe a valid pipeline.
    """
    root = _expect_fields(payload, _ROOT_FIELDS, "pipeline document")
    return PipelineRequest(
        pre_extraction=_parse_pre_extraction(root.get("PreExtraction")),
        extraction=_parse_extraction(root.get("Extraction")),
        tweaks=_parse_tweaks(root.get("Tweaks")),
        loading=_parse_loading(root.get("Loading")),
    )


def load_pipeline_file(pipeline_path: str) -> PipelineRequest:
    """Load and validate a JSON or YAML pipeline file from disk.

    Args:
        pipeline_path: File path to a ``.json``, ``.yaml`` or ``.yml`` file.

    Returns:
        Fully validated pipeline request.

    Raises:
        SluiceDependencyError: If a YAML file is given and PyYAML is unavailable.
        SluiceConfigError: If the file is unreadable or schema checks fail.
    """
    pipeline_file = Path(pipeline_path).expanduser().resolve()
    suffix = pipeline_file.suffix.lower()
    if suffix not in SUPPORTED_PIPELINE_FILE_EXTENSIONS:
        raise SluiceConfigError(
            f"Unsupported pipeline file {pipeline_file}: "
            f"expected one of {', '.join(SUPPORTED_PIPELINE_FILE_EXTENSIONS)}."
        )
    if not pipeline_file.exists():
        raise SluiceConfigError(
            f"Pipeline file does not exist at {pipeline_file}. Provide a valid file path."
        )
    try:
        text = pipeline_file.read_text(encoding="utf-8")
    except OSError as error:
        raise SluiceConfigError(
            f"Failed to read pipeline file at {pipeline_file}: {error}."
        ) from error
    if suffix == ".json":
        payload = _parse_json_text(text, pipeline_file)
    else:
        payload = _parse_yaml_text(text, pipeline_file)
    if payload is None:
        raise SluiceConfigError(f"Pipeline file at {pipeline_file} is empty.")
    return parse_pipeline_request(payload)


def _parse_json_text(text: str, pipeline_file: Path) -> object:
    try:
        return cast(object, json.loads(text))
    except json.JSONDecodeError as error:
        raise SluiceConfigError(
            f"Failed to parse JSON pipeline file at {pipeline_file}: {error}."
        ) from error


def _parse_yaml_text(text: str, pipeline_file: Path) -> object:
    try:
        import yaml  # type: ignore[import-untyped]
    except ImportError as error:  # pragma: no cover - dependency failure
        raise SluiceDependencyError(
            "YAML pipeline files require PyYAML. Install with 'pip install pyyaml'."
        ) from error
    try:
        return cast(object, yaml.safe_load(text))
    except yaml.YAMLError as error:
        raise SluiceConfigError(
            f"Failed to parse YAML pipeline file at {pipeline_file}: {error}."
        ) from error


def _parse_pre_extraction(value: object) -> PreExtraction:
    if value is None:
        return PreExtraction()
    fields = _expect_fields(value, _PRE_EXTRACTION_FIELDS, "PreExtraction")
    pre_extraction = PreExtraction(
        method=_optional_string(fields, "Method", "PreExtraction"),
        url=_optional_string(fields, "Url", "PreExtraction"),
        body=_string_mapping(fields.get("Body"), "PreExtraction.Body"),
        pattern=_optional_string(fields, "Pattern", "PreExtraction"),
    )
    if not pre_extraction.is_configured:
        return pre_extraction
    if not pre_extraction.method or not pre_extraction.url:
        raise SluiceConfigError(
            "PreExtraction requires both 'Method' and 'Url', or neither to disable it."
        )
    compile_pattern(pre_extraction.pattern)
    return pre_extraction


def _parse_extraction(value: object) -> Extraction:
    if value is None:
        raise SluiceConfigError("Pipeline document missing required section 'Extraction'.")
    fields = _expect_fields(value, _EXTRACTION_FIELDS, "Extraction")
    return Extraction(
        method=_required_string(fields, "Method", "Extraction"),
        url=_required_string(fields, "Url", "Extraction"),
        body=_string_mapping(fields.get("Body"), "Extraction.Body"),
    )


def _parse_tweaks(value: object) -> tuple[Tweak, ...]:
    if value is None:
        return ()
    rows = _expect_sequence(value, "Tweaks")
    return tuple(_parse_tweak(row, index) for index, row in enumerate(rows))


def _parse_tweak(value: object, index: int) -> Tweak:
    context = f"tweak #{index + 1}"
    fields = _expect_fields(value, _TWEAK_FIELDS, context)
    call = fields.get("Call")
    if not isinstance(call, str) or call not in SUPPORTED_TWEAK_CALLS:
        raise SluiceConfigError(
            f"Unsupported call {call!r} in {context}. "
            f"Use one of: {', '.join(SUPPORTED_TWEAK_CALLS)}."
        )
    args = _string_mapping(fields.get("Args"), f"{context} Args")
    if call == TWEAK_CONVERT:
        charset = args.get("charset", "").strip()
        if not charset:
            raise SluiceConfigError(f"Invalid {context}: 'convert' requires Args.charset.")
        return ConvertTweak(charset=charset)
    return UnzipTweak()


def _parse_loading(value: object) -> LoadTarget:
    if value is None:
        raise SluiceConfigError("Pipeline document missing required section 'Loading'.")
    fields = _expect_fields(value, _LOADING_FIELDS, "Loading")
    return LoadTarget(
        project_id=_required_string(fields, "ProjectID", "Loading"),
        dataset_id=_required_string(fields, "DatasetID", "Loading"),
        table_id=_required_string(fields, "TableID", "Loading"),
    )


def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a pre-extraction pattern.

    Args:
        pattern: Regular expression source.

    Returns:
        Compiled pattern.

    Raises:
        SluiceConfigError: If the pattern is not a valid regular expression.
    """
    try:
        return re.compile(pattern)
    except re.error as error:
        raise SluiceConfigError(f"Invalid PreExtraction pattern {pattern!r}: {error}.") from error


def _expect_fields(
    value: object,
    allowed_fields: Sequence[str],
    context: str,
) -> Mapping[str, object]:
    """Map document keys onto canonical field names, case-insensitively."""
    if not isinstance(value, Mapping):
        raise SluiceConfigError(
            f"Invalid {context}: expected object mapping, got {type(value).__name__}."
        )
    canonical_names = {name.lower(): name for name in allowed_fields}
    fields: dict[str, object] = {}
    for key, payload in value.items():
        if not isinstance(key, str):
            raise SluiceConfigError(
                f"Invalid {context}: expected string keys, got {type(key).__name__}."
            )
        canonical_name = canonical_names.get(key.lower())
        if canonical_name is None:
            raise SluiceConfigError(
                f"Invalid {context}: unknown field '{key}'. "
                f"Use one of: {', '.join(allowed_fields)}."
            )
        fields[canonical_name] = payload
    return fields


def _expect_sequence(value: object, context: str) -> Sequence[object]:
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return value
    raise SluiceConfigError(f"Invalid {context}: expected list, got {type(value).__name__}.")


def _string_mapping(value: object, context: str) -> dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise SluiceConfigError(
            f"Invalid {context}: expected object mapping, got {type(value).__name__}."
        )
    mapping: dict[str, str] = {}
    for key, item in value.items():
        if not isinstance(key, str) or not isinstance(item, str):
            raise SluiceConfigError(f"Invalid {context}: keys and values must be strings.")
        mapping[key] = item
    return mapping


def _optional_string(fields: Mapping[str, object], field_name: str, context: str) -> str:
    raw_value = fields.get(field_name)
    if raw_value is None:
        return ""
    if isinstance(raw_value, str):
        return raw_value
    raise SluiceConfigError(f"{context} field '{field_name}' must be a string when provided.")


def _required_string(fields: Mapping[str, object], field_name: str, context: str) -> str:
    value = _optional_string(fields, field_name, context).strip()
    if not value:
        raise SluiceConfigError(f"{context} field '{field_name}' is required.")
    return value
