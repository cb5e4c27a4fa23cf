"""Core constants used across Sluice modules.

This module centralizes non-domain-specific constants.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

DEFAULT_PORT = 8080
DEFAULT_HOST = "0.0.0.0"
DEFAULT_USER_AGENT = "sluice/0.1"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
MIN_SUCCESS_STATUS = 100
MAX_SUCCESS_STATUS = 299
UTF8_BOM = b"\xef\xbb\xbf"
CANONICAL_ENCODING = "utf-8"
STREAM_CHUNK_SIZE = 64 * 1024
COLUMN_NAME_EXTRA_CHARS = frozenset("&%=+:'<>#|")
COLUMN_NAME_REPLACEMENT = "_"
TWEAK_UNZIP = "unzip"
TWEAK_CONVERT = "convert"
SUPPORTED_TWEAK_CALLS = (TWEAK_UNZIP, TWEAK_CONVERT)
SUPPORTED_PIPELINE_FILE_EXTENSIONS = (".json", ".yaml", ".yml")
INTERNAL_ERROR_BODY = {"error": "Internal Server Error"}

# Charset labels whose WHATWG encoding differs from the Python codec of the same name.
CHARSET_LABEL_ALIASES = {
    "shift_jis": "cp932",
    "shift-jis": "cp932",
    "sjis": "cp932",
    "x-sjis": "cp932",
    "ms_kanji": "cp932",
    "windows-31j": "cp932",
    "csshiftjis": "cp932",
    "iso-8859-1": "cp1252",
    "iso8859-1": "cp1252",
    "latin1": "cp1252",
    "l1": "cp1252",
    "ascii": "cp1252",
    "us-ascii": "cp1252",
    "euc-kr": "cp949",
    "gb2312": "gbk",
    "x-gbk": "gbk",
    "tis-620": "cp874",
    "iso-8859-11": "cp874",
}
