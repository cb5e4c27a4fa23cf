"""Sluice exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each pipeline stage raises a specific error type for debuggability.
"""

from __future__ import annotations


class SluiceError(Exception):
    """Base exception for all Sluice failures."""


class SluiceConfigError(SluiceError):
    """Raised for invalid pipeline or runtime configuration."""


class SluiceExtractionError(SluiceError):
    """Raised for HTTP transport failures and non-2xx responses."""


class SluiceTransformError(SluiceError):
    """Raised for tweak failures such as malformed archives or unknown charsets."""


class SluiceFormatError(SluiceError):
    """Raised when the CSV header is missing or cannot be parsed."""


class SluiceLoadError(SluiceError):
    """Raised when the destination table write fails."""


class SluiceDependencyError(SluiceError):
    """Raised when an optional runtime dependency is missing."""
