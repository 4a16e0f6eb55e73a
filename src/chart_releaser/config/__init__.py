"""Configuration for chart-releaser commands."""

from .base import ConfigurationError, ConfigValidationResult, SerializationError, ValidationError
from .options import INDEX_REQUIRED, UPLOAD_REQUIRED, Options

__all__ = [
    "ConfigurationError",
    "ConfigValidationResult",
    "INDEX_REQUIRED",
    "Options",
    "SerializationError",
    "UPLOAD_REQUIRED",
    "ValidationError",
]
