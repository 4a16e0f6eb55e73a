"""Base configuration classes and validation framework.

This module defines the abstract base class that chart-releaser
configuration types inherit from. It provides:

- Abstract Configuration base class with validation interface
- ConfigValidationResult for structured validation responses
- Error hierarchy for configuration failures
- Dictionary serialization for config files and debugging
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List
from dataclasses import dataclass


class ConfigurationError(Exception):
    """Base exception for all configuration-related errors."""

    pass


class ValidationError(ConfigurationError):
    """Exception raised when configuration validation fails.

    Used for missing required values, invalid URLs and similar problems
    detected before any remote call is made.
    """

    pass


class SerializationError(ConfigurationError):
    """Exception raised when configuration cannot be read from or written to a mapping."""

    pass


@dataclass
class ConfigValidationResult:
    """Result of configuration validation with success state and error details.

    Attributes:
        success: True if validation passed, False otherwise
        errors: List of error messages describing validation failures
    """

    success: bool
    errors: List[str]

    @property
    def is_valid(self) -> bool:
        """Alias for success property for more readable code."""
        return self.success

    def add_error(self, error: str) -> None:
        """Add an error message and mark validation as failed.

        Args:
            error: Error message to add
        """
        self.errors.append(error)
        self.success = False

    @classmethod
    def success_result(cls) -> ConfigValidationResult:
        """Create a successful validation result."""
        return cls(success=True, errors=[])

    @classmethod
    def failure_result(cls, errors: List[str]) -> ConfigValidationResult:
        """Create a failed validation result with error messages."""
        return cls(success=False, errors=errors.copy())


class Configuration(ABC):
    """Abstract base class for all configuration types.

    Subclasses must implement:
    - validate(): Perform configuration-specific validation
    - to_dict(): Convert configuration to dictionary
    - from_dict(): Create configuration from dictionary (class method)
    """

    @abstractmethod
    def validate(self) -> ConfigValidationResult:
        """Validate this configuration and return detailed results."""
        pass

    @abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to a dictionary.

        Raises:
            SerializationError: If configuration cannot be serialized
        """
        pass

    @classmethod
    @abstractmethod
    def from_dict(cls, data: Dict[str, Any]) -> Configuration:
        """Create configuration instance from dictionary data.

        Any configuration serialized with to_dict() must be recreatable
        with from_dict().

        Raises:
            SerializationError: If data cannot be deserialized
        """
        pass

    def is_valid(self) -> bool:
        """Check if this configuration is valid."""
        return self.validate().success

    def validate_or_raise(self, **kwargs: Any) -> None:
        """Validate configuration and raise ValidationError if invalid.

        Keyword arguments are passed through to validate().

        Raises:
            ValidationError: If configuration validation fails
        """
        result = self.validate(**kwargs)
        if not result.success:
            error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {error}" for error in result.errors)
            raise ValidationError(error_msg)
