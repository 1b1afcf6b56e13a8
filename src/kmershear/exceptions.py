"""
Custom exception hierarchy for kmershear.

Provides granular exception types so callers can tell bad input apart from
malformed files while still catching everything through one base class.
"""


class KmerShearException(Exception):
    """Base exception for all kmershear errors."""

    def __init__(self, message: str, details: dict = None):
        """
        Initialize exception with message and optional details.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional context
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


# Input validation exceptions
class ValidationException(KmerShearException):
    """Base exception for validation errors."""
    pass


class InvalidInputError(ValidationException, ValueError):
    """Sequence, k-mer or pattern cannot be processed as given."""
    pass


class InvalidParameterError(ValidationException, ValueError):
    """Parameter value is invalid or out of range."""
    pass


# File format exceptions
class FormatException(KmerShearException):
    """Base exception for malformed input files."""
    pass


class CortexFormatError(FormatException):
    """Cortex binary is truncated or does not have the expected layout."""
    pass
