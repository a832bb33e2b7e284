"""
Service-level exceptions for summary generation.
"""
from typing import Iterable, Optional


class SummaryServiceError(Exception):
    """Base exception for summary service errors."""
    pass


class ValidationError(SummaryServiceError):
    """Exception raised when a request cannot be served as submitted."""

    def __init__(self, message: str, field: Optional[str] = None):
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Request field that failed validation
        """
        super().__init__(message)
        self.field = field
        self.message = message


class ProviderError(SummaryServiceError):
    """Exception raised when the inference provider rejects a submission."""

    def __init__(self, message: str, status_code: int = None):
        """
        Initialize provider error.

        Args:
            message: Error message
            status_code: HTTP status returned by the provider, if any
        """
        super().__init__(message)
        self.status_code = status_code


class InternalError(SummaryServiceError):
    """Exception raised when a request fails for reasons the caller cannot fix."""
    pass


class ConfigurationError(SummaryServiceError):
    """Exception raised when the deployment is missing required settings."""

    def __init__(self, missing: Iterable[str]):
        self.missing = sorted(missing)
        super().__init__(f"{', '.join(self.missing)} must be set")
