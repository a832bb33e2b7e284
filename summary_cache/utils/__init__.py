"""
Utility functions and services.
"""

from .structured_logger import (
    StructuredLogger,
    LoggingContext,
    get_structured_logger,
    configure_lambda_logging,
)
from .response_builder import success_response, error_response
from .error_codes import ErrorCode
from .metrics import MetricsPublisher

__all__ = [
    'StructuredLogger',
    'LoggingContext',
    'get_structured_logger',
    'configure_lambda_logging',
    'success_response',
    'error_response',
    'ErrorCode',
    'MetricsPublisher',
]
