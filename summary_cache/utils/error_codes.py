"""
Standardized error codes for the summary API.
"""

from enum import Enum


class ErrorCode(str, Enum):
    """
    Enumeration of all error codes returned by the summary API.
    """

    # Validation Errors
    VALIDATION_MISSING_PARAMETER = 'VALIDATION_MISSING_PARAMETER'
    VALIDATION_INVALID_MESSAGE_FORMAT = 'VALIDATION_INVALID_MESSAGE_FORMAT'
    VALIDATION_NO_CONTENT = 'VALIDATION_NO_CONTENT'

    # Routing
    ROUTE_NOT_FOUND = 'ROUTE_NOT_FOUND'

    # Internal Errors
    INTERNAL_SERVER_ERROR = 'INTERNAL_SERVER_ERROR'
    INTERNAL_STORE_ERROR = 'INTERNAL_STORE_ERROR'
    INTERNAL_PROVIDER_ERROR = 'INTERNAL_PROVIDER_ERROR'
    INTERNAL_CONFIGURATION_ERROR = 'INTERNAL_CONFIGURATION_ERROR'


ERROR_CODE_TO_HTTP_STATUS = {
    ErrorCode.VALIDATION_MISSING_PARAMETER: 400,
    ErrorCode.VALIDATION_INVALID_MESSAGE_FORMAT: 400,
    ErrorCode.VALIDATION_NO_CONTENT: 400,
    ErrorCode.ROUTE_NOT_FOUND: 404,
    ErrorCode.INTERNAL_SERVER_ERROR: 500,
    ErrorCode.INTERNAL_STORE_ERROR: 500,
    ErrorCode.INTERNAL_PROVIDER_ERROR: 500,
    ErrorCode.INTERNAL_CONFIGURATION_ERROR: 500,
}


def get_http_status(error_code: ErrorCode) -> int:
    return ERROR_CODE_TO_HTTP_STATUS.get(error_code, 500)
