"""
Utility for building standardized API Gateway responses.
"""
import json
import time
from typing import Dict, Any, Optional

from .error_codes import ErrorCode, get_http_status

JSON_HEADERS = {
    'Content-Type': 'application/json',
    'Access-Control-Allow-Origin': '*',
}


def success_response(
    status_code: int = 200,
    body: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """
    Build success response.

    Args:
        status_code: HTTP status code
        body: Response body dict

    Returns:
        API Gateway response dict
    """
    return {
        'statusCode': status_code,
        'headers': dict(JSON_HEADERS),
        'body': json.dumps(body or {})
    }


def error_response(
    error_code: ErrorCode,
    message: str,
    details: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """
    Build error response.

    Args:
        error_code: Application error code, also selects the HTTP status
        message: Human-readable error message
        details: Optional additional error details

    Returns:
        API Gateway response dict
    """
    body = {
        'error': message,
        'code': error_code.value,
        'timestamp': int(time.time() * 1000)
    }

    if details:
        body.update(details)

    return {
        'statusCode': get_http_status(error_code),
        'headers': dict(JSON_HEADERS),
        'body': json.dumps(body)
    }
