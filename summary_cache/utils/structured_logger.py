"""
Structured JSON logging for Lambda functions.

This module provides a structured logger that outputs JSON-formatted
logs with correlation IDs, context, and standardized fields for
CloudWatch Logs Insights queries.
"""

import json
import logging
import os
import time
from typing import Any, Optional
from datetime import datetime, timezone
from decimal import Decimal


class DecimalEncoder(json.JSONEncoder):
    """JSON encoder that handles Decimal types."""
    def default(self, obj):
        if isinstance(obj, Decimal):
            return float(obj)
        return super().default(obj)


class StructuredLogger:
    """
    Structured JSON logger for Lambda functions.

    Outputs logs in JSON format with:
    - Timestamp (ISO 8601)
    - Log level
    - Correlation IDs (fingerprint, jobId, requestId)
    - Component and operation
    - Message and additional context
    """

    def __init__(
        self,
        component: str,
        fingerprint: Optional[str] = None,
        job_id: Optional[str] = None,
        request_id: Optional[str] = None
    ):
        """
        Initialize structured logger.

        Args:
            component: Component name (e.g., 'SummaryOrchestrator', 'WebhookHandler')
            fingerprint: Content fingerprint for correlation
            job_id: Provider job identifier for correlation
            request_id: Request identifier from Lambda context
        """
        self.component = component
        self.fingerprint = fingerprint
        self.job_id = job_id
        self.request_id = request_id
        self.logger = logging.getLogger(component)

        log_level = os.getenv('LOG_LEVEL', 'INFO')
        self.logger.setLevel(getattr(logging, log_level, logging.INFO))

    def bind(
        self,
        fingerprint: Optional[str] = None,
        job_id: Optional[str] = None
    ) -> 'StructuredLogger':
        """
        Return a logger carrying additional correlation IDs.

        Args:
            fingerprint: Content fingerprint
            job_id: Provider job identifier

        Returns:
            New StructuredLogger sharing this logger's component and request ID
        """
        return StructuredLogger(
            component=self.component,
            fingerprint=fingerprint or self.fingerprint,
            job_id=job_id or self.job_id,
            request_id=self.request_id
        )

    def _format_log(
        self,
        level: str,
        message: str,
        operation: Optional[str] = None,
        **kwargs
    ) -> str:
        """
        Format log entry as JSON.

        Args:
            level: Log level (DEBUG, INFO, WARNING, ERROR)
            message: Log message
            operation: Operation being performed
            **kwargs: Additional context fields

        Returns:
            JSON-formatted log string
        """
        log_entry = {
            'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'level': level,
            'component': self.component,
            'message': message
        }

        if self.fingerprint:
            log_entry['fingerprint'] = self.fingerprint
        if self.job_id:
            log_entry['jobId'] = self.job_id
        if self.request_id:
            log_entry['requestId'] = self.request_id

        if operation:
            log_entry['operation'] = operation

        if kwargs:
            log_entry['context'] = kwargs

        return json.dumps(log_entry, cls=DecimalEncoder, default=str)

    def debug(self, message: str, operation: Optional[str] = None, **kwargs) -> None:
        self.logger.debug(self._format_log('DEBUG', message, operation, **kwargs))

    def info(self, message: str, operation: Optional[str] = None, **kwargs) -> None:
        self.logger.info(self._format_log('INFO', message, operation, **kwargs))

    def warning(self, message: str, operation: Optional[str] = None, **kwargs) -> None:
        self.logger.warning(self._format_log('WARNING', message, operation, **kwargs))

    def error(
        self,
        message: str,
        operation: Optional[str] = None,
        error: Optional[Exception] = None,
        **kwargs
    ) -> None:
        """
        Log error message.

        Args:
            message: Log message
            operation: Operation being performed
            error: Exception object if available
            **kwargs: Additional context
        """
        if error:
            kwargs['error_type'] = type(error).__name__
            kwargs['error_message'] = str(error)

        self.logger.error(self._format_log('ERROR', message, operation, **kwargs))

    def log_state_change(
        self,
        state_type: str,
        old_value: Any,
        new_value: Any
    ) -> None:
        """
        Log state change at INFO level.

        Args:
            state_type: Type of state (e.g. 'summaryStatus')
            old_value: Previous value
            new_value: New value
        """
        self.info(
            f'State change: {state_type}',
            operation='state_change',
            state_type=state_type,
            old_value=str(old_value),
            new_value=str(new_value)
        )


class LoggingContext:
    """
    Context manager for logging operation duration.

    Automatically logs operation start, end, and duration.
    """

    def __init__(
        self,
        logger: StructuredLogger,
        operation: str,
        **kwargs
    ):
        self.logger = logger
        self.operation = operation
        self.context = kwargs
        self.start_time: Optional[float] = None

    def __enter__(self):
        """Log operation start."""
        self.start_time = time.time()
        self.logger.debug(
            f'Starting operation: {self.operation}',
            operation=self.operation,
            **self.context
        )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Log operation end and duration."""
        if self.start_time is not None:
            duration_ms = (time.time() - self.start_time) * 1000

            if exc_type is not None:
                self.logger.error(
                    f'Operation failed: {self.operation}',
                    operation=self.operation,
                    error=exc_val,
                    duration_ms=duration_ms,
                    **self.context
                )
            else:
                self.logger.debug(
                    f'Completed operation: {self.operation}',
                    operation=self.operation,
                    duration_ms=duration_ms,
                    **self.context
                )


def get_structured_logger(
    component: str,
    fingerprint: Optional[str] = None,
    job_id: Optional[str] = None,
    request_id: Optional[str] = None
) -> StructuredLogger:
    """
    Factory function for creating StructuredLogger instances.

    Example:
        >>> logger = get_structured_logger('WebhookHandler', job_id='abc123')
        >>> logger.info('Callback received')
    """
    return StructuredLogger(
        component=component,
        fingerprint=fingerprint,
        job_id=job_id,
        request_id=request_id
    )


def configure_lambda_logging():
    """
    Configure logging for Lambda environment.

    Sets up root logger to output to stdout with appropriate format.
    Should be called at module level in Lambda handlers.
    """
    log_level = os.getenv('LOG_LEVEL', 'INFO')

    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format='%(message)s',  # messages are already JSON
        force=True
    )

    if log_level != 'DEBUG':
        logging.getLogger('boto3').setLevel(logging.WARNING)
        logging.getLogger('botocore').setLevel(logging.WARNING)
        logging.getLogger('urllib3').setLevel(logging.WARNING)
