"""
Custom exceptions for the expiring store layer.
"""


class StoreError(Exception):
    """Base exception for expiring store operations."""
    pass


class StoreTransportError(StoreError):
    """Exception raised when the remote store cannot be reached or rejects a call."""
    pass


class ConditionalCheckFailedError(StoreError):
    """Exception raised when a conditional check fails."""
    pass


class RetryableError(StoreTransportError):
    """Exception raised for transient errors that can be retried."""
    pass
