"""
Data access layer for the DynamoDB-backed expiring store.
"""
from .dynamodb_client import DynamoDBClient
from .expiring_store import ExpiringStore, DynamoDBExpiringStore
from .dedup_lock import DedupLock
from .correlation_table import CorrelationTable
from .summary_repository import SummaryRepository
from .exceptions import (
    StoreError,
    StoreTransportError,
    ConditionalCheckFailedError,
    RetryableError,
)

__all__ = [
    'DynamoDBClient',
    'ExpiringStore',
    'DynamoDBExpiringStore',
    'DedupLock',
    'CorrelationTable',
    'SummaryRepository',
    'StoreError',
    'StoreTransportError',
    'ConditionalCheckFailedError',
    'RetryableError',
]
