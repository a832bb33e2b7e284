"""
Configuration constants and environment loading.
"""
from .settings import (
    ServiceConfig,
    load_config,
    URL_INDEX_TTL_SECONDS,
    CACHE_ENTRY_TTL_SECONDS,
    DEDUP_LOCK_TTL_SECONDS,
    CORRELATION_TTL_SECONDS,
    FINGERPRINT_TEXT_PREFIX_CHARS,
)
from .table_names import get_table_name, SUMMARY_STORE_TABLE_NAME

__all__ = [
    'ServiceConfig',
    'load_config',
    'URL_INDEX_TTL_SECONDS',
    'CACHE_ENTRY_TTL_SECONDS',
    'DEDUP_LOCK_TTL_SECONDS',
    'CORRELATION_TTL_SECONDS',
    'FINGERPRINT_TEXT_PREFIX_CHARS',
    'get_table_name',
    'SUMMARY_STORE_TABLE_NAME',
]
