"""
DynamoDB table name constants.
"""
import os
from typing import Mapping, Optional

SUMMARY_STORE_TABLE_NAME = 'SummaryStore'

TABLE_NAME_ENV_VARS = {
    'SUMMARY_STORE_TABLE_NAME': SUMMARY_STORE_TABLE_NAME,
}


def get_table_name(
    table_key: str,
    default: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None
) -> str:
    """
    Get table name from environment variable or use default constant.

    Supports both the ``_TABLE_NAME`` suffix and the shorter ``_TABLE``
    spelling used by older deployment templates.

    Args:
        table_key: Environment variable key (e.g., 'SUMMARY_STORE_TABLE_NAME')
        default: Default table name if environment variable not set
        environ: Mapping to read instead of os.environ

    Returns:
        Table name from environment or default

    Example:
        >>> os.environ['SUMMARY_STORE_TABLE_NAME'] = 'SummaryStore-dev'
        >>> get_table_name('SUMMARY_STORE_TABLE_NAME')
        'SummaryStore-dev'
    """
    if default is None:
        default = TABLE_NAME_ENV_VARS.get(table_key, '')

    env = os.environ if environ is None else environ

    value = env.get(table_key)
    if value:
        return value

    legacy_key = table_key.replace('_TABLE_NAME', '_TABLE')
    value = env.get(legacy_key)
    if value:
        return value

    return default
