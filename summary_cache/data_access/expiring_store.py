"""
Expiring key/value store on top of a single DynamoDB table.

Every item carries a ``ttl`` attribute (epoch seconds) that doubles as the
table's DynamoDB TTL attribute. DynamoDB removes expired items lazily, so this
client treats an item whose ``ttl`` has passed as absent on every operation.
"""
import logging
import time
from typing import Callable, Optional, Protocol

from .dynamodb_client import DynamoDBClient
from .exceptions import ConditionalCheckFailedError, StoreTransportError

logger = logging.getLogger(__name__)


class ExpiringStore(Protocol):
    """Interface consumed by the lock, correlation table and orchestrator."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str, ttl_seconds: int) -> bool:
        ...

    def set_if_absent(self, key: str, value: str, ttl_seconds: int) -> bool:
        ...

    def delete(self, key: str, expected_value: Optional[str] = None) -> bool:
        ...


class DynamoDBExpiringStore:
    """
    ExpiringStore backed by DynamoDB.

    Read failures are absorbed (logged, reported as a miss); write failures
    raise StoreTransportError so callers never mistake a failed write for a
    successful one.
    """

    def __init__(
        self,
        table_name: str,
        dynamodb_client: Optional[DynamoDBClient] = None,
        clock: Callable[[], float] = time.time
    ):
        """
        Initialize the store.

        Args:
            table_name: DynamoDB table with hash key ``key``
            dynamodb_client: Optional DynamoDB client instance
            clock: Source of the current epoch time in seconds
        """
        self.table_name = table_name
        self.client = dynamodb_client or DynamoDBClient()
        self.clock = clock

    def _now(self) -> int:
        return int(self.clock())

    def _is_live(self, item: dict) -> bool:
        return int(item.get('ttl', 0)) > self._now()

    def get(self, key: str) -> Optional[str]:
        """
        Get the live value for a key.

        Args:
            key: Store key

        Returns:
            Stored value, or None when absent, expired or unreadable
        """
        try:
            item = self.client.get_item(
                table_name=self.table_name,
                key={'key': key},
                consistent_read=True
            )
        except StoreTransportError as e:
            logger.warning(f"Store read failed for {key}, treating as miss: {e}")
            return None

        if not item or not self._is_live(item):
            return None
        return item.get('value')

    def set(self, key: str, value: str, ttl_seconds: int) -> bool:
        """
        Unconditionally write a value with a TTL.

        Raises:
            StoreTransportError: If the write fails
        """
        self.client.put_item(
            table_name=self.table_name,
            item={'key': key, 'value': value, 'ttl': self._now() + ttl_seconds}
        )
        return True

    def set_if_absent(self, key: str, value: str, ttl_seconds: int) -> bool:
        """
        Atomically create a value only if no live value exists.

        A single conditional PutItem: the write succeeds when the key is
        missing or its previous value has expired but not yet been reaped.

        Returns:
            True if this call created the value

        Raises:
            StoreTransportError: If the write fails for a reason other than
                the condition
        """
        now = self._now()
        try:
            self.client.put_item(
                table_name=self.table_name,
                item={'key': key, 'value': value, 'ttl': now + ttl_seconds},
                condition_expression='attribute_not_exists(#key) OR #ttl <= :now',
                expression_attribute_names={'#key': 'key', '#ttl': 'ttl'},
                expression_attribute_values={':now': now}
            )
        except ConditionalCheckFailedError:
            return False
        return True

    def delete(self, key: str, expected_value: Optional[str] = None) -> bool:
        """
        Delete a key, optionally only when it still holds ``expected_value``.

        Returns:
            True if a live value was removed

        Raises:
            StoreTransportError: If the delete fails
        """
        kwargs = {}
        if expected_value is not None:
            kwargs = {
                'condition_expression': '#value = :expected',
                'expression_attribute_names': {'#value': 'value'},
                'expression_attribute_values': {':expected': expected_value},
            }

        try:
            old_item = self.client.delete_item(
                table_name=self.table_name,
                key={'key': key},
                return_values='ALL_OLD',
                **kwargs
            )
        except ConditionalCheckFailedError:
            return False

        return bool(old_item) and self._is_live(old_item)
