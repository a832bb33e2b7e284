"""
DynamoDB client with conditional writes, throttling retries and error mapping.
"""
import logging
from typing import Dict, Optional, Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .exceptions import (
    StoreTransportError,
    ConditionalCheckFailedError,
    RetryableError,
)
from ..utils.retry import retry_with_backoff

logger = logging.getLogger(__name__)

RETRYABLE_ERROR_CODES = frozenset([
    'ProvisionedThroughputExceededException',
    'ThrottlingException',
    'RequestLimitExceeded',
    'InternalServerError',
    'ServiceUnavailable',
])


def _translate_client_error(e: ClientError, action: str, table_name: str) -> Exception:
    """Map a botocore ClientError onto the store exception hierarchy."""
    code = e.response.get('Error', {}).get('Code', '')
    if code == 'ConditionalCheckFailedException':
        return ConditionalCheckFailedError("Conditional check failed")
    if code in RETRYABLE_ERROR_CODES:
        return RetryableError(f"Throttled during {action} on {table_name}: {code}")
    logger.error(f"Error during {action} on {table_name}: {e}")
    return StoreTransportError(f"Failed to {action}: {e}")


class DynamoDBClient:
    """
    DynamoDB client exposing the item-level calls the expiring store needs.
    """

    def __init__(self, region: str = 'us-east-1', dynamodb_resource=None):
        """
        Initialize DynamoDB client.

        Args:
            region: AWS region for DynamoDB
            dynamodb_resource: Optional boto3 DynamoDB resource (for testing)
        """
        self.dynamodb = dynamodb_resource or boto3.resource('dynamodb', region_name=region)

    def get_table(self, table_name: str):
        """
        Get DynamoDB table resource.

        Args:
            table_name: Name of the table

        Returns:
            DynamoDB table resource
        """
        return self.dynamodb.Table(table_name)

    @retry_with_backoff()
    def get_item(
        self,
        table_name: str,
        key: Dict[str, Any],
        consistent_read: bool = False
    ) -> Optional[Dict[str, Any]]:
        """
        Get item from DynamoDB table.

        Args:
            table_name: Name of the table
            key: Primary key of the item
            consistent_read: Whether to use consistent read

        Returns:
            Item dict or None if not found

        Raises:
            StoreTransportError: On DynamoDB errors
        """
        try:
            table = self.get_table(table_name)
            response = table.get_item(
                Key=key,
                ConsistentRead=consistent_read
            )
            return response.get('Item')
        except ClientError as e:
            raise _translate_client_error(e, 'get item', table_name)
        except BotoCoreError as e:
            logger.error(f"Transport error getting item from {table_name}: {e}")
            raise StoreTransportError(f"Failed to get item: {e}")

    @retry_with_backoff()
    def put_item(
        self,
        table_name: str,
        item: Dict[str, Any],
        condition_expression: Optional[str] = None,
        expression_attribute_values: Optional[Dict[str, Any]] = None,
        expression_attribute_names: Optional[Dict[str, str]] = None
    ) -> None:
        """
        Put item into DynamoDB table.

        Args:
            table_name: Name of the table
            item: Item to put
            condition_expression: Optional condition expression
            expression_attribute_values: Optional expression attribute values
            expression_attribute_names: Optional expression attribute names

        Raises:
            ConditionalCheckFailedError: If condition check fails
            StoreTransportError: On other DynamoDB errors
        """
        try:
            table = self.get_table(table_name)
            kwargs = {'Item': item}

            if condition_expression:
                kwargs['ConditionExpression'] = condition_expression
            if expression_attribute_values:
                kwargs['ExpressionAttributeValues'] = expression_attribute_values
            if expression_attribute_names:
                kwargs['ExpressionAttributeNames'] = expression_attribute_names

            table.put_item(**kwargs)
        except ClientError as e:
            raise _translate_client_error(e, 'put item', table_name)
        except BotoCoreError as e:
            logger.error(f"Transport error putting item to {table_name}: {e}")
            raise StoreTransportError(f"Failed to put item: {e}")

    @retry_with_backoff()
    def delete_item(
        self,
        table_name: str,
        key: Dict[str, Any],
        condition_expression: Optional[str] = None,
        expression_attribute_values: Optional[Dict[str, Any]] = None,
        expression_attribute_names: Optional[Dict[str, str]] = None,
        return_values: str = 'NONE'
    ) -> Optional[Dict[str, Any]]:
        """
        Delete item from DynamoDB table.

        Args:
            table_name: Name of the table
            key: Primary key of the item
            condition_expression: Optional condition expression
            expression_attribute_values: Optional expression attribute values
            expression_attribute_names: Optional expression attribute names
            return_values: NONE or ALL_OLD

        Returns:
            The deleted item's attributes when return_values is ALL_OLD and
            the item existed, otherwise None

        Raises:
            ConditionalCheckFailedError: If condition check fails
            StoreTransportError: On other DynamoDB errors
        """
        try:
            table = self.get_table(table_name)
            kwargs = {'Key': key, 'ReturnValues': return_values}

            if condition_expression:
                kwargs['ConditionExpression'] = condition_expression
            if expression_attribute_values:
                kwargs['ExpressionAttributeValues'] = expression_attribute_values
            if expression_attribute_names:
                kwargs['ExpressionAttributeNames'] = expression_attribute_names

            response = table.delete_item(**kwargs)
            return response.get('Attributes')
        except ClientError as e:
            raise _translate_client_error(e, 'delete item', table_name)
        except BotoCoreError as e:
            logger.error(f"Transport error deleting item from {table_name}: {e}")
            raise StoreTransportError(f"Failed to delete item: {e}")
