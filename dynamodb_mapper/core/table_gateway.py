"""
Thin DynamoDB Table Gateway

This module provides a lightweight wrapper around boto3 DynamoDB operations
for a single physical table. The service facade composes it; nothing here
knows about models or schema declarations.

The gateway focuses on:
- Creating the boto3 resource and Table handles lazily
- Forwarding item operations with optional expressions
- Provisioning the table (CreateTable) and waiting for it
- Mapping botocore ClientErrors to domain exceptions
"""

import logging
from typing import Any, Dict, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from ..config import DynamoDBConfig
from ..exceptions import (
    ConflictError,
    ConnectionError,
    ItemNotFoundError,
    RetryableError,
    ValidationError,
)

logger = logging.getLogger(__name__)

TABLE_EXISTS_ERROR = 'ResourceInUseException'


def map_dynamodb_error(
    error: ClientError,
    operation: str,
    table_name: str,
    resource_id: Optional[str] = None
) -> Exception:
    """Map DynamoDB ClientError to domain-specific exceptions.

    Args:
        error: The boto3 ClientError
        operation: The operation that failed (e.g., "GetItem", "PutItem")
        table_name: The DynamoDB table name
        resource_id: Optional resource identifier for context

    Returns:
        ConflictError for conditional failures and resources in use,
        ItemNotFoundError or ConnectionError for missing resources,
        ValidationError for rejected requests, RetryableError for
        throttling and service errors, ConnectionError otherwise
    """
    error_code = error.response['Error']['Code']
    error_message = error.response['Error']['Message']

    context = f"{operation} on {table_name}"
    if resource_id:
        context += f" (resource: {resource_id})"

    full_message = f"{context}: {error_message}"

    if error_code == 'ConditionalCheckFailedException':
        return ConflictError(f"Conditional check failed - {full_message}", resource_id, original_error=error)

    elif error_code == 'ResourceNotFoundException':
        if resource_id:
            return ItemNotFoundError(table_name, {'resource_id': resource_id}, original_error=error)
        else:
            return ConnectionError(f"Table not found - {full_message}", original_error=error)

    elif error_code == 'ValidationException':
        return ValidationError(f"Validation failed - {full_message}", original_error=error)

    elif error_code in ['ProvisionedThroughputExceededException', 'RequestLimitExceeded', 'ThrottlingException']:
        return RetryableError(f"Throttling - {full_message}", original_error=error)

    elif error_code in ['InternalServerError', 'ServiceUnavailable', 'ServiceUnavailableException']:
        return RetryableError(f"Service unavailable - {full_message}", original_error=error)

    elif error_code in ['UnrecognizedClientException', 'AccessDeniedException']:
        return ConnectionError(f"Authentication/authorization failed - {full_message}", original_error=error)

    elif error_code in ['ExpiredTokenException', 'InvalidSignatureException', 'IncompleteSignatureException']:
        return ConnectionError(f"Invalid or expired credentials - {full_message}", original_error=error)

    elif error_code == 'ItemCollectionSizeLimitExceededException':
        return ValidationError(f"Item collection size limit exceeded - {full_message}", original_error=error)

    elif error_code == 'LimitExceededException':
        return ValidationError(f"DynamoDB limit exceeded - {full_message}", original_error=error)

    elif error_code == TABLE_EXISTS_ERROR:
        return ConflictError(f"Resource in use - {full_message}", resource_id, original_error=error)

    elif error_code == 'TransactionConflictException':
        return ConflictError(f"Transaction conflict - {full_message}", resource_id, original_error=error)

    elif error_code == 'RequestTimeoutException':
        return RetryableError(f"Request timeout - {full_message}", original_error=error)

    logger.warning(f"Unknown DynamoDB error code '{error_code}' mapped to ConnectionError")
    return ConnectionError(f"DynamoDB operation failed - {full_message}", original_error=error)


def _resource_id(key: Dict[str, Any]) -> Optional[str]:
    if not key:
        return None
    return "/".join(str(v) for v in key.values())


class TableGateway:
    """
    Thin gateway for one DynamoDB table.

    Every boto3 call goes through here so errors are mapped the same way
    for provisioning and item access.
    """

    def __init__(self, config: DynamoDBConfig, table_name: str):
        """Initialize table gateway.

        Args:
            config: DynamoDB configuration
            table_name: Physical name of the DynamoDB table
        """
        self.config = config
        self.table_name = table_name
        self._dynamodb = None
        self._table = None

    @property
    def dynamodb(self):
        """Lazy initialization of DynamoDB resource."""
        if self._dynamodb is None:
            try:
                session = boto3.Session(
                    aws_access_key_id=self.config.aws_access_key_id,
                    aws_secret_access_key=self.config.aws_secret_access_key,
                    region_name=self.config.region_name
                )

                dynamodb_config = {
                    'region_name': self.config.region_name
                }

                if self.config.endpoint_url:
                    dynamodb_config['endpoint_url'] = self.config.endpoint_url

                dynamodb_config['config'] = Config(
                    retries={'max_attempts': self.config.retries},
                    max_pool_connections=self.config.max_pool_connections,
                    read_timeout=self.config.timeout_seconds,
                    connect_timeout=self.config.timeout_seconds
                )

                self._dynamodb = session.resource('dynamodb', **dynamodb_config)
            except Exception as e:
                logger.error(f"Failed to create DynamoDB resource: {e}")
                raise ConnectionError(f"Failed to connect to DynamoDB: {e}", e) from e
        return self._dynamodb

    @property
    def table(self):
        """Get boto3 DynamoDB Table resource."""
        if self._table is None:
            try:
                self._table = self.dynamodb.Table(self.table_name)
            except Exception as e:
                logger.error(f"Failed to access table '{self.table_name}': {e}")
                raise ConnectionError(f"Failed to access table '{self.table_name}': {e}", e) from e
        return self._table

    def create_table(self, exist_ok: bool = True, **kwargs) -> bool:
        """
        Provision the table with CreateTable.

        Args:
            exist_ok: Treat "table already exists" as success
            **kwargs: boto3 create_table parameters (TableName is filled in if absent)

        Returns:
            True if the table was created, False if it already existed

        Raises:
            ConflictError: If the table exists and exist_ok is False
        """
        kwargs.setdefault('TableName', self.table_name)
        try:
            self.dynamodb.meta.client.create_table(**kwargs)
        except ClientError as e:
            if exist_ok and e.response['Error']['Code'] == TABLE_EXISTS_ERROR:
                logger.info(f"Table exists: {self.table_name}")
                return False
            raise map_dynamodb_error(e, "CreateTable", self.table_name) from e

        logger.info(f"Successfully created {self.table_name}")
        return True

    def wait_until_exists(self) -> None:
        """Block until DynamoDB reports the table as existing."""
        try:
            waiter = self.dynamodb.meta.client.get_waiter('table_exists')
            waiter.wait(TableName=self.table_name)
        except ClientError as e:
            raise map_dynamodb_error(e, "DescribeTable", self.table_name) from e

    def get_item(
        self,
        key: Dict[str, Any],
        consistent_read: bool = False,
        projection_expression: Optional[str] = None,
        expression_attribute_names: Optional[Dict[str, str]] = None
    ) -> Optional[Dict[str, Any]]:
        """
        Get one item by primary key.

        Returns:
            The item, or None if no item has this key
        """
        try:
            get_kwargs = {'Key': key}
            if consistent_read:
                get_kwargs['ConsistentRead'] = True
            if projection_expression:
                get_kwargs['ProjectionExpression'] = projection_expression
            if expression_attribute_names:
                get_kwargs['ExpressionAttributeNames'] = expression_attribute_names

            response = self.table.get_item(**get_kwargs)
            return response.get('Item')
        except ClientError as e:
            raise map_dynamodb_error(e, "GetItem", self.table_name, _resource_id(key)) from e

    def put_item(
        self,
        item: Dict[str, Any],
        condition_expression=None,
        expression_attribute_values: Optional[Dict[str, Any]] = None,
        expression_attribute_names: Optional[Dict[str, str]] = None
    ) -> None:
        """
        Put item into DynamoDB table.

        Example:
            gateway.put_item(
                item={'user_id': 'u-1', 'name': 'Ada'},
                condition_expression=Attr('user_id').not_exists()
            )
        """
        try:
            put_kwargs = {'Item': item}
            if condition_expression is not None:
                put_kwargs['ConditionExpression'] = condition_expression
            if expression_attribute_values:
                put_kwargs['ExpressionAttributeValues'] = expression_attribute_values
            if expression_attribute_names:
                put_kwargs['ExpressionAttributeNames'] = expression_attribute_names

            self.table.put_item(**put_kwargs)
            logger.info(f"Put item in {self.table_name}: {item}")
        except ClientError as e:
            raise map_dynamodb_error(e, "PutItem", self.table_name) from e

    def update_item(
        self,
        key: Dict[str, Any],
        update_expression: str,
        expression_attribute_values: Optional[Dict[str, Any]] = None,
        expression_attribute_names: Optional[Dict[str, str]] = None,
        condition_expression=None,
        return_values: str = 'NONE'
    ) -> Optional[Dict[str, Any]]:
        """
        Update item in DynamoDB table.

        Returns:
            Attributes selected by return_values, or None for 'NONE'
        """
        try:
            update_kwargs = {
                'Key': key,
                'UpdateExpression': update_expression,
                'ReturnValues': return_values
            }

            if expression_attribute_values:
                update_kwargs['ExpressionAttributeValues'] = expression_attribute_values
            if expression_attribute_names:
                update_kwargs['ExpressionAttributeNames'] = expression_attribute_names
            if condition_expression is not None:
                update_kwargs['ConditionExpression'] = condition_expression

            response = self.table.update_item(**update_kwargs)
            logger.info(f"Updated item in {self.table_name}: {key}")

            return response.get('Attributes') if return_values != 'NONE' else None

        except ClientError as e:
            raise map_dynamodb_error(e, "UpdateItem", self.table_name, _resource_id(key)) from e

    def delete_item(
        self,
        key: Dict[str, Any],
        condition_expression=None,
        expression_attribute_values: Optional[Dict[str, Any]] = None,
        expression_attribute_names: Optional[Dict[str, str]] = None,
        return_values: str = 'NONE'
    ) -> Optional[Dict[str, Any]]:
        """
        Delete item from DynamoDB table.

        Returns:
            Deleted attributes if return_values != 'NONE'
        """
        try:
            delete_kwargs = {
                'Key': key,
                'ReturnValues': return_values
            }

            if condition_expression is not None:
                delete_kwargs['ConditionExpression'] = condition_expression
            if expression_attribute_values:
                delete_kwargs['ExpressionAttributeValues'] = expression_attribute_values
            if expression_attribute_names:
                delete_kwargs['ExpressionAttributeNames'] = expression_attribute_names

            response = self.table.delete_item(**delete_kwargs)
            logger.info(f"Deleted item from {self.table_name}: {key}")

            return response.get('Attributes') if return_values != 'NONE' else None

        except ClientError as e:
            raise map_dynamodb_error(e, "DeleteItem", self.table_name, _resource_id(key)) from e

    def query(self, **kwargs) -> Dict[str, Any]:
        """
        Execute DynamoDB Query operation.

        Raw pass-through to boto3 with error handling.

        Example:
            response = gateway.query(
                IndexName='email-index',
                KeyConditionExpression=Key('email').eq('ada@example.com'),
                Limit=50
            )
        """
        try:
            return self.table.query(**kwargs)
        except ClientError as e:
            raise map_dynamodb_error(e, "Query", self.table_name) from e

    def scan(self, **kwargs) -> Dict[str, Any]:
        """
        Execute DynamoDB Scan operation.

        Raw pass-through to boto3 with error handling. Scans read the whole
        table; callers should always pass a Limit.
        """
        try:
            if 'Limit' not in kwargs:
                logger.warning(f"Scan on {self.table_name} without Limit - consider adding one")
            return self.table.scan(**kwargs)
        except ClientError as e:
            raise map_dynamodb_error(e, "Scan", self.table_name) from e


def create_table_gateway(config: DynamoDBConfig, table_name: str) -> TableGateway:
    """
    Factory function to create a TableGateway instance.

    Args:
        config: DynamoDB configuration
        table_name: Declared table name; prefixed via config.get_table_name()

    Returns:
        Configured TableGateway instance
    """
    full_table_name = config.get_table_name(table_name)
    return TableGateway(config, full_table_name)
