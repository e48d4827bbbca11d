"""
Domain-Specific Exceptions for the DynamoDB Mapper

Every exception extends DynamoDBMapperError so callers can catch the whole
family in one place.

Organized by category:
1. Schema Declaration Errors
2. Data Validation Errors
3. Resource Not Found Errors
4. Conflict and Conditional Errors
5. Infrastructure and Retry Errors
"""

from typing import Any, Dict, Optional

from .base import DynamoDBMapperError


# =============================================================================
# Schema Declaration Errors
# =============================================================================

class SchemaError(DynamoDBMapperError):
    """Raised when key/index declarations cannot form a valid table definition.

    Used for:
    - Missing or duplicated HASH keys
    - Conflicting attribute types for the same attribute
    - Unsupported field annotations without an explicit attribute type
    - Decorating a class that is not a Pydantic model
    """

    def __init__(self, message: str, table_name: Optional[str] = None, field_name: Optional[str] = None):
        self.table_name = table_name
        self.field_name = field_name
        context = {}
        if table_name:
            context['table_name'] = table_name
        if field_name:
            context['field_name'] = field_name
        super().__init__(message, None, context)


class TableNotRegisteredError(DynamoDBMapperError):
    """Raised when an operation targets a class that was never declared as a table."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"No table registered for '{name}'", None, {'name': name})


# =============================================================================
# Data Validation Errors
# =============================================================================

class ValidationError(DynamoDBMapperError):
    """Raised when data validation fails.

    Used for:
    - Pydantic model validation failures
    - Item conversion failures
    - ValidationException responses from DynamoDB
    """

    def __init__(self, message: str, errors: Optional[Dict[str, Any]] = None, original_error: Optional[Exception] = None):
        """Initialize validation error.

        Args:
            message: Human-readable error message
            errors: Dictionary of field-level validation errors
            original_error: The original exception that caused this error
        """
        self.errors = errors or {}
        context = {
            'validation_errors': self.errors
        }
        super().__init__(message, original_error, context)


# =============================================================================
# Resource Not Found Errors
# =============================================================================

class ItemNotFoundError(DynamoDBMapperError):
    """Raised when a specific item or table is not found in DynamoDB."""

    def __init__(self, table_name: str, key: dict, original_error: Optional[Exception] = None):
        """Initialize item not found error.

        Args:
            table_name: Name of the DynamoDB table
            key: The key that was not found
            original_error: The original exception that caused this error
        """
        self.table_name = table_name
        self.key = key
        message = f"Item not found in table '{table_name}' with key: {key}"
        context = {
            'table_name': table_name,
            'key': key
        }
        super().__init__(message, original_error, context)


# =============================================================================
# Conflict and Conditional Errors
# =============================================================================

class ConflictError(DynamoDBMapperError):
    """Raised when a conditional operation fails or a resource is in use.

    Used for:
    - ConditionalCheckFailedException from DynamoDB
    - ResourceInUseException outside of migration
    - Transaction conflicts
    """

    def __init__(self, message: str, resource_id: Optional[str] = None, original_error: Optional[Exception] = None):
        self.resource_id = resource_id
        context = {}
        if resource_id:
            context['resource_id'] = resource_id
        super().__init__(message, original_error, context)


# =============================================================================
# Infrastructure and Retry Errors
# =============================================================================

class ConnectionError(DynamoDBMapperError):
    """Raised when connection to DynamoDB fails.

    Used for:
    - Network connectivity issues
    - Authentication/authorization failures
    - Missing tables
    - Unknown service errors
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None, context: Optional[Dict[str, Any]] = None):
        super().__init__(message, original_error, context)


class RetryableError(DynamoDBMapperError):
    """Raised when an operation fails due to throttling or temporary service issues.

    The mapper never retries on its own; botocore's configured retries are
    the only retry layer.
    """

    def __init__(self, message: str, retry_after_seconds: Optional[int] = None, original_error: Optional[Exception] = None):
        self.retry_after_seconds = retry_after_seconds
        context = {}
        if retry_after_seconds:
            context['retry_after_seconds'] = retry_after_seconds
        super().__init__(message, original_error, context)
