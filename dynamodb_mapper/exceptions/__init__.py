# Base exception class
from .base import DynamoDBMapperError

from .domain_exceptions import (
    ConflictError,
    ConnectionError,
    ItemNotFoundError,
    RetryableError,
    SchemaError,
    TableNotRegisteredError,
    ValidationError,
)

__all__ = [
    # Base exception
    "DynamoDBMapperError",

    # Domain exceptions (alphabetically ordered)
    "ConflictError",
    "ConnectionError",
    "ItemNotFoundError",
    "RetryableError",
    "SchemaError",
    "TableNotRegisteredError",
    "ValidationError",
]
