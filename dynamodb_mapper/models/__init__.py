from .base import DynamoDBMixin, to_dynamodb_value

__all__ = [
    "DynamoDBMixin",
    "to_dynamodb_value",
]
