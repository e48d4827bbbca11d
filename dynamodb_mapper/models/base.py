"""
Base Model Components and Mixins

DynamoDBMixin gives any Pydantic model the conversion to and from DynamoDB
items used by the service facade.

DynamoDB Requirements:
- datetime → ISO string
- UUID → string
- bool → 'true'/'false' string (keeps booleans usable as S index keys)
- float → Decimal (boto3 rejects Python floats)
- Decimal → preserved (boto3 handles the Number type)

Usage:
    @table
    class User(DynamoDBMixin, BaseModel):
        user_id: str = Key()
        is_active: bool = Index(name='active-index')

    item = user.to_dynamodb_item()
    user = User.from_dynamodb_item(item)
"""

import logging
import typing
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID
from typing import Any, Dict, Union

from pydantic import BaseModel

logger = logging.getLogger(__name__)


def _is_bool_annotation(annotation: Any) -> bool:
    if annotation is bool:
        return True
    origin = typing.get_origin(annotation)
    if origin is Union or (origin is not None and getattr(origin, '__name__', '') == 'UnionType'):
        return any(arg is bool for arg in typing.get_args(annotation))
    return False


def to_dynamodb_value(obj: Any) -> Any:
    """Recursively convert Python objects to DynamoDB-compatible types."""
    if isinstance(obj, dict):
        return {k: to_dynamodb_value(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [to_dynamodb_value(v) for v in obj]
    elif isinstance(obj, bool):
        return str(obj).lower()
    elif isinstance(obj, (datetime, date)):
        return obj.isoformat()
    elif isinstance(obj, UUID):
        return str(obj)
    elif isinstance(obj, float):
        return Decimal(str(obj))
    else:
        return obj


class DynamoDBMixin(BaseModel):
    """
    Mixin providing DynamoDB serialization and deserialization functionality.

    Only top-level fields annotated as bool are turned back from
    'true'/'false' strings, so a str field holding "true" stays a string.
    """

    def to_dynamodb_item(self) -> Dict[str, Any]:
        """
        Convert model to DynamoDB-compatible item.

        None values are left out, so unset auto-generated keys can be filled
        in before the item is written.

        Returns:
            DynamoDB-compatible dictionary ready for storage
        """
        return to_dynamodb_value(self.model_dump(exclude_none=True))

    @classmethod
    def from_dynamodb_item(cls, item: Dict[str, Any]):
        """
        Create model instance from DynamoDB item.

        Args:
            item: DynamoDB item dictionary with DynamoDB-specific types

        Returns:
            Model instance with properly converted Python types

        Raises:
            ValidationError: If item data is invalid for the model
        """
        try:
            # NULL attributes (written for empty values) fall back to field defaults
            converted = {k: v for k, v in item.items() if v is not None}
            for field_name, field_info in cls.model_fields.items():
                value = converted.get(field_name)
                if isinstance(value, str) and _is_bool_annotation(field_info.annotation):
                    if value.lower() in ('true', 'false'):
                        converted[field_name] = value.lower() == 'true'
            return cls(**converted)

        except Exception as e:
            logger.error(f"Failed to convert DynamoDB item to {cls.__name__}: {e}")
            from ..exceptions import ValidationError
            raise ValidationError(f"Failed to convert DynamoDB item to {cls.__name__}: {e}", original_error=e) from e
