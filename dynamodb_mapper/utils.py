"""
DynamoDB Mapper Utilities

Key Features:
- Id generation for auto-generated keys
- Empty value conversion before writes
- Query building (projections, filters, key conditions, update expressions)
- Key building from registered table definitions
"""

import logging
from typing import Any, Dict, List, Optional, Tuple, Type
from uuid import uuid4

from boto3.dynamodb.conditions import Attr, Key
from pydantic import BaseModel

from .exceptions import ValidationError

logger = logging.getLogger(__name__)


# =============================================================================
# Item Preparation
# =============================================================================

def generate_id() -> str:
    """Generate a unique 32-character hex id for auto-generated keys."""
    return uuid4().hex


def is_empty_value(value: Any) -> bool:
    return isinstance(value, (str, bytes, bytearray, set, frozenset, list)) and len(value) == 0


def convert_empty_values(obj: Any) -> Any:
    """Replace empty strings, sets, lists and binary values with None (DynamoDB NULL).

    Applied recursively to nested maps and lists.

    Example:
        >>> convert_empty_values({'name': '', 'tags': set(), 'n': 0})
        {'name': None, 'tags': None, 'n': 0}
    """
    if isinstance(obj, dict):
        return {k: convert_empty_values(v) for k, v in obj.items()}
    if is_empty_value(obj):
        return None
    if isinstance(obj, list):
        return [convert_empty_values(v) for v in obj]
    return obj


# =============================================================================
# Query Building Utilities
# =============================================================================

def build_projection_expression(fields: Optional[List[str]]) -> Tuple[Optional[str], Optional[Dict[str, str]]]:
    """Build ProjectionExpression with ExpressionAttributeNames.

    Placeholder names keep DynamoDB reserved words safe.

    Example:
        >>> build_projection_expression(['user_id', 'name'])
        ('#f0, #f1', {'#f0': 'user_id', '#f1': 'name'})
    """
    if not fields:
        return None, None

    expression_names = {}
    projection_parts = []

    for i, field in enumerate(fields):
        attr_name = f"#f{i}"
        expression_names[attr_name] = field
        projection_parts.append(attr_name)

    return ', '.join(projection_parts), expression_names


def build_filter_expression(filters: Dict[str, Any]):
    """Build an AND-ed equality FilterExpression, or None if no filters.

    Example:
        >>> build_filter_expression({'is_active': 'true', 'country': 'IE'})
        # Returns: Attr('is_active').eq('true') & Attr('country').eq('IE')
    """
    if not filters:
        return None

    conditions = [Attr(attr_name).eq(value) for attr_name, value in filters.items()]

    filter_expr = conditions[0]
    for condition in conditions[1:]:
        filter_expr = filter_expr & condition

    return filter_expr


def build_key_condition(
    partition_key: str,
    partition_value: Any,
    sort_key: Optional[str] = None,
    sort_condition: str = "eq",
    sort_value: Optional[Any] = None,
    sort_value2: Optional[Any] = None
):
    """Build KeyConditionExpression for DynamoDB queries.

    Args:
        partition_key: Partition key attribute name
        partition_value: Partition key value
        sort_key: Sort key attribute name (optional)
        sort_condition: 'eq', 'begins_with', 'between', 'gt', 'gte', 'lt' or 'lte'
        sort_value: Sort key value
        sort_value2: Upper bound for 'between'

    Raises:
        ValueError: For invalid sort_condition or missing sort_value2 for 'between'
    """
    condition = Key(partition_key).eq(partition_value)

    if sort_key and sort_value is not None:
        sort_key_obj = Key(sort_key)

        if sort_condition == "eq":
            condition = condition & sort_key_obj.eq(sort_value)
        elif sort_condition == "begins_with":
            condition = condition & sort_key_obj.begins_with(sort_value)
        elif sort_condition == "between":
            if sort_value2 is None:
                raise ValueError("'between' condition requires sort_value2 parameter")
            condition = condition & sort_key_obj.between(sort_value, sort_value2)
        elif sort_condition == "gt":
            condition = condition & sort_key_obj.gt(sort_value)
        elif sort_condition == "gte":
            condition = condition & sort_key_obj.gte(sort_value)
        elif sort_condition == "lt":
            condition = condition & sort_key_obj.lt(sort_value)
        elif sort_condition == "lte":
            condition = condition & sort_key_obj.lte(sort_value)
        else:
            raise ValueError(
                f"Unsupported sort_condition: {sort_condition}. "
                f"Supported values: eq, begins_with, between, gt, gte, lt, lte"
            )

    return condition


def build_update_expression(updates: Dict[str, Any]) -> Tuple[str, Dict[str, str], Dict[str, Any]]:
    """Build a SET UpdateExpression with placeholder names and values.

    Returns:
        (UpdateExpression, ExpressionAttributeNames, ExpressionAttributeValues)

    Raises:
        ValidationError: If updates is empty

    Example:
        >>> build_update_expression({'name': 'Ada'})
        ('SET #u0 = :u0', {'#u0': 'name'}, {':u0': 'Ada'})
    """
    if not updates:
        raise ValidationError("Updates dictionary cannot be empty")

    update_parts = []
    expression_names = {}
    expression_values = {}

    for i, (attr, value) in enumerate(updates.items()):
        name_placeholder = f"#u{i}"
        value_placeholder = f":u{i}"
        update_parts.append(f"{name_placeholder} = {value_placeholder}")
        expression_names[name_placeholder] = attr
        expression_values[value_placeholder] = value

    return "SET " + ", ".join(update_parts), expression_names, expression_values


# =============================================================================
# Key Building (Registered Table Definitions)
# =============================================================================

def build_model_key(model_class: Type[BaseModel], **key_values: Any) -> Dict[str, Any]:
    """Build a DynamoDB key from a @table model's key schema.

    Examples:
        >>> build_model_key(Order, order_id="o-1", created_at="2024-01-01")
        {'order_id': 'o-1', 'created_at': '2024-01-01'}

    Raises:
        SchemaError: If the model is not declared with @table
        ValueError: If a key field is missing
    """
    from .schema import get_table_definition

    definition = get_table_definition(model_class)
    key = {}
    for field_name, label in ((definition.hash_key, 'partition'), (definition.range_key, 'sort')):
        if field_name is None:
            continue
        if field_name not in key_values:
            raise ValueError(f"Missing {label} key '{field_name}' for {model_class.__name__}")
        key[field_name] = key_values[field_name]
    return key


def build_index_key_condition(
    model_class: Type[BaseModel],
    index_name: str,
    sort_condition: str = "eq",
    sort_value2: Optional[Any] = None,
    **key_values: Any
):
    """Build KeyConditionExpression for a declared global secondary index.

    Raises:
        SchemaError: If the model is not declared with @table
        ValueError: If the index is unknown or its partition key value is missing
    """
    from .schema import get_table_definition

    definition = get_table_definition(model_class)
    index = definition.get_index(index_name)
    if index is None:
        available = [i.index_name for i in definition.global_secondary_indexes]
        raise ValueError(f"Index '{index_name}' not found on {model_class.__name__}. Available indexes: {available}")

    partition_key = next(k.attribute_name for k in index.key_schema if k.key_type == 'HASH')
    sort_key = next((k.attribute_name for k in index.key_schema if k.key_type == 'RANGE'), None)

    if partition_key not in key_values:
        raise ValueError(f"Missing index partition key '{partition_key}' for index '{index_name}'")

    return build_key_condition(
        partition_key=partition_key,
        partition_value=key_values[partition_key],
        sort_key=sort_key,
        sort_condition=sort_condition,
        sort_value=key_values.get(sort_key) if sort_key else None,
        sort_value2=sort_value2
    )


__all__ = [
    "generate_id",
    "is_empty_value",
    "convert_empty_values",
    "build_projection_expression",
    "build_filter_expression",
    "build_key_condition",
    "build_update_expression",
    "build_model_key",
    "build_index_key_condition",
]
