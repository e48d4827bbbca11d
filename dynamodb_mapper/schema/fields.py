"""
Field-level schema declarations.

Key() and Index() wrap the standard Pydantic Field and attach a KeyOptions or
IndexOptions marker to the field's metadata. Nothing is aggregated here: the
@table class decorator collects the markers in field order once the class
body has been fully processed.

Usage:
    @table
    class Order(DynamoDBMixin, BaseModel):
        order_id: str = Key()
        created_at: datetime = Key(type='RANGE')
        customer_id: str = Index(name='customer-index')
        status: Annotated[str, IndexOptions(name='customer-index', type='RANGE')] = 'new'

A field can take part in several indexes by stacking IndexOptions in
Annotated metadata.
"""

import enum
import typing
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Literal, Optional, Tuple, Union
from uuid import UUID

from pydantic import Field

from ..exceptions import SchemaError

KeyType = Literal['HASH', 'RANGE']

_STRING_TYPES = (str, datetime, date, UUID, bool)
_NUMBER_TYPES = (int, float, Decimal)


@dataclass(frozen=True)
class KeyOptions:
    """Marks a field as part of the table's primary key."""

    type: KeyType = 'HASH'
    auto_generate: Optional[bool] = None
    attribute_type: Optional[str] = None

    def __post_init__(self):
        _check_key_type(self.type)
        _check_attribute_type(self.attribute_type)

    @property
    def should_auto_generate(self) -> bool:
        # Only partition keys are generated unless asked otherwise
        if self.auto_generate is None:
            return self.type == 'HASH'
        return self.auto_generate


@dataclass(frozen=True)
class IndexOptions:
    """Marks a field as a key element of a global secondary index.

    name defaults to the field name; fields sharing a name share the index.
    """

    name: Optional[str] = None
    type: KeyType = 'HASH'
    projection: Optional[str] = None
    non_key_attributes: Optional[Tuple[str, ...]] = None
    read_capacity_units: Optional[int] = None
    write_capacity_units: Optional[int] = None
    attribute_type: Optional[str] = None

    def __post_init__(self):
        _check_key_type(self.type)
        _check_attribute_type(self.attribute_type)
        if (self.read_capacity_units is None) != (self.write_capacity_units is None):
            raise SchemaError(
                f"Index '{self.name}' must set both read_capacity_units and write_capacity_units or neither"
            )

    def index_name(self, field_name: str) -> str:
        return self.name or field_name


def _check_key_type(key_type: str) -> None:
    if key_type not in ('HASH', 'RANGE'):
        raise SchemaError(f"Key type must be 'HASH' or 'RANGE', got {key_type!r}")


def _check_attribute_type(attribute_type: Optional[str]) -> None:
    if attribute_type is not None and attribute_type not in ('S', 'N', 'B'):
        raise SchemaError(f"Attribute type must be 'S', 'N' or 'B', got {attribute_type!r}")


def Key(
    default: Any = ...,
    *,
    type: KeyType = 'HASH',
    auto_generate: Optional[bool] = None,
    attribute_type: Optional[str] = None,
    **kwargs: Any
) -> Any:
    """Declare a Pydantic field as a primary key element.

    Args:
        default: Field default; auto-generated keys usually pass None
        type: 'HASH' (partition key) or 'RANGE' (sort key)
        auto_generate: Fill in a generated id on put when the value is empty.
            Defaults to True for HASH keys and False for RANGE keys.
        attribute_type: Override the DynamoDB type inferred from the annotation
        **kwargs: Additional Pydantic Field arguments

    Returns:
        Pydantic FieldInfo carrying a KeyOptions marker
    """
    options = KeyOptions(type=type, auto_generate=auto_generate, attribute_type=attribute_type)
    # Generated keys are filled in on put, so the model must build without them
    if default is ... and options.should_auto_generate and 'default_factory' not in kwargs:
        default = None
    field_info = Field(default, **kwargs)
    field_info.metadata.append(options)
    return field_info


def Index(
    default: Any = ...,
    *,
    name: Optional[str] = None,
    type: KeyType = 'HASH',
    projection: Optional[str] = None,
    non_key_attributes: Optional[Tuple[str, ...]] = None,
    read_capacity_units: Optional[int] = None,
    write_capacity_units: Optional[int] = None,
    attribute_type: Optional[str] = None,
    **kwargs: Any
) -> Any:
    """Declare a Pydantic field as a global secondary index key element.

    Args:
        default: Field default
        name: Index name; defaults to the field name
        type: 'HASH' or 'RANGE' within the index
        projection: 'KEYS_ONLY' (default), 'ALL' or 'INCLUDE'
        non_key_attributes: Attributes projected by an INCLUDE index
        read_capacity_units: Index read capacity; defaults to the table's
        write_capacity_units: Index write capacity; defaults to the table's
        attribute_type: Override the DynamoDB type inferred from the annotation
        **kwargs: Additional Pydantic Field arguments

    Returns:
        Pydantic FieldInfo carrying an IndexOptions marker
    """
    field_info = Field(default, **kwargs)
    field_info.metadata.append(
        IndexOptions(
            name=name,
            type=type,
            projection=projection,
            non_key_attributes=tuple(non_key_attributes) if non_key_attributes else None,
            read_capacity_units=read_capacity_units,
            write_capacity_units=write_capacity_units,
            attribute_type=attribute_type
        )
    )
    return field_info


def _unwrap_optional(annotation: Any) -> Any:
    origin = typing.get_origin(annotation)
    if origin is Union or (origin is not None and getattr(origin, '__name__', '') == 'UnionType'):
        args = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def infer_attribute_type(annotation: Any, field_name: Optional[str] = None) -> str:
    """Map a field annotation to a DynamoDB scalar attribute type.

    Args:
        annotation: The field's type annotation
        field_name: Used for error context

    Returns:
        'S', 'N' or 'B'

    Raises:
        SchemaError: If the annotation has no scalar DynamoDB equivalent
    """
    annotation = _unwrap_optional(annotation)

    if typing.get_origin(annotation) is Literal:
        values = typing.get_args(annotation)
        if all(isinstance(v, str) for v in values):
            return 'S'
        if all(isinstance(v, int) and not isinstance(v, bool) for v in values):
            return 'N'

    if isinstance(annotation, type):
        if issubclass(annotation, enum.Enum):
            if issubclass(annotation, str):
                return 'S'
            if issubclass(annotation, int):
                return 'N'
        elif issubclass(annotation, _STRING_TYPES):
            return 'S'
        elif issubclass(annotation, _NUMBER_TYPES):
            return 'N'
        elif issubclass(annotation, (bytes, bytearray)):
            return 'B'

    raise SchemaError(
        f"Cannot infer a DynamoDB attribute type from {annotation!r}; pass attribute_type=",
        field_name=field_name
    )
