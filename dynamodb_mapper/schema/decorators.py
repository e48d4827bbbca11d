"""
Class-level table declaration.

@table runs after the class body, when every field declaration is visible,
and turns them into the finished TableDefinition:

    @table(name='orders', read_capacity_units=5, write_capacity_units=5)
    class Order(DynamoDBMixin, BaseModel):
        order_id: str = Key()
"""

import logging
from typing import Optional, Type

from pydantic import BaseModel

from ..exceptions import SchemaError
from .builder import TableDefinitionBuilder
from .definitions import ProvisionedThroughput, TableDefinition

logger = logging.getLogger(__name__)


def table(
    cls: Optional[Type[BaseModel]] = None,
    *,
    name: Optional[str] = None,
    read_capacity_units: Optional[int] = None,
    write_capacity_units: Optional[int] = None,
    registry=None
):
    """Finalize a model's table definition and register it.

    Usable bare (@table) or with options (@table(name=...)).

    Args:
        cls: The decorated Pydantic model class
        name: Declared table name; defaults to the class name
        read_capacity_units: Table read capacity; defaults to the configured value
        write_capacity_units: Table write capacity; defaults to the configured value
        registry: Registry to add the table to; defaults to the process-wide one

    Returns:
        The class, with __table_definition__ and __auto_generate__ set

    Raises:
        SchemaError: If the class is not a Pydantic model or its declarations are invalid
    """
    if (read_capacity_units is None) != (write_capacity_units is None):
        raise SchemaError("Table must set both read_capacity_units and write_capacity_units or neither", name)

    def decorate(model_class: Type[BaseModel]) -> Type[BaseModel]:
        if not (isinstance(model_class, type) and issubclass(model_class, BaseModel)):
            raise SchemaError(f"@table can only decorate Pydantic models, got {model_class!r}", name)

        table_name = name or model_class.__name__
        throughput = None
        if read_capacity_units is not None:
            throughput = ProvisionedThroughput(
                read_capacity_units=read_capacity_units,
                write_capacity_units=write_capacity_units
            )

        definition, auto_generate = TableDefinitionBuilder.from_model(model_class, table_name, throughput).build()
        model_class.__table_definition__ = definition
        model_class.__auto_generate__ = auto_generate

        target = registry
        if target is None:
            from ..registry import default_registry
            target = default_registry
        target.add_table(model_class, definition, auto_generate)
        return model_class

    if cls is not None:
        return decorate(cls)
    return decorate


def get_table_definition(model_class: Type[BaseModel]) -> TableDefinition:
    """Return the definition finalized by @table for this exact class.

    Raises:
        SchemaError: If the class was never decorated
    """
    # Subclasses inherit the attribute; only the decorated class owns it
    definition = model_class.__dict__.get('__table_definition__')
    if definition is None:
        raise SchemaError(f"{model_class.__name__} is not declared with @table")
    return definition
