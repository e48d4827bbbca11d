"""
Declarative schema layer.

- Key / Index: field-level key and secondary index declarations
- table: class-level declaration that aggregates them into a TableDefinition
- TableDefinition and friends: models of the CreateTable request shape
"""

from .builder import TableDefinitionBuilder, collect_declarations
from .decorators import get_table_definition, table
from .definitions import (
    AttributeDefinition,
    GlobalSecondaryIndex,
    KeySchemaElement,
    Projection,
    ProvisionedThroughput,
    TableDefinition,
)
from .fields import Index, IndexOptions, Key, KeyOptions, infer_attribute_type

__all__ = [
    "AttributeDefinition",
    "GlobalSecondaryIndex",
    "Index",
    "IndexOptions",
    "Key",
    "KeyOptions",
    "KeySchemaElement",
    "Projection",
    "ProvisionedThroughput",
    "TableDefinition",
    "TableDefinitionBuilder",
    "collect_declarations",
    "get_table_definition",
    "infer_attribute_type",
    "table",
]
