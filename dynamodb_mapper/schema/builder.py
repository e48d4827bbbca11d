"""
Table definition aggregation.

Field declarations arrive one at a time, in field order, and are merged into a
single TableDefinition. Keys append to the primary key schema; index
declarations are merged into the index with the same name, creating it the
first time the name is seen. build() validates the result once every field
has been processed.
"""

import logging
from typing import Any, Dict, Iterator, List, Optional, Tuple, Type, Union

from pydantic import BaseModel

from ..exceptions import SchemaError
from .definitions import Projection, ProvisionedThroughput, TableDefinition
from .fields import IndexOptions, KeyOptions, infer_attribute_type

logger = logging.getLogger(__name__)

Declaration = Union[KeyOptions, IndexOptions]


def collect_declarations(model_class: Type[BaseModel]) -> Iterator[Tuple[str, Any, Declaration]]:
    """Yield (field_name, annotation, marker) for every key/index marker in field order."""
    for field_name, field_info in model_class.model_fields.items():
        for marker in field_info.metadata:
            if isinstance(marker, (KeyOptions, IndexOptions)):
                yield field_name, field_info.annotation, marker


class TableDefinitionBuilder:
    """Accumulates field-level declarations into one TableDefinition."""

    def __init__(self, table_name: str = '', throughput: Optional[ProvisionedThroughput] = None):
        self.definition = TableDefinition.default(throughput)
        self.definition.table_name = table_name
        self.auto_generate: List[str] = []
        # Index settings given explicitly by some field, keyed by index name
        self._explicit_projection: Dict[str, Projection] = {}
        self._explicit_throughput: Dict[str, ProvisionedThroughput] = {}

    @property
    def table_name(self) -> str:
        return self.definition.table_name

    def _attribute_type(self, field_name: str, annotation: Any, override: Optional[str]) -> str:
        if override:
            return override
        try:
            return infer_attribute_type(annotation, field_name)
        except SchemaError as e:
            raise SchemaError(e.message, self.table_name or None, field_name) from e

    def add(self, field_name: str, annotation: Any, marker: Declaration) -> None:
        if isinstance(marker, KeyOptions):
            self.add_key(field_name, annotation, marker)
        else:
            self.add_index(field_name, annotation, marker)

    def add_key(self, field_name: str, annotation: Any, options: KeyOptions) -> None:
        if field_name in self.definition.key_fields():
            raise SchemaError(f"Field '{field_name}' is declared as a key twice", self.table_name, field_name)

        attribute_type = self._attribute_type(field_name, annotation, options.attribute_type)
        if options.should_auto_generate and attribute_type != 'S':
            raise SchemaError(
                f"Auto-generated key '{field_name}' must be a string attribute, got {attribute_type}",
                self.table_name, field_name
            )

        self.definition.add_key(field_name, options.type)
        self.definition.add_attribute(field_name, attribute_type)
        if options.should_auto_generate:
            self.auto_generate.append(field_name)

    def add_index(self, field_name: str, annotation: Any, options: IndexOptions) -> None:
        index_name = options.index_name(field_name)

        projection = None
        if options.projection is not None or options.non_key_attributes:
            try:
                projection = Projection(
                    projection_type=options.projection or 'INCLUDE',
                    non_key_attributes=list(options.non_key_attributes) if options.non_key_attributes else None
                )
            except ValueError as e:
                raise SchemaError(f"Invalid projection for index '{index_name}': {e}", self.table_name, field_name) from e

        throughput = None
        if options.read_capacity_units is not None:
            throughput = ProvisionedThroughput(
                read_capacity_units=options.read_capacity_units,
                write_capacity_units=options.write_capacity_units
            )

        index = self.definition.get_or_create_index(index_name, projection, throughput)

        if projection is not None:
            previous = self._explicit_projection.setdefault(index_name, projection)
            if previous != projection:
                raise SchemaError(
                    f"Index '{index_name}' declared with conflicting projections: "
                    f"{previous.projection_type} and {projection.projection_type}",
                    self.table_name, field_name
                )
            index.projection = projection

        if throughput is not None:
            previous = self._explicit_throughput.setdefault(index_name, throughput)
            if previous != throughput:
                raise SchemaError(
                    f"Index '{index_name}' declared with conflicting throughput", self.table_name, field_name
                )
            index.provisioned_throughput = throughput

        if any(k.attribute_name == field_name for k in index.key_schema):
            raise SchemaError(
                f"Field '{field_name}' appears twice in index '{index_name}'", self.table_name, field_name
            )

        index.add_key(field_name, options.type)
        self.definition.add_attribute(
            field_name, self._attribute_type(field_name, annotation, options.attribute_type)
        )

    def build(self) -> Tuple[TableDefinition, Tuple[str, ...]]:
        """Validate and return the finished definition and auto-generated key fields.

        Raises:
            SchemaError: If the table or any index lacks a valid key schema
        """
        self.definition.validate_keys()
        logger.debug(
            f"Built table definition '{self.table_name}' with keys {self.definition.key_fields()} "
            f"and {len(self.definition.global_secondary_indexes)} index(es)"
        )
        return self.definition, tuple(self.auto_generate)

    @classmethod
    def from_model(
        cls,
        model_class: Type[BaseModel],
        table_name: str,
        throughput: Optional[ProvisionedThroughput] = None
    ) -> 'TableDefinitionBuilder':
        builder = cls(table_name, throughput)
        for field_name, annotation, marker in collect_declarations(model_class):
            builder.add(field_name, annotation, marker)
        return builder
