"""
DynamoDB Table Definition Models

Pydantic models mirroring the CreateTable request shape. A TableDefinition is
built up incrementally from field-level declarations and rendered to boto3
keyword arguments with to_create_table_kwargs().

Merging rules:
- Attribute definitions are merged by name; the same name with a different
  type is a schema error.
- Secondary indexes are looked up by name and created on first use, so any
  number of fields can contribute key elements to the same index.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..exceptions import SchemaError

KeyType = Literal['HASH', 'RANGE']
AttributeType = Literal['S', 'N', 'B']
ProjectionType = Literal['KEYS_ONLY', 'ALL', 'INCLUDE']

# HASH must precede RANGE in every key schema sent to DynamoDB
_KEY_ORDER = {'HASH': 0, 'RANGE': 1}


class KeySchemaElement(BaseModel):
    """One attribute-name/role pair of a key schema."""

    attribute_name: str
    key_type: KeyType

    def to_dynamodb(self) -> Dict[str, str]:
        return {'AttributeName': self.attribute_name, 'KeyType': self.key_type}


class AttributeDefinition(BaseModel):
    """Scalar type declaration for an attribute used in a key schema."""

    attribute_name: str
    attribute_type: AttributeType

    def to_dynamodb(self) -> Dict[str, str]:
        return {'AttributeName': self.attribute_name, 'AttributeType': self.attribute_type}


class ProvisionedThroughput(BaseModel):
    read_capacity_units: int = Field(default=10, ge=1)
    write_capacity_units: int = Field(default=10, ge=1)

    def to_dynamodb(self) -> Dict[str, int]:
        return {
            'ReadCapacityUnits': self.read_capacity_units,
            'WriteCapacityUnits': self.write_capacity_units
        }


class Projection(BaseModel):
    """Attributes copied into a secondary index."""

    projection_type: ProjectionType = 'KEYS_ONLY'
    non_key_attributes: Optional[List[str]] = None

    model_config = ConfigDict(frozen=True)

    @model_validator(mode='after')
    def check_non_key_attributes(self):
        if self.projection_type == 'INCLUDE' and not self.non_key_attributes:
            raise ValueError("INCLUDE projection requires non_key_attributes")
        if self.projection_type != 'INCLUDE' and self.non_key_attributes:
            raise ValueError(f"non_key_attributes are only valid with INCLUDE projection, got {self.projection_type}")
        return self

    def to_dynamodb(self) -> Dict[str, Any]:
        projection = {'ProjectionType': self.projection_type}
        if self.non_key_attributes:
            projection['NonKeyAttributes'] = list(self.non_key_attributes)
        return projection


def _validate_key_schema(key_schema: List[KeySchemaElement], owner: str, table_name: str) -> None:
    hash_keys = [k.attribute_name for k in key_schema if k.key_type == 'HASH']
    range_keys = [k.attribute_name for k in key_schema if k.key_type == 'RANGE']

    if not hash_keys:
        raise SchemaError(f"{owner} has no HASH key", table_name)
    if len(hash_keys) > 1:
        raise SchemaError(f"{owner} declares more than one HASH key: {hash_keys}", table_name)
    if len(range_keys) > 1:
        raise SchemaError(f"{owner} declares more than one RANGE key: {range_keys}", table_name)


def _ordered(key_schema: List[KeySchemaElement]) -> List[Dict[str, str]]:
    return [k.to_dynamodb() for k in sorted(key_schema, key=lambda k: _KEY_ORDER[k.key_type])]


class GlobalSecondaryIndex(BaseModel):
    index_name: str
    key_schema: List[KeySchemaElement] = Field(default_factory=list)
    projection: Projection = Field(default_factory=Projection)
    provisioned_throughput: Optional[ProvisionedThroughput] = None

    def add_key(self, attribute_name: str, key_type: KeyType) -> None:
        self.key_schema.append(KeySchemaElement(attribute_name=attribute_name, key_type=key_type))

    def to_dynamodb(self, default_throughput: ProvisionedThroughput) -> Dict[str, Any]:
        throughput = self.provisioned_throughput or default_throughput
        return {
            'IndexName': self.index_name,
            'KeySchema': _ordered(self.key_schema),
            'Projection': self.projection.to_dynamodb(),
            'ProvisionedThroughput': throughput.to_dynamodb()
        }


class TableDefinition(BaseModel):
    """
    Aggregate schema for one entity type.

    Field-level declarations add keys, attribute definitions and index key
    elements; the class-level declaration fills in the table name and
    finalizes it.
    """

    table_name: str = ''
    key_schema: List[KeySchemaElement] = Field(default_factory=list)
    attribute_definitions: List[AttributeDefinition] = Field(default_factory=list)
    global_secondary_indexes: List[GlobalSecondaryIndex] = Field(default_factory=list)
    # None until declared; rendering falls back to the configured default
    provisioned_throughput: Optional[ProvisionedThroughput] = None

    @classmethod
    def default(cls, throughput: Optional[ProvisionedThroughput] = None) -> 'TableDefinition':
        """Return a fresh, empty definition that shares no state with any other."""
        definition = cls()
        if throughput is not None:
            definition.provisioned_throughput = throughput.model_copy()
        return definition

    def effective_throughput(self, default: Optional[ProvisionedThroughput] = None) -> ProvisionedThroughput:
        return self.provisioned_throughput or default or ProvisionedThroughput()

    def add_key(self, attribute_name: str, key_type: KeyType) -> None:
        self.key_schema.append(KeySchemaElement(attribute_name=attribute_name, key_type=key_type))

    def add_attribute(self, attribute_name: str, attribute_type: AttributeType) -> None:
        """Merge an attribute definition; redeclaring with the same type is a no-op."""
        for existing in self.attribute_definitions:
            if existing.attribute_name != attribute_name:
                continue
            if existing.attribute_type != attribute_type:
                raise SchemaError(
                    f"Attribute '{attribute_name}' declared as both "
                    f"{existing.attribute_type} and {attribute_type}",
                    self.table_name or None,
                    attribute_name
                )
            return
        self.attribute_definitions.append(
            AttributeDefinition(attribute_name=attribute_name, attribute_type=attribute_type)
        )

    def get_index(self, index_name: str) -> Optional[GlobalSecondaryIndex]:
        for index in self.global_secondary_indexes:
            if index.index_name == index_name:
                return index
        return None

    def get_or_create_index(
        self,
        index_name: str,
        projection: Optional[Projection] = None,
        throughput: Optional[ProvisionedThroughput] = None
    ) -> GlobalSecondaryIndex:
        index = self.get_index(index_name)
        if index is None:
            index = GlobalSecondaryIndex(
                index_name=index_name,
                projection=projection or Projection(),
                provisioned_throughput=throughput
            )
            self.global_secondary_indexes.append(index)
        return index

    @property
    def hash_key(self) -> Optional[str]:
        for key in self.key_schema:
            if key.key_type == 'HASH':
                return key.attribute_name
        return None

    @property
    def range_key(self) -> Optional[str]:
        for key in self.key_schema:
            if key.key_type == 'RANGE':
                return key.attribute_name
        return None

    def key_fields(self) -> List[str]:
        return [k for k in (self.hash_key, self.range_key) if k]

    def validate_keys(self) -> None:
        """Check the table and every index for a usable key schema.

        Raises:
            SchemaError: If a key schema has no HASH key, or repeats a role
        """
        _validate_key_schema(self.key_schema, f"Table '{self.table_name}'", self.table_name)
        for index in self.global_secondary_indexes:
            _validate_key_schema(index.key_schema, f"Index '{index.index_name}'", self.table_name)

    def to_create_table_kwargs(
        self,
        table_name: Optional[str] = None,
        default_throughput: Optional[ProvisionedThroughput] = None
    ) -> Dict[str, Any]:
        """Render boto3 create_table keyword arguments.

        Args:
            table_name: Physical table name; defaults to the declared name
            default_throughput: Used when the table declared no throughput (10/10 if omitted)

        Returns:
            Dictionary ready to be passed as create_table(**kwargs)
        """
        throughput = self.effective_throughput(default_throughput)
        kwargs = {
            'TableName': table_name or self.table_name,
            'KeySchema': _ordered(self.key_schema),
            'AttributeDefinitions': [a.to_dynamodb() for a in self.attribute_definitions],
            'ProvisionedThroughput': throughput.to_dynamodb()
        }
        if self.global_secondary_indexes:
            # Indexes without their own throughput inherit the table's
            kwargs['GlobalSecondaryIndexes'] = [
                index.to_dynamodb(throughput)
                for index in self.global_secondary_indexes
            ]
        return kwargs
