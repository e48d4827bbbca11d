from .config import DynamoDBConfig
from .exceptions import (
    ConflictError,
    ConnectionError,
    DynamoDBMapperError,
    ItemNotFoundError,
    RetryableError,
    SchemaError,
    TableNotRegisteredError,
    ValidationError,
)
from .models import DynamoDBMixin
from .schema import (
    Index,
    IndexOptions,
    Key,
    KeyOptions,
    ProvisionedThroughput,
    TableDefinition,
    get_table_definition,
    table,
)
from .registry import TableRegistry, default_registry
from .core import TableGateway, create_table_gateway
from .service import (
    DynamoDBService,
    MigrationResult,
    configure,
    default_service,
    delete,
    get,
    migrate,
    put,
    query,
    scan,
    update,
)

__version__ = "1.0.0"
__all__ = [
    # Configuration
    "DynamoDBConfig",

    # Exceptions
    "ConflictError",
    "ConnectionError",
    "DynamoDBMapperError",
    "ItemNotFoundError",
    "RetryableError",
    "SchemaError",
    "TableNotRegisteredError",
    "ValidationError",

    # Schema declarations
    "DynamoDBMixin",
    "Index",
    "IndexOptions",
    "Key",
    "KeyOptions",
    "ProvisionedThroughput",
    "TableDefinition",
    "get_table_definition",
    "table",

    # Registry
    "TableRegistry",
    "default_registry",

    # Gateway
    "TableGateway",
    "create_table_gateway",

    # Service facade
    "DynamoDBService",
    "MigrationResult",
    "configure",
    "default_service",
    "delete",
    "get",
    "migrate",
    "put",
    "query",
    "scan",
    "update",
]
