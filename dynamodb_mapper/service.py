"""
DynamoDB Service Facade

CRUD, query and migration operations addressed by model class rather than
table name. The model class is resolved through the table registry into its
definition, its auto-generated keys and the physical table name
(config.get_table_name(declared name)).

Usage:
    from dynamodb_mapper import configure, migrate, put, get

    configure(region_name='eu-west-1')
    migrate()
    user = put(User, User(name='Ada'))        # user_id generated
    same = get(User, {'user_id': user.user_id})
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel

from .config import DynamoDBConfig
from .core import TableGateway, create_table_gateway
from .exceptions import ValidationError
from .models.base import DynamoDBMixin, to_dynamodb_value
from .registry import TableRegistration, TableRegistry, default_registry
from .utils import build_update_expression, convert_empty_values, generate_id

T = TypeVar('T', bound=BaseModel)

logger = logging.getLogger(__name__)


@dataclass
class MigrationResult:
    table_name: str
    created: bool


class DynamoDBService:
    """Model-addressed facade over one TableGateway per registered table."""

    def __init__(self, config: Optional[DynamoDBConfig] = None, registry: Optional[TableRegistry] = None):
        """Initialize the service.

        Args:
            config: DynamoDB configuration; loaded from the environment on first use if omitted
            registry: Table registry; defaults to the process-wide registry
        """
        self.registry = default_registry if registry is None else registry
        self._config = config
        self._gateways: Dict[str, TableGateway] = {}

    @property
    def config(self) -> DynamoDBConfig:
        if self._config is None:
            self.configure()
        return self._config

    def configure(self, config: Optional[DynamoDBConfig] = None, **overrides: Any) -> DynamoDBConfig:
        """Replace the configuration and drop cached gateways.

        Physical table names may change, so registered tables count as
        unmigrated again.

        Args:
            config: Base configuration; DynamoDBConfig.from_env() if omitted
            **overrides: Field values applied on top of the base configuration

        Returns:
            The active configuration
        """
        config = config or DynamoDBConfig.from_env()
        if overrides:
            config = DynamoDBConfig(**{**config.model_dump(), **overrides})

        self._config = config
        self._gateways.clear()
        self.registry.migrated = False

        if config.enable_debug_logging:
            logging.getLogger(__package__).setLevel(logging.DEBUG)
        logger.debug(f"Configured DynamoDB service for region {config.region_name}")
        return config

    def gateway(self, model_class: Union[Type[BaseModel], str]) -> TableGateway:
        """Return the (cached) gateway for a registered model class or table name."""
        registration = self.registry.get(model_class)
        gateway = self._gateways.get(registration.table_name)
        if gateway is None:
            gateway = create_table_gateway(self.config, registration.table_name)
            self._gateways[registration.table_name] = gateway
        return gateway

    # -------------------------------------------------------------------------
    # Provisioning
    # -------------------------------------------------------------------------

    def migrate(self, wait: bool = False, force: bool = False) -> List[MigrationResult]:
        """
        Create every registered table.

        Tables that already exist count as success. Any other failure
        propagates and leaves the registry unmigrated.

        Args:
            wait: Block until each table exists
            force: Run again even if a previous migration succeeded

        Returns:
            One MigrationResult per table; empty if already migrated
        """
        if self.registry.migrated and not force:
            logger.debug("Tables already migrated")
            return []

        results = []
        default_throughput = self.config.default_throughput()
        for registration in self.registry.tables():
            gateway = self.gateway(registration.table_name)
            kwargs = registration.definition.to_create_table_kwargs(gateway.table_name, default_throughput)
            created = gateway.create_table(**kwargs)
            if wait:
                gateway.wait_until_exists()
            results.append(MigrationResult(gateway.table_name, created))

        self.registry.migrated = True
        return results

    # -------------------------------------------------------------------------
    # Item access
    # -------------------------------------------------------------------------

    def _to_model(self, model_class: Type[T], item: Dict[str, Any]) -> T:
        if issubclass(model_class, DynamoDBMixin):
            return model_class.from_dynamodb_item(item)
        try:
            return model_class.model_validate({k: v for k, v in item.items() if v is not None})
        except Exception as e:
            raise ValidationError(f"Failed to convert item to {model_class.__name__}: {e}", original_error=e) from e

    def _to_instance(self, registration: TableRegistration, item: Union[BaseModel, Dict[str, Any]]) -> BaseModel:
        model_class = registration.model_class
        if isinstance(item, model_class):
            return item
        if isinstance(item, dict):
            item = dict(item)
            for field_name in registration.auto_generate:
                if not item.get(field_name):
                    item[field_name] = generate_id()
            try:
                return model_class.model_validate(item)
            except Exception as e:
                raise ValidationError(f"Invalid {model_class.__name__} item: {e}", original_error=e) from e
        raise ValidationError(f"Expected {model_class.__name__} or dict, got {type(item).__name__}")

    def get(self, model_class: Type[T], key: Dict[str, Any], consistent_read: bool = False) -> Optional[T]:
        """Get an item by primary key.

        Returns:
            Model instance if found, None otherwise
        """
        item = self.gateway(model_class).get_item(to_dynamodb_value(key), consistent_read=consistent_read)
        if item is None:
            return None
        return self._to_model(model_class, item)

    def put(
        self,
        model_class: Type[T],
        item: Union[T, Dict[str, Any]],
        condition_expression=None
    ) -> T:
        """
        Store an item, generating ids for empty auto-generated keys.

        Args:
            model_class: Registered model class
            item: Model instance or dict of field values
            condition_expression: Optional condition for the put

        Returns:
            The stored model instance, including any generated ids
        """
        registration = self.registry.get(model_class)
        model = self._to_instance(registration, item)

        for field_name in registration.auto_generate:
            if not getattr(model, field_name, None):
                setattr(model, field_name, generate_id())

        if isinstance(model, DynamoDBMixin):
            data = model.to_dynamodb_item()
        else:
            data = to_dynamodb_value(model.model_dump(exclude_none=True))

        if self.config.convert_empty_values:
            data = convert_empty_values(data)

        logger.debug(f"Put {data}")
        self.gateway(model_class).put_item(data, condition_expression=condition_expression)
        return model

    def delete(
        self,
        model_class: Type[BaseModel],
        key: Dict[str, Any],
        condition_expression=None,
        expression_attribute_values: Optional[Dict[str, Any]] = None,
        expression_attribute_names: Optional[Dict[str, str]] = None,
        return_values: str = 'NONE'
    ) -> Optional[Dict[str, Any]]:
        """Delete an item by primary key.

        Returns:
            Old attributes when return_values is 'ALL_OLD', otherwise None
        """
        return self.gateway(model_class).delete_item(
            to_dynamodb_value(key),
            condition_expression=condition_expression,
            expression_attribute_values=to_dynamodb_value(expression_attribute_values),
            expression_attribute_names=expression_attribute_names,
            return_values=return_values
        )

    def update(
        self,
        model_class: Type[BaseModel],
        key: Dict[str, Any],
        update_expression: Optional[str] = None,
        updates: Optional[Dict[str, Any]] = None,
        condition_expression=None,
        expression_attribute_values: Optional[Dict[str, Any]] = None,
        expression_attribute_names: Optional[Dict[str, str]] = None,
        return_values: str = 'NONE'
    ) -> Optional[Dict[str, Any]]:
        """
        Update an item with an UpdateExpression or a dict of field values.

        Args:
            model_class: Registered model class
            key: Primary key of the item
            update_expression: Raw UpdateExpression
            updates: Field values to SET; mutually exclusive with update_expression
            condition_expression: Optional condition for the update
            expression_attribute_values: Values for the expressions
            expression_attribute_names: Names for the expressions
            return_values: What to return after the update

        Returns:
            Attributes selected by return_values, or None for 'NONE'

        Raises:
            ValidationError: If neither or both of update_expression and updates are given
        """
        if (update_expression is None) == (updates is None):
            raise ValidationError("Pass exactly one of update_expression or updates")

        names = dict(expression_attribute_names or {})
        values = dict(expression_attribute_values or {})
        if updates is not None:
            update_expression, update_names, update_values = build_update_expression(updates)
            names.update(update_names)
            if self.config.convert_empty_values:
                update_values = convert_empty_values(update_values)
            values.update(update_values)

        return self.gateway(model_class).update_item(
            to_dynamodb_value(key),
            update_expression,
            expression_attribute_values=to_dynamodb_value(values) or None,
            expression_attribute_names=names or None,
            condition_expression=condition_expression,
            return_values=return_values
        )

    # -------------------------------------------------------------------------
    # Reads over many items
    # -------------------------------------------------------------------------

    def scan(
        self,
        model_class: Type[BaseModel],
        projection_expression: Optional[str] = None,
        filter_expression=None,
        expression_attribute_names: Optional[Dict[str, str]] = None,
        expression_attribute_values: Optional[Dict[str, Any]] = None,
        limit: Optional[int] = None,
        exclusive_start_key: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Scan one page of the table.

        Limit defaults to config.default_scan_limit.

        Returns:
            Raw DynamoDB response
        """
        params = _compact(
            ProjectionExpression=projection_expression,
            FilterExpression=filter_expression,
            ExpressionAttributeNames=expression_attribute_names,
            ExpressionAttributeValues=to_dynamodb_value(expression_attribute_values),
            ExclusiveStartKey=exclusive_start_key,
        )
        params['Limit'] = limit if limit is not None else self.config.default_scan_limit

        gateway = self.gateway(model_class)
        logger.debug(f"Scan {gateway.table_name} as {params}")
        return gateway.scan(**params)

    def query(
        self,
        model_class: Type[BaseModel],
        key_condition_expression=None,
        index_name: Optional[str] = None,
        projection_expression: Optional[str] = None,
        filter_expression=None,
        expression_attribute_names: Optional[Dict[str, str]] = None,
        expression_attribute_values: Optional[Dict[str, Any]] = None,
        limit: Optional[int] = None,
        exclusive_start_key: Optional[Dict[str, Any]] = None,
        scan_index_forward: bool = True
    ) -> Dict[str, Any]:
        """Query one page of the table or one of its declared indexes.

        Returns:
            Raw DynamoDB response
        """
        params = _compact(
            KeyConditionExpression=key_condition_expression,
            IndexName=index_name,
            ProjectionExpression=projection_expression,
            FilterExpression=filter_expression,
            ExpressionAttributeNames=expression_attribute_names,
            ExpressionAttributeValues=to_dynamodb_value(expression_attribute_values),
            Limit=limit,
            ExclusiveStartKey=exclusive_start_key,
        )
        if not scan_index_forward:
            params['ScanIndexForward'] = False

        gateway = self.gateway(model_class)
        logger.debug(f"Query {gateway.table_name} as {params}")
        return gateway.query(**params)

    def query_models(self, model_class: Type[T], **kwargs: Any) -> List[T]:
        """Run query() across every page and convert items to model instances."""
        return self._collect(self.query, model_class, kwargs)

    def scan_models(self, model_class: Type[T], **kwargs: Any) -> List[T]:
        """Run scan() across every page and convert items to model instances."""
        return self._collect(self.scan, model_class, kwargs)

    def _collect(self, operation, model_class: Type[T], kwargs: Dict[str, Any]) -> List[T]:
        models = []
        while True:
            response = operation(model_class, **kwargs)
            models.extend(self._to_model(model_class, item) for item in response.get('Items', []))
            if 'LastEvaluatedKey' not in response:
                break
            kwargs['exclusive_start_key'] = response['LastEvaluatedKey']

        logger.info(f"Retrieved {len(models)} {model_class.__name__} item(s)")
        return models


def _compact(**params: Any) -> Dict[str, Any]:
    return {k: v for k, v in params.items() if v is not None}


default_service = DynamoDBService()

configure = default_service.configure
migrate = default_service.migrate
get = default_service.get
put = default_service.put
delete = default_service.delete
update = default_service.update
scan = default_service.scan
query = default_service.query
