"""
Process-wide registry of declared tables.

The @table decorator adds one entry per decorated class at class-declaration
time; the service reads it to migrate tables and to resolve a model class
into its definition and auto-generated keys.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Tuple, Type, Union

from pydantic import BaseModel

from .exceptions import TableNotRegisteredError
from .schema.definitions import TableDefinition

logger = logging.getLogger(__name__)


@dataclass
class TableRegistration:
    model_class: Type[BaseModel]
    definition: TableDefinition
    auto_generate: Tuple[str, ...] = ()

    @property
    def table_name(self) -> str:
        return self.definition.table_name


class TableRegistry:
    """Maps declared table names to their registration."""

    def __init__(self):
        self._tables: Dict[str, TableRegistration] = {}
        self.migrated = False

    def add_table(
        self,
        model_class: Type[BaseModel],
        definition: TableDefinition,
        auto_generate: Tuple[str, ...] = ()
    ) -> TableRegistration:
        name = definition.table_name
        logger.info(f"Add {name}")
        if name in self._tables and self._tables[name].model_class is not model_class:
            logger.warning(
                f"Table '{name}' re-registered by {model_class.__qualname__}, "
                f"replacing {self._tables[name].model_class.__qualname__}"
            )

        registration = TableRegistration(model_class, definition, tuple(auto_generate))
        self._tables[name] = registration
        # A new table means the store may be behind the registry again
        self.migrated = False
        return registration

    def get(self, model_class_or_name: Union[Type[BaseModel], str]) -> TableRegistration:
        """Resolve a registration by declared table name or by model class.

        Raises:
            TableNotRegisteredError: If nothing was registered under that name/class
        """
        if isinstance(model_class_or_name, str):
            registration = self._tables.get(model_class_or_name)
            if registration is None:
                raise TableNotRegisteredError(model_class_or_name)
            return registration

        definition = getattr(model_class_or_name, '__table_definition__', None)
        if definition is not None:
            registration = self._tables.get(definition.table_name)
            if registration is not None and registration.model_class is model_class_or_name:
                return registration
        raise TableNotRegisteredError(getattr(model_class_or_name, '__name__', repr(model_class_or_name)))

    def tables(self) -> List[TableRegistration]:
        return list(self._tables.values())

    def clear(self) -> None:
        self._tables.clear()
        self.migrated = False

    def __contains__(self, model_class_or_name) -> bool:
        try:
            self.get(model_class_or_name)
        except TableNotRegisteredError:
            return False
        return True

    def __len__(self) -> int:
        return len(self._tables)


default_registry = TableRegistry()
