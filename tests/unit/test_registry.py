"""
Tests for the table registry.
"""

import pytest
from pydantic import BaseModel

from dynamodb_mapper import Key, TableNotRegisteredError, table
from dynamodb_mapper.registry import TableRegistry
from dynamodb_mapper.schema.definitions import TableDefinition


class TestTableRegistry:
    """Test TableRegistry."""

    def test_decorator_registers_table(self, registry, user_model):
        registration = registry.get(user_model)

        assert registration.model_class is user_model
        assert registration.table_name == 'users'
        assert registration.auto_generate == ('user_id',)
        assert registry.get('users') is registration
        assert len(registry) == 1

    def test_unknown_name(self, registry):
        with pytest.raises(TableNotRegisteredError, match="No table registered for 'ghosts'"):
            registry.get('ghosts')

    def test_undecorated_class(self, registry):
        class Loose(BaseModel):
            loose_id: str

        assert Loose not in registry
        with pytest.raises(TableNotRegisteredError):
            registry.get(Loose)

    def test_class_registered_elsewhere(self, registry):
        other = TableRegistry()

        @table(registry=other)
        class Elsewhere(BaseModel):
            elsewhere_id: str = Key()

        assert Elsewhere in other
        assert Elsewhere not in registry

    def test_reregistration_replaces_and_warns(self, registry, caplog):
        @table(name='things', registry=registry)
        class First(BaseModel):
            thing_id: str = Key()

        with caplog.at_level('WARNING', logger='dynamodb_mapper.registry'):
            @table(name='things', registry=registry)
            class Second(BaseModel):
                thing_id: str = Key()

        assert registry.get('things').model_class is Second
        assert len(registry) == 1
        assert "re-registered" in caplog.text
        # The displaced class no longer resolves
        assert First not in registry

    def test_new_table_resets_migrated(self, registry, user_model):
        registry.migrated = True

        registry.add_table(user_model, TableDefinition(table_name='extra'))

        assert registry.migrated is False

    def test_clear(self, registry, user_model, event_model):
        registry.migrated = True

        registry.clear()

        assert len(registry) == 0
        assert registry.tables() == []
        assert registry.migrated is False
