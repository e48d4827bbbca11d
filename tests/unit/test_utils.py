"""
Tests for utility helpers (utils.py).
"""

import pytest

from dynamodb_mapper.exceptions import SchemaError, ValidationError
from dynamodb_mapper.utils import (
    build_filter_expression,
    build_index_key_condition,
    build_key_condition,
    build_model_key,
    build_projection_expression,
    build_update_expression,
    convert_empty_values,
    generate_id,
)


class TestItemPreparation:
    """Test id generation and empty value conversion."""

    def test_generate_id_is_unique_hex(self):
        first, second = generate_id(), generate_id()

        assert first != second
        assert len(first) == 32
        int(first, 16)

    def test_convert_empty_values(self):
        item = {
            'name': '',
            'tags': set(),
            'items': [],
            'blob': b'',
            'count': 0,
            'flag': 'false',
            'nested': {'note': '', 'list': ['a', '']},
        }

        assert convert_empty_values(item) == {
            'name': None,
            'tags': None,
            'items': None,
            'blob': None,
            'count': 0,
            'flag': 'false',
            'nested': {'note': None, 'list': ['a', None]},
        }


class TestExpressionBuilders:
    """Test projection, filter, key condition and update builders."""

    def test_projection_expression(self):
        assert build_projection_expression(['user_id', 'name']) == (
            '#f0, #f1', {'#f0': 'user_id', '#f1': 'name'}
        )
        assert build_projection_expression([]) == (None, None)

    def test_filter_expression(self):
        assert build_filter_expression({}) is None
        assert build_filter_expression({'a': 1, 'b': 2}) is not None

    def test_key_condition_between_requires_upper_bound(self):
        with pytest.raises(ValueError, match="requires sort_value2"):
            build_key_condition('pk', 'v', 'sk', 'between', 1)

    def test_key_condition_unknown_operator(self):
        with pytest.raises(ValueError, match="Unsupported sort_condition"):
            build_key_condition('pk', 'v', 'sk', 'like', 1)

    def test_update_expression(self):
        expression, names, values = build_update_expression({'name': 'Ada', 'status': 'active'})

        assert expression == 'SET #u0 = :u0, #u1 = :u1'
        assert names == {'#u0': 'name', '#u1': 'status'}
        assert values == {':u0': 'Ada', ':u1': 'active'}

    def test_update_expression_empty(self):
        with pytest.raises(ValidationError, match="cannot be empty"):
            build_update_expression({})


class TestModelKeys:
    """Test key building from registered definitions."""

    def test_simple_key(self, user_model):
        assert build_model_key(user_model, user_id='u-1', name='ignored') == {'user_id': 'u-1'}

    def test_composite_key(self, event_model):
        assert build_model_key(event_model, stream_id='s', sequence=3) == {'stream_id': 's', 'sequence': 3}

    def test_missing_sort_key(self, event_model):
        with pytest.raises(ValueError, match="Missing sort key 'sequence'"):
            build_model_key(event_model, stream_id='s')

    def test_undeclared_model(self):
        from pydantic import BaseModel

        class Loose(BaseModel):
            x: str

        with pytest.raises(SchemaError):
            build_model_key(Loose, x='1')

    def test_index_key_condition(self, user_model):
        condition = build_index_key_condition(
            user_model, 'active-index', sort_condition='gt', is_active='true', created_at='2024-01-01'
        )

        assert condition is not None

    def test_index_key_condition_unknown_index(self, user_model):
        with pytest.raises(ValueError, match="Index 'nope' not found"):
            build_index_key_condition(user_model, 'nope', email='a')

    def test_index_key_condition_missing_partition(self, user_model):
        with pytest.raises(ValueError, match="Missing index partition key 'email'"):
            build_index_key_condition(user_model, 'email-index')
