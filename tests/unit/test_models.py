"""
Tests for DynamoDBMixin item conversion (models/base.py).
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

import pytest
from pydantic import BaseModel

from dynamodb_mapper.exceptions import ValidationError
from dynamodb_mapper.models.base import DynamoDBMixin, to_dynamodb_value


class Profile(DynamoDBMixin, BaseModel):
    profile_id: str
    nickname: str = ""
    verified: bool = False
    newsletter: Optional[bool] = None
    score: float = 0.0
    joined_at: Optional[datetime] = None
    tags: list = []


class TestToDynamoDBValue:

    def test_nested_conversion(self):
        value = to_dynamodb_value({
            'flag': True,
            'ratio': 0.5,
            'when': datetime(2024, 5, 1, 12, 30),
            'items': [False, 1.25, ('a', 2)],
        })

        assert value == {
            'flag': 'true',
            'ratio': Decimal('0.5'),
            'when': '2024-05-01T12:30:00',
            'items': ['false', Decimal('1.25'), ['a', 2]],
        }

    def test_passthrough(self):
        assert to_dynamodb_value(Decimal('3')) == Decimal('3')
        assert to_dynamodb_value(7) == 7
        assert to_dynamodb_value(None) is None


class TestDynamoDBMixin:

    def test_to_item_drops_none(self):
        item = Profile(profile_id='p-1', verified=True, score=1.5).to_dynamodb_item()

        assert item == {
            'profile_id': 'p-1',
            'nickname': '',
            'verified': 'true',
            'score': Decimal('1.5'),
            'tags': [],
        }

    def test_from_item_restores_bools(self):
        profile = Profile.from_dynamodb_item({
            'profile_id': 'p-1',
            'verified': 'true',
            'newsletter': 'false',
            'score': Decimal('2.5'),
            'joined_at': '2024-05-01T12:30:00',
        })

        assert profile.verified is True
        assert profile.newsletter is False
        assert profile.score == 2.5
        assert profile.joined_at == datetime(2024, 5, 1, 12, 30)

    def test_string_field_keeps_true_text(self):
        profile = Profile.from_dynamodb_item({'profile_id': 'p-1', 'nickname': 'true'})

        assert profile.nickname == 'true'

    def test_null_attributes_use_defaults(self):
        profile = Profile.from_dynamodb_item({'profile_id': 'p-1', 'nickname': None, 'tags': None})

        assert profile.nickname == ''
        assert profile.tags == []

    def test_invalid_item(self):
        with pytest.raises(ValidationError, match="Failed to convert DynamoDB item to Profile"):
            Profile.from_dynamodb_item({'nickname': 'no id'})

    def test_uuid_values_become_strings(self):
        owner = UUID('12345678-1234-5678-1234-567812345678')

        assert to_dynamodb_value({'owner': owner, 'shared_with': [owner]}) == {
            'owner': '12345678-1234-5678-1234-567812345678',
            'shared_with': ['12345678-1234-5678-1234-567812345678'],
        }
