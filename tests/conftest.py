"""
Test configuration and fixtures for the DynamoDB mapper.

Every test that declares tables gets its own TableRegistry so declarations
never leak into the process-wide registry or into each other.
"""

import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Annotated, Optional

# Add parent directory to path so we can import dynamodb_mapper
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from moto import mock_aws
from pydantic import BaseModel

from dynamodb_mapper import (
    DynamoDBConfig,
    DynamoDBMixin,
    DynamoDBService,
    Index,
    IndexOptions,
    Key,
    TableRegistry,
    table,
)


@pytest.fixture
def dynamodb_config():
    """DynamoDB configuration for testing."""
    return DynamoDBConfig(
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
        region_name="us-east-1",
        endpoint_url=None,  # Use default AWS endpoint for moto
        environment="test",
        table_prefix=""
    )


@pytest.fixture
def registry():
    """Fresh table registry for one test."""
    return TableRegistry()


@pytest.fixture
def user_model(registry):
    """User table: auto-generated hash key, email and active/created index."""

    @table(name="users", registry=registry)
    class User(DynamoDBMixin, BaseModel):
        user_id: Optional[str] = Key()
        email: str = Index(name="email-index", projection="ALL")
        name: str = ""
        is_active: Annotated[bool, IndexOptions(name="active-index")] = True
        created_at: Annotated[datetime, IndexOptions(name="active-index", type="RANGE")] = datetime(2024, 1, 1)

    return User


@pytest.fixture
def event_model(registry):
    """Event table: composite primary key with a numeric sort key."""

    @table(name="events", registry=registry, read_capacity_units=5, write_capacity_units=5)
    class Event(DynamoDBMixin, BaseModel):
        stream_id: str = Key(auto_generate=False)
        sequence: int = Key(type="RANGE")
        kind: str = Index(name="kind-index")
        payload: dict = {}

    return Event


@pytest.fixture
def aws_credentials():
    """Mocked AWS credentials for moto."""
    env = {
        "AWS_ACCESS_KEY_ID": "testing",
        "AWS_SECRET_ACCESS_KEY": "testing",
        "AWS_DEFAULT_REGION": "us-east-1",
    }
    previous = {k: os.environ.get(k) for k in env}
    os.environ.update(env)
    yield
    for k, v in previous.items():
        if v is None:
            os.environ.pop(k, None)
        else:
            os.environ[k] = v


@pytest.fixture
def mock_service(aws_credentials, dynamodb_config, registry):
    """DynamoDBService bound to an in-memory DynamoDB."""
    with mock_aws():
        yield DynamoDBService(dynamodb_config, registry)
