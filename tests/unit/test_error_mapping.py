"""
Tests for DynamoDB error mapping and the exception hierarchy.
"""

import pytest
from botocore.exceptions import ClientError

from dynamodb_mapper.core.table_gateway import map_dynamodb_error
from dynamodb_mapper.exceptions import (
    ConflictError,
    ConnectionError,
    DynamoDBMapperError,
    ItemNotFoundError,
    RetryableError,
    SchemaError,
    ValidationError,
)


def create_client_error(error_code: str, message: str = "Test error") -> ClientError:
    """Helper to create ClientError for testing."""
    return ClientError(
        error_response={
            'Error': {
                'Code': error_code,
                'Message': message
            }
        },
        operation_name='TestOperation'
    )


class TestErrorMapping:
    """Test mapping of botocore error codes to domain exceptions."""

    @pytest.mark.parametrize("code, expected", [
        ('ConditionalCheckFailedException', ConflictError),
        ('ResourceInUseException', ConflictError),
        ('TransactionConflictException', ConflictError),
        ('ValidationException', ValidationError),
        ('LimitExceededException', ValidationError),
        ('ProvisionedThroughputExceededException', RetryableError),
        ('ThrottlingException', RetryableError),
        ('InternalServerError', RetryableError),
        ('AccessDeniedException', ConnectionError),
        ('ExpiredTokenException', ConnectionError),
        ('SomethingNew', ConnectionError),
    ])
    def test_code_mapping(self, code, expected):
        error = create_client_error(code)

        result = map_dynamodb_error(error, 'PutItem', 'users')

        assert isinstance(result, expected)
        assert result.original_error is error

    def test_conditional_check_keeps_resource_id(self):
        error = create_client_error('ConditionalCheckFailedException', 'The conditional request failed')

        result = map_dynamodb_error(error, 'PutItem', 'users', 'u-1')

        assert 'u-1' in str(result)
        assert 'conditional request failed' in str(result).lower()

    def test_missing_table_without_resource(self):
        result = map_dynamodb_error(create_client_error('ResourceNotFoundException'), 'Scan', 'users')

        assert isinstance(result, ConnectionError)
        assert 'Table not found' in str(result)

    def test_missing_resource_with_id(self):
        result = map_dynamodb_error(create_client_error('ResourceNotFoundException'), 'GetItem', 'users', 'u-1')

        assert isinstance(result, ItemNotFoundError)
        assert result.table_name == 'users'

    def test_unknown_code_logs_warning(self, caplog):
        with caplog.at_level('WARNING', logger='dynamodb_mapper.core.table_gateway'):
            map_dynamodb_error(create_client_error('BrandNewException'), 'Query', 'users')

        assert "Unknown DynamoDB error code 'BrandNewException'" in caplog.text


class TestExceptionHierarchy:
    """Test the shared base exception behaviour."""

    def test_all_errors_share_base(self):
        for exc in (ConflictError('x'), ConnectionError('x'), ValidationError('x'),
                    RetryableError('x'), SchemaError('x'), ItemNotFoundError('t', {'id': 1})):
            assert isinstance(exc, DynamoDBMapperError)

    def test_str_includes_context(self):
        error = SchemaError("bad field", table_name='users', field_name='email')

        assert str(error) == "bad field (Context: table_name=users, field_name=email)"

    def test_repr(self):
        error = ConflictError("taken", resource_id='u-1')

        assert repr(error) == (
            "ConflictError(message='taken', original_error=None, context={'resource_id': 'u-1'})"
        )
