"""Unit tests for error classification utilities."""

import pytest
from pydantic import ValidationError

from src.core.db_client import DatabaseError, RecordNotFoundError
from src.core.errors import (
    DefaultCategoryError,
    ErrorCode,
    ErrorSeverity,
    classify_error_with_response,
    http_status_for,
)
from src.domain.task import Task


@pytest.mark.unit
class TestClassifyErrorWithResponse:
    def test_task_not_found(self):
        response = classify_error_with_response(KeyError("Task not found: abc"))
        assert response.code == ErrorCode.ERR_TASK_NOT_FOUND
        assert http_status_for(response) == 404

    def test_category_not_found(self):
        response = classify_error_with_response(KeyError("Category not found: abc"))
        assert response.code == ErrorCode.ERR_CATEGORY_NOT_FOUND

    def test_record_not_found_in_logs_table(self):
        response = classify_error_with_response(RecordNotFoundError("Record not found in task_logs: abc"))
        assert response.code == ErrorCode.ERR_LOG_NOT_FOUND

    def test_default_category(self):
        response = classify_error_with_response(DefaultCategoryError("Home is a default category"))
        assert response.code == ErrorCode.ERR_DEFAULT_CATEGORY_PROTECTED
        assert http_status_for(response) == 409

    def test_invalid_frequency_from_model_validation(self):
        with pytest.raises(ValidationError) as exc_info:
            Task(id="t", category_id="c", name="x", frequency_value=0)

        response = classify_error_with_response(exc_info.value)

        assert response.code == ErrorCode.ERR_INVALID_FREQUENCY
        assert http_status_for(response) == 422

    def test_invalid_import_file(self):
        response = classify_error_with_response(ValueError("Invalid file format"))
        assert response.code == ErrorCode.ERR_INVALID_IMPORT_FILE
        assert http_status_for(response) == 400

    def test_generic_validation(self):
        response = classify_error_with_response(ValueError("Unknown setting: theme"))
        assert response.code == ErrorCode.ERR_INVALID_INPUT

    def test_webhook_failure(self):
        response = classify_error_with_response(ConnectionError("webhook unreachable"))
        assert response.code == ErrorCode.ERR_NOTIFICATION_DELIVERY_FAILED
        assert http_status_for(response) == 502

    def test_database_error(self):
        response = classify_error_with_response(DatabaseError("Failed to list records from tasks: disk I/O error"))
        assert response.code == ErrorCode.ERR_DATABASE
        assert response.severity == ErrorSeverity.HIGH
        assert http_status_for(response) == 500

    def test_unknown(self):
        response = classify_error_with_response(Exception("Something odd"))
        assert response.code == ErrorCode.ERR_UNKNOWN
        assert http_status_for(response) == 500

    def test_key_error_without_not_found_is_unknown(self):
        response = classify_error_with_response(KeyError("name"))
        assert response.code == ErrorCode.ERR_UNKNOWN
