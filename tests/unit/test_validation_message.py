"""Unit tests for validation error rendering."""

from fastapi.exceptions import RequestValidationError

from cpn.middleware.error_handler import validation_message


def _error(loc: tuple, type_: str = "missing", msg: str = "Field required") -> RequestValidationError:
    return RequestValidationError([{"loc": loc, "type": type_, "msg": msg}])


class TestValidationMessage:
    def test_missing_field(self):
        assert validation_message(_error(("body", "amountSpent"))) == "amountSpent is required"

    def test_invalid_field(self):
        exc = _error(("body", "age"), "greater_than_equal", "Input should be greater than or equal to 18")
        assert validation_message(exc) == "Invalid age: Input should be greater than or equal to 18"

    def test_nested_field_uses_leaf(self):
        exc = _error(("body", "location", "city"), "string_type", "Input should be a valid string")
        assert validation_message(exc) == "Invalid city: Input should be a valid string"

    def test_list_indexes_skipped(self):
        exc = _error(("body", "completedSteps", 2), "int_parsing", "Input should be a valid integer")
        assert validation_message(exc) == "Invalid completedSteps: Input should be a valid integer"

    def test_whole_body_missing(self):
        assert validation_message(_error(("body",))) == "body is required"

    def test_query_parameter(self):
        assert validation_message(_error(("query", "girlId"))) == "girlId is required"

    def test_no_errors(self):
        assert validation_message(RequestValidationError([])) == "Invalid request"
