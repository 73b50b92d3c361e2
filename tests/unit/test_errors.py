"""Unit tests for ApiServiceError identity and messages."""

from mckinley.networking.errors import ApiErrorKind, ApiServiceError
from mckinley.networking.models import Failure, Success
from mckinley.shared.exceptions import McKinleyError


class TestApiServiceErrorEquality:
    """Errors compare by kind only."""

    def test_same_kind_equal(self):
        assert ApiServiceError(ApiErrorKind.DECODE_ERROR) == ApiServiceError(ApiErrorKind.DECODE_ERROR)

    def test_different_kind_not_equal(self):
        assert ApiServiceError(ApiErrorKind.NOT_FOUND_404) != ApiServiceError(
            ApiErrorKind.INTERNAL_SERVER_ERROR_500
        )

    def test_payload_ignored(self):
        """Test payload-bearing errors are equal regardless of payload."""
        first = ApiServiceError(ApiErrorKind.SUCCESS_WITH_ERROR, payload={"a": 1})
        second = ApiServiceError(ApiErrorKind.SUCCESS_WITH_ERROR, payload="something else")

        assert first == second
        assert hash(first) == hash(second)

    def test_not_equal_to_other_types(self):
        assert ApiServiceError(ApiErrorKind.NO_DATA) != "no_data"

    def test_failures_compare_by_kind(self):
        assert Failure.of(ApiErrorKind.IO_ERROR, payload="a") == Failure.of(ApiErrorKind.IO_ERROR)


class TestApiServiceErrorMessages:
    """Tests for user-facing messages."""

    def test_status_messages(self):
        assert ApiServiceError(ApiErrorKind.NOT_FOUND_404).user_message == "Not Found"
        assert (
            ApiServiceError(ApiErrorKind.INTERNAL_SERVER_ERROR_500).user_message
            == "Internal Server Error"
        )
        assert ApiServiceError(ApiErrorKind.VALIDATION_ERRORS_422).user_message == "Validation Error"

    def test_every_kind_has_message(self):
        for kind in ApiErrorKind:
            assert ApiServiceError(kind).user_message

    def test_is_project_error(self):
        error = ApiServiceError(ApiErrorKind.TRANSPORT_ERROR)

        assert isinstance(error, McKinleyError)
        assert error.message == "transport_error"


class TestResults:
    """Tests for Success/Failure."""

    def test_ok_flags(self):
        assert Success(1).ok is True
        assert Failure.of(ApiErrorKind.NO_DATA).ok is False

    def test_pattern_matching(self):
        result = Success({"token": "abc"})

        match result:
            case Success(value=value):
                assert value == {"token": "abc"}
            case Failure():
                raise AssertionError("expected success")
