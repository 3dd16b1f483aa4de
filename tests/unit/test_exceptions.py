"""
Unit tests for error classification.
"""

import json

import pytest

from documentdb.exceptions import (
    BadRequest,
    Conflict,
    DocumentDBError,
    InvalidLinkFormat,
    NotFound,
    PreconditionFailed,
    QueryError,
    RateLimited,
    RequestEntityTooLarge,
    ServiceUnavailable,
    TransportFailure,
    Unauthorized,
    classify_response,
    is_transient_error,
    parse_retry_after,
)


class TestClassifyResponse:
    """Tests for status classification."""

    @pytest.mark.parametrize("status,error_type", [
        (400, BadRequest),
        (401, Unauthorized),
        (403, Unauthorized),
        (404, NotFound),
        (409, Conflict),
        (412, PreconditionFailed),
        (413, RequestEntityTooLarge),
        (429, RateLimited),
        (500, ServiceUnavailable),
        (503, ServiceUnavailable),
    ])
    def test_status_mapping(self, status, error_type):
        """Test that each status maps to its error kind and keeps the code."""
        error = classify_response(status, {}, "")
        assert isinstance(error, error_type)
        assert error.code == status

    def test_unmapped_status_is_generic(self):
        """Test that other statuses become a plain QueryError."""
        error = classify_response(405, {}, "")
        assert type(error) is QueryError
        assert error.code == 405

    def test_message_taken_from_body(self):
        """Test that the service message is surfaced and the body kept raw."""
        body = json.dumps({"code": "NotFound", "message": "Resource Not Found"})
        error = classify_response(404, {"x-ms-activity-id": "act-1"}, body)

        assert error.message == "Resource Not Found"
        assert error.body == body
        assert error.activity_id == "act-1"

    def test_rate_limited_carries_retry_after(self):
        """Test that 429 responses carry the server delay."""
        error = classify_response(429, {"x-ms-retry-after-ms": "250"}, "")
        assert error.retry_after == 0.25

    def test_to_dict(self):
        """Test error serialization."""
        data = classify_response(409, {}, "").to_dict()
        assert data["error"]["code"] == "Conflict"
        assert data["error"]["details"]["code"] == 409


class TestRetryAfter:
    """Tests for retry-after parsing."""

    def test_milliseconds_header_preferred(self):
        """Test that x-ms-retry-after-ms wins over Retry-After."""
        assert parse_retry_after({"x-ms-retry-after-ms": "1500", "Retry-After": "9"}) == 1.5

    def test_seconds_header(self):
        """Test the standard Retry-After header."""
        assert parse_retry_after({"retry-after": "2"}) == 2.0

    def test_missing_or_invalid(self):
        """Test that unusable hints are ignored."""
        assert parse_retry_after({}) is None
        assert parse_retry_after({"Retry-After": "Wed, 21 Oct 2015 07:28:00 GMT"}) is None


class TestTransience:
    """Tests for is_transient_error."""

    def test_transient_kinds(self):
        """Test which errors are transient."""
        assert is_transient_error(RateLimited())
        assert is_transient_error(ServiceUnavailable())
        assert is_transient_error(TransportFailure("reset"))
        assert not is_transient_error(NotFound())
        assert not is_transient_error(InvalidLinkFormat("x", "bad"))
        assert not is_transient_error(ValueError("other"))

    def test_transport_failure_code_zero(self):
        """Test that transport failures report code 0."""
        error = TransportFailure("connection refused")
        assert error.code == 0
        assert isinstance(error, DocumentDBError)
