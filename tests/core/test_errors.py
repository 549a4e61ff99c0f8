"""Error Hierarchy - tests for codes, HTTP statuses and the response envelope."""

from applicant_review.core.errors import (
    ErrorCategory, InvalidInputError, SessionNotFoundError, StorageFailureError,
    StorageTimeoutError, UnauthorizedReviewerError,
)


def test_http_status_per_category():
    assert InvalidInputError("bad", "MISSING_KEY").http_status == 400
    assert UnauthorizedReviewerError("s1", "r2").http_status == 403
    assert SessionNotFoundError("s1").http_status == 404
    assert StorageFailureError("boom", "write").http_status == 503


def test_timeout_is_a_storage_failure():
    err = StorageTimeoutError("write", 3)
    assert isinstance(err, StorageFailureError)
    assert err.code == "STORAGE_TIMEOUT"
    assert err.category == ErrorCategory.STORAGE_FAILURE
    assert err.attempts == 3


def test_response_envelope_carries_context():
    body = UnauthorizedReviewerError("s1", "r2").to_response()["error"]
    assert body["code"] == "UNAUTHORIZED_REVIEWER"
    assert body["category"] == "unauthorized"
    assert body["context"]["session_id"] == "s1"
    assert body["context"]["reviewer_id"] == "r2"


def test_reason_is_the_code():
    assert SessionNotFoundError("s1").to_reason() == "SESSION_NOT_FOUND"
