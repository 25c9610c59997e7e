"""Tests for exception hierarchy."""

from pranayam_client.exceptions import (
    PranayamClientError,
    APIError,
    TransportError,
    HTTPStatusError,
    ResponseFormatError,
    AuthError,
    MessageStoreError,
    InvalidStatusTransition,
    RealtimeError,
)


def test_all_inherit_from_base():
    for exc_class in [
        APIError, TransportError, HTTPStatusError, ResponseFormatError,
        AuthError,
        MessageStoreError, InvalidStatusTransition,
        RealtimeError,
    ]:
        assert issubclass(exc_class, PranayamClientError)


def test_api_hierarchy():
    assert issubclass(TransportError, APIError)
    assert issubclass(HTTPStatusError, APIError)
    assert issubclass(ResponseFormatError, APIError)


def test_store_hierarchy():
    assert issubclass(InvalidStatusTransition, MessageStoreError)


def test_http_status_error_carries_code():
    e = HTTPStatusError("GET conversations returned HTTP 503", status_code=503)
    assert e.status_code == 503
    assert str(e) == "GET conversations returned HTTP 503"
