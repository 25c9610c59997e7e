"""Unified exception hierarchy for pranayam-client."""


class PranayamClientError(Exception):
    """Base exception for all pranayam-client errors."""


# REST API
class APIError(PranayamClientError):
    """Base exception for REST API operations."""


class TransportError(APIError):
    """The request never produced a response (DNS, connect, timeout)."""


class HTTPStatusError(APIError):
    """The server answered with a non-success status code."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class ResponseFormatError(APIError):
    """The response body was absent or could not be parsed."""


# Auth / session
class AuthError(PranayamClientError):
    """Missing or unusable session credentials."""


# Local message store
class MessageStoreError(PranayamClientError):
    """Failed to read or write the local message cache."""


class InvalidStatusTransition(MessageStoreError):
    """A message status change that the delivery state machine forbids."""


# Real-time channel
class RealtimeError(PranayamClientError):
    """Failed to open or use the real-time socket channel."""
