"""Errors shared by the object store sources, the API and the client."""

from typing import Any


class UpstreamFailure(Exception):
    """
    The object store (or the mediatree API, seen from a client) could not complete a listing or mutation.

    status_code and details are passed through unchanged so callers can show the store's own error.
    """

    def __init__(self, message: str, status_code: int = 502, details: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details


class Unauthorized(UpstreamFailure):
    def __init__(self, message: str = "Unauthorized", details: Any = None):
        super().__init__(message, status_code=401, details=details)
