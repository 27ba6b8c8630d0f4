"""Relay failure types.

Parse failures come from ``packages.statement_parser.StatementParseError``;
everything that can go wrong around the parse lives here.
"""

from apps.api.core.errors import (
    BadGatewayError,
    NotFoundError,
    ServiceUnavailableError,
    ValidationError,
)


class BlobNotFoundError(NotFoundError):
    """The referenced blob is not in the store (never staged, or expired)."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Blob {key} not found (may have expired)")


class BlobUnavailableError(ServiceUnavailableError):
    """The blob store could not be reached."""

    def __init__(self, detail: str = "Blob store unavailable"):
        super().__init__(detail)


class InvalidBlobError(ValidationError):
    """An inline payload could not be decoded."""


class ForwardError(BadGatewayError):
    """Publishing to a queue failed."""


# Failures of the materialize step
BLOB_ERRORS = (BlobNotFoundError, BlobUnavailableError, InvalidBlobError)
