# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Error hierarchy shared by the collection store and the mail relay.

Each error carries the HTTP status the API layer answers with and a short
machine-readable ``code``.
"""

from __future__ import annotations


class JsonDbMailError(Exception):
    """Base class for every error raised by the services."""

    status_code = 500
    code = "error"

    def __init__(self, message: str = "Internal error"):
        super().__init__(message)
        self.message = message


class InvalidInput(JsonDbMailError):
    """Raised when a required field is missing or malformed."""

    status_code = 400
    code = "invalid_input"


class CollectionNotFound(JsonDbMailError):
    """Raised when an operation targets a collection without a file on disk."""

    status_code = 404
    code = "not_found"

    def __init__(self, collection: str, message: str = "Collection not found"):
        super().__init__(message)
        self.collection = collection


class StoreIOError(JsonDbMailError):
    """Raised when reading, writing or copying a collection file fails."""

    code = "io_error"


class TransportError(JsonDbMailError):
    """Raised when the SMTP provider rejects or cannot receive a message."""

    code = "transport_error"
