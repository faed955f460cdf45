# src/content_desk/core/errors.py

"""
Error taxonomy shared by the stores, the API and the connectors.

Every error carries a stable machine-readable `code` and the HTTP status the
API answers with. Detail text is for logs only; clients only see `code`.
"""

from __future__ import annotations


class DeskError(Exception):
    code = "internal_error"
    status = 500

    def __init__(self, code: str | None = None, detail: str | None = None) -> None:
        if code:
            self.code = code
        self.detail = detail or self.code
        super().__init__(self.detail)


class ValidationError(DeskError):
    """Missing or malformed input. Raised before anything is written."""

    code = "invalid_input"
    status = 400


class NotFoundError(DeskError):
    code = "not_found"
    status = 404


class StorageError(DeskError):
    """The database failed. Steps already committed are not rolled back."""

    code = "storage_error"
    status = 500


class TransportError(DeskError):
    """Outbound delivery failed. Logged at the transport boundary, never returned to callers."""

    code = "transport_error"
    status = 502
