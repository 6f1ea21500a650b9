# backend/checkin/errors.py
from __future__ import annotations


class CheckinError(Exception):
    """Base class for errors rendered as ``{"error": message}``."""

    status_code = 500
    default_message = "internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(CheckinError):
    status_code = 401
    default_message = "not authenticated"


class NotFound(CheckinError):
    status_code = 404
    default_message = "not found"


class ValidationError(CheckinError):
    status_code = 400
    default_message = "invalid request"


class InvalidToken(CheckinError):
    """Expired, used or otherwise unusable check-in link.

    ``reason`` is the short string shown to the person holding the link;
    it never carries more than "already used" / "expired".
    """

    status_code = 400
    default_message = "invalid link"

    def __init__(self, reason: str | None = None):
        self.reason = reason
        super().__init__(reason or self.default_message)


class Internal(CheckinError):
    status_code = 500
