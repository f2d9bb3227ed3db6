# bidtracker/errors.py
"""
Error types raised by the service layer.

Every error carries the HTTP status it maps to, so the app factory can render
all of them with a single handler as ``{"error": message}``.
"""


class BidTrackerError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500
    default_message = 'Internal Server Error'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self):
        return {'error': self.message}


class ValidationError(BidTrackerError):
    """Malformed id or a missing/invalid required field."""

    status_code = 400
    default_message = 'Bad Request'


class Forbidden(BidTrackerError):
    """The caller's role does not allow the requested action."""

    status_code = 403
    default_message = 'Forbidden'


class NotFound(BidTrackerError):
    status_code = 404
    default_message = 'Not found'


class ReconciliationError(BidTrackerError):
    """A single bulk-import group could not be committed."""

    status_code = 422
    default_message = 'Import group failed'


class TransactionError(BidTrackerError):
    """A multi-entity write failed and was rolled back."""

    status_code = 500
    default_message = 'Transaction failed'
