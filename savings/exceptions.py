"""Errors raised by the savings services.

Each error carries the HTTP status the API answers with and a message that is
safe to show to the admin.
"""
from rest_framework import status


class SavingsError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Savings operation failed'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(SavingsError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Invalid input'


class ConflictError(SavingsError):
    status_code = status.HTTP_409_CONFLICT
    default_message = 'The requested change conflicts with the current state'


class AlreadyEndedError(ConflictError):
    """Raised when a cycle is ended twice. Callers treat it as a no-op."""

    def __init__(self, cycle, message=None):
        self.cycle = cycle
        super().__init__(message or f'"{cycle.name}" has already ended.')


class NotFoundError(SavingsError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'Not found'


class TransientIOError(SavingsError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = 'Something went wrong, please try again'
