"""Common exception handlers for the project."""
import logging

from rest_framework.views import exception_handler
from rest_framework.response import Response
from rest_framework import status

logger = logging.getLogger(__name__)


def custom_exception_handler(exc, context):
    """Return a consistent error response structure.

    Domain errors raised by the services (anything exposing ``status_code``
    and ``message``, e.g. ``savings.exceptions.SavingsError``) are mapped to
    their own status codes instead of falling through to a 500.
    """
    from savings.exceptions import SavingsError
    from payments.exceptions import PaymentError

    if isinstance(exc, (SavingsError, PaymentError)):
        return Response({"errors": [exc.message]}, status=exc.status_code)

    response = exception_handler(exc, context)

    if response is None:
        # If DRF couldn't handle the exception, fall back to a generic 500.
        logger.exception("Unhandled error in %s", context.get("view").__class__.__name__)
        return Response(
            {"errors": [str(exc)]}, status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    return Response({"errors": response.data}, status=response.status_code)
