"""
Custom Exception Handler for API
"""
from rest_framework.views import exception_handler
from rest_framework.response import Response
from rest_framework import status
import logging

from apps.core.exceptions import StorefrontException, ValidationException

logger = logging.getLogger(__name__)


def custom_exception_handler(exc, context):
    """
    Custom exception handler that provides consistent error responses.
    """
    if isinstance(exc, StorefrontException):
        details = exc.details if isinstance(exc, ValidationException) else {}
        logger.info(f"{exc.code}: {exc.message}")
        return Response(
            {
                "success": False,
                "error": exc.code,
                "message": exc.message,
                "details": details,
                "status_code": exc.status_code
            },
            status=exc.status_code
        )

    # Call REST framework's default exception handler first
    response = exception_handler(exc, context)

    if response is not None:
        # Customize the response format
        response.data = {
            "success": False,
            "error": getattr(exc, 'default_code', 'error').upper(),
            "message": str(exc),
            "details": response.data if isinstance(response.data, dict) else {"detail": response.data},
            "status_code": response.status_code
        }
    else:
        # Handle unexpected exceptions
        logger.exception(f"Unhandled exception: {exc}")
        response = Response(
            {
                "success": False,
                "error": "SERVER_ERROR",
                "message": "An unexpected error occurred",
                "details": {"exception": str(exc)},
                "status_code": 500
            },
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    return response
