"""
DRF exception handler that gives every error response an ``error`` key.

Clients only look at ``error``; field-level validation details are kept
under ``details``.
"""
import logging

from rest_framework import exceptions, status
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)

MISSING_AUTH_MESSAGE = 'Unauthorized: Missing Authorization header'
INVALID_TOKEN_MESSAGE = 'Unauthorized: Invalid token'


def first_error_message(detail):
    """Pull the first human readable message out of a DRF error structure"""
    if isinstance(detail, dict):
        for key, value in detail.items():
            message = first_error_message(value)
            if message:
                if key in ('non_field_errors', 'detail', 'error'):
                    return message
                return f"{key}: {message}"
        return None
    if isinstance(detail, (list, tuple)):
        for item in detail:
            message = first_error_message(item)
            if message:
                return message
        return None
    return str(detail) if detail is not None else None


def api_exception_handler(exc, context):
    response = exception_handler(exc, context)
    if response is None:
        view = context.get('view')
        logger.error(f"Unhandled error in {view.__class__.__name__ if view else 'view'}: {str(exc)}", exc_info=exc)
        return None

    if isinstance(exc, exceptions.NotAuthenticated):
        response.status_code = status.HTTP_401_UNAUTHORIZED
        response.data = {'error': MISSING_AUTH_MESSAGE}
    elif isinstance(exc, exceptions.AuthenticationFailed):
        response.status_code = status.HTTP_401_UNAUTHORIZED
        response.data = {'error': INVALID_TOKEN_MESSAGE}
    elif isinstance(exc, exceptions.ValidationError):
        response.data = {
            'error': first_error_message(response.data) or 'Invalid payload',
            'details': response.data,
        }
    else:
        response.data = {'error': first_error_message(response.data) or str(exc)}
    return response
