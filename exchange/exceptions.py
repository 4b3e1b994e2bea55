"""
Error taxonomy of the exchange and the project-wide DRF exception handler.

Every lifecycle failure is an :class:`ExchangeError` carrying a stable
``default_code`` that clients can branch on.  The handler renders all
errors, including DRF's own, as ``{"ok": false, "error": {...}}``.
"""
import logging

from django.db import DatabaseError
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class ExchangeError(exceptions.APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Request could not be processed.'
    default_code = 'exchange_error'


class Unauthenticated(ExchangeError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = 'Authentication credentials were not provided.'
    default_code = 'unauthenticated'


class Forbidden(ExchangeError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'Not authorized.'
    default_code = 'forbidden'


class NotFound(ExchangeError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Not found.'
    default_code = 'not_found'


class InvalidState(ExchangeError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'This request is no longer open.'
    default_code = 'invalid_state'


class InvalidArgument(ExchangeError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid or missing arguments.'
    default_code = 'invalid_argument'


class InsufficientInventory(ExchangeError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Not enough inventory to fulfil this request.'
    default_code = 'insufficient_inventory'


class SelfAction(ExchangeError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'You cannot act on your own request.'
    default_code = 'self_action'


class StorageUnavailable(ExchangeError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = 'Storage is temporarily unavailable.'
    default_code = 'storage_unavailable'


# DRF's built-in exceptions mapped onto the exchange codes
_DRF_CODES = (
    (exceptions.NotAuthenticated, Unauthenticated.default_code),
    (exceptions.AuthenticationFailed, Unauthenticated.default_code),
    (exceptions.PermissionDenied, Forbidden.default_code),
    (exceptions.NotFound, NotFound.default_code),
    (exceptions.ValidationError, InvalidArgument.default_code),
    (exceptions.ParseError, InvalidArgument.default_code),
)


def _error(code: str, message, status_code: int) -> Response:
    return Response({'ok': False, 'error': {'code': code, 'message': message}}, status=status_code)


def api_exception_handler(exc, context):
    if isinstance(exc, DatabaseError):
        logger.exception('storage failure in %s', context.get('view'))
        exc = StorageUnavailable()
    elif isinstance(exc, Http404):
        exc = NotFound()

    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.exception('unhandled error in %s', context.get('view'), exc_info=exc)
        return _error('server_error', str(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)

    if isinstance(exc, ExchangeError):
        code = exc.default_code
    else:
        code = next((c for cls, c in _DRF_CODES if isinstance(exc, cls)), 'api_error')

    if isinstance(resp.data, dict):
        message = resp.data.get('detail') or resp.data
    else:
        message = resp.data
    out = _error(code, message, resp.status_code)
    for header in ('WWW-Authenticate', 'Retry-After'):
        if resp.has_header(header):
            out[header] = resp[header]
    return out
