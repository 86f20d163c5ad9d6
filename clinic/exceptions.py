"""
Error taxonomy and the unified API exception handler.

Services raise the exceptions defined here (or DRF's own
``NotFound``/``PermissionDenied``); views let them propagate and the
handler renders every failure as ``{'ok': False, 'error': {...}}``.
"""
from __future__ import annotations

import logging

from django.db import DatabaseError
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class SlotUnavailable(exceptions.APIException):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_detail = 'Doctor is not available at this time slot'
    default_code = 'slot_unavailable'


class InsufficientStock(exceptions.APIException):
    """Raised once per prescription with every short line listed."""
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_detail = 'Insufficient stock'
    default_code = 'insufficient_stock'

    def __init__(self, items: list[dict]):
        self.items = items
        names = ', '.join(str(i['medicine_id']) for i in items)
        super().__init__(f'Insufficient stock for medicine {names}')


class Conflict(exceptions.APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Resource state does not allow this operation'
    default_code = 'conflict'


class StorageError(exceptions.APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Storage failure'
    default_code = 'storage_error'


_CODES = {
    status.HTTP_400_BAD_REQUEST: 'bad_request',
    status.HTTP_401_UNAUTHORIZED: 'unauthorized',
    status.HTTP_403_FORBIDDEN: 'forbidden',
    status.HTTP_404_NOT_FOUND: 'not_found',
    status.HTTP_405_METHOD_NOT_ALLOWED: 'method_not_allowed',
    status.HTTP_409_CONFLICT: 'conflict',
    status.HTTP_429_TOO_MANY_REQUESTS: 'throttled',
}


def _error(code: str, message, http_status: int, **extra) -> Response:
    body = {'code': code, 'message': message}
    body.update(extra)
    return Response({'ok': False, 'error': body}, status=http_status)


def api_exception_handler(exc, context):
    if isinstance(exc, exceptions.ValidationError):
        return _error('validation_error', 'The given data was invalid.',
                      status.HTTP_422_UNPROCESSABLE_ENTITY, fields=exc.detail)
    if isinstance(exc, InsufficientStock):
        return _error(exc.default_code, str(exc.detail), exc.status_code, items=exc.items)
    if isinstance(exc, DatabaseError):
        logger.error('database failure in %s', context.get('view').__class__.__name__, exc_info=exc)
        return _error(StorageError.default_code, str(StorageError.default_detail),
                      status.HTTP_500_INTERNAL_SERVER_ERROR)

    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.error('unhandled error: %s', exc, exc_info=exc)
        return _error('server_error', 'Internal server error', status.HTTP_500_INTERNAL_SERVER_ERROR)

    if isinstance(exc, (SlotUnavailable, Conflict, StorageError)):
        code = exc.default_code
    else:
        code = _CODES.get(resp.status_code, 'api_error')

    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = str(resp.data)
    return _error(code, detail, resp.status_code)
