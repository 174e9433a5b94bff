"""
API error taxonomy and the DRF exception handler that renders it.

Every failure leaves the API in one of three envelopes:

- 422 ``{"success": false, "message": "Dados inválidos", "errors": {...}}``
- 404 ``{"success": false, "message": "<Recurso> não encontrado"}``
- 500 ``{"success": false, "message": "Erro interno do servidor. Tente novamente."}``

Authentication and permission failures keep DRF's status codes but use
the same envelope.
"""
import logging

from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)

VALIDATION_MESSAGE = 'Dados inválidos'
NOT_FOUND_MESSAGE = 'Registro não encontrado'
INTERNAL_ERROR_MESSAGE = 'Erro interno do servidor. Tente novamente.'


class ValidationError(exceptions.APIException):
    """Client-correctable input error (HTTP 422)."""
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_detail = VALIDATION_MESSAGE
    default_code = 'invalid'

    def __init__(self, errors=None, message=None):
        super().__init__(detail=message or VALIDATION_MESSAGE)
        self.errors = errors or {}


class NotFoundError(exceptions.APIException):
    """
    Resource absent or owned by another doctor (HTTP 404).

    Both cases produce the same message so callers cannot probe for ids
    that belong to someone else.
    """
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = NOT_FOUND_MESSAGE
    default_code = 'not_found'


class InternalError(exceptions.APIException):
    """Unexpected failure. Details stay in the server log (HTTP 500)."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = INTERNAL_ERROR_MESSAGE
    default_code = 'internal_error'


def _error_body(message, errors=None):
    body = {'success': False, 'message': message}
    if errors is not None:
        body['errors'] = errors
    return body


def _as_field_errors(detail):
    """Normalize DRF error detail into ``{field: [messages]}``."""
    if isinstance(detail, dict):
        return {
            field: [str(m) for m in (msgs if isinstance(msgs, list) else [msgs])]
            for field, msgs in detail.items()
        }
    if isinstance(detail, list):
        return {'non_field_errors': [str(m) for m in detail]}
    return {'non_field_errors': [str(detail)]}


def api_exception_handler(exc, context):
    """
    REST_FRAMEWORK['EXCEPTION_HANDLER'].

    Unknown exceptions are logged with traceback and converted to the
    generic 500 envelope instead of propagating.
    """
    if isinstance(exc, ValidationError):
        return Response(
            _error_body(str(exc.detail), exc.errors),
            status=exc.status_code,
        )

    if isinstance(exc, exceptions.ValidationError):
        return Response(
            _error_body(VALIDATION_MESSAGE, _as_field_errors(exc.detail)),
            status=status.HTTP_422_UNPROCESSABLE_ENTITY,
        )

    if isinstance(exc, (NotFoundError, Http404, exceptions.NotFound)):
        message = str(exc.detail) if isinstance(exc, NotFoundError) else NOT_FOUND_MESSAGE
        return Response(_error_body(message), status=status.HTTP_404_NOT_FOUND)

    if isinstance(exc, InternalError):
        return Response(_error_body(INTERNAL_ERROR_MESSAGE), status=exc.status_code)

    response = exception_handler(exc, context)
    if response is not None:
        detail = response.data.get('detail') if isinstance(response.data, dict) else None
        response.data = _error_body(str(detail) if detail else str(exc))
        return response

    if isinstance(exc, DjangoPermissionDenied):
        return Response(_error_body(str(exc) or 'Acesso negado'), status=status.HTTP_403_FORBIDDEN)

    view = context.get('view')
    logger.error(
        f'Unhandled API exception: {exc.__class__.__name__}',
        exc_info=(type(exc), exc, exc.__traceback__),
        extra={
            'event': 'api_unhandled_exception',
            'exception_type': exc.__class__.__name__,
            'view': view.__class__.__name__ if view is not None else None,
        }
    )
    return Response(
        _error_body(INTERNAL_ERROR_MESSAGE),
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
