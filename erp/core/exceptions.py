"""
Domain error taxonomy and the DRF exception handler that renders every error
with the ``{success, message, errors}`` envelope.
"""
import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DataError, IntegrityError
from django.http import Http404
from rest_framework import exceptions as drf_exceptions
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler, set_rollback

logger = logging.getLogger('erp.core')


class ERPError(drf_exceptions.APIException):
    """Base class for errors raised by the service layer."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'The request could not be processed.'
    default_code = 'error'

    def __init__(self, message=None, errors=None):
        super().__init__(detail=message or self.default_detail)
        self.message = str(self.detail)
        self.errors = errors or []


class ValidationError(ERPError):
    default_detail = 'Validation failed'
    default_code = 'validation_error'


class NotFoundError(ERPError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Resource not found'
    default_code = 'not_found'


class ConflictError(ERPError):
    default_detail = 'Resource already exists'
    default_code = 'conflict'


class InsufficientStockError(ERPError):
    default_detail = 'Insufficient stock'
    default_code = 'insufficient_stock'


class DivisionByZeroError(ERPError):
    default_detail = 'Exchange rate cannot be zero'
    default_code = 'division_by_zero'


class ConfigurationError(ERPError):
    default_detail = 'Missing configuration'
    default_code = 'configuration_error'


class PermissionDeniedError(ERPError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'Access denied'
    default_code = 'permission_denied'


class ImmutableRecordError(ERPError):
    default_detail = 'Record cannot be modified'
    default_code = 'immutable_record'


class EmailDeliveryError(ERPError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = 'Failed to send email. Please try again later.'
    default_code = 'email_delivery'


def flatten_errors(detail, path=None):
    """Turn DRF's nested error detail into a list of ``{path, msg}`` entries."""
    errors = []
    if isinstance(detail, dict):
        for key, value in detail.items():
            child_path = f'{path}.{key}' if path else str(key)
            errors.extend(flatten_errors(value, child_path))
    elif isinstance(detail, list):
        for index, value in enumerate(detail):
            if isinstance(value, (dict, list)):
                child_path = f'{path}.{index}' if path else str(index)
                errors.extend(flatten_errors(value, child_path))
            else:
                errors.append({'path': path, 'msg': str(value)})
    else:
        errors.append({'path': path, 'msg': str(detail)})
    return errors


def api_exception_handler(exc, context):
    if isinstance(exc, DjangoValidationError):
        exc = ValidationError(errors=[{'path': None, 'msg': m} for m in exc.messages])
    elif isinstance(exc, IntegrityError):
        logger.warning(f"Integrity error on {context.get('view').__class__.__name__}: {exc}")
        exc = ConflictError()
    elif isinstance(exc, DataError):
        logger.warning(f"Data error on {context.get('view').__class__.__name__}: {exc}")
        exc = ValidationError('Value out of range for the stored field')

    response = drf_exception_handler(exc, context)

    if response is None:
        logger.error(f"Unhandled error: {exc}", exc_info=exc)
        set_rollback()
        return Response(
            {'success': False, 'message': 'Internal server error'},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    body = {'success': False}
    if isinstance(exc, ERPError):
        body['message'] = exc.message
        if exc.errors:
            body['errors'] = exc.errors
    elif isinstance(exc, drf_exceptions.ValidationError):
        body['message'] = 'Validation failed'
        body['errors'] = flatten_errors(exc.detail)
    elif isinstance(exc, Http404):
        body['message'] = 'Resource not found'
    else:
        detail = getattr(exc, 'detail', None)
        body['message'] = str(detail) if detail is not None else str(exc)

    response.data = body
    return response
