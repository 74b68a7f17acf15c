import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError
from rest_framework import serializers, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def validation_message(exc: DjangoValidationError) -> str:
    """Flatten a Django ValidationError into the one-line message shown to users."""
    if hasattr(exc, 'message_dict'):
        parts = []
        for field, messages in exc.message_dict.items():
            parts.append(f"{field}: {' '.join(messages)}")
        return '; '.join(parts)
    return ' '.join(exc.messages)


def custom_exception_handler(exc, context):
    if isinstance(exc, DjangoValidationError):
        return Response(
            {'detail': validation_message(exc), 'status_code': status.HTTP_400_BAD_REQUEST},
            status=status.HTTP_400_BAD_REQUEST,
        )

    if isinstance(exc, DatabaseError):
        view = context.get('view')
        logger.exception('Store failure in %s', type(view).__name__ if view else 'unknown view')
        return Response(
            {'detail': str(exc) or 'Database error', 'status_code': status.HTTP_500_INTERNAL_SERVER_ERROR},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    response = exception_handler(exc, context)

    if response is not None:
        if isinstance(exc, serializers.ValidationError):
            response.data = {'errors': response.data, 'detail': _first_error(exc.detail)}
        elif isinstance(response.data, dict):
            response.data['detail'] = str(getattr(exc, 'detail', exc))
        response.data['status_code'] = response.status_code

    return response


def _first_error(detail) -> str:
    if isinstance(detail, dict):
        for field, value in detail.items():
            message = _first_error(value)
            return message if field == 'non_field_errors' else f'{field}: {message}'
        return ''
    if isinstance(detail, (list, tuple)):
        return _first_error(detail[0]) if detail else ''
    return str(detail)
