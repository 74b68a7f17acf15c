"""Preconditions checked before a lifecycle write.

Permission failures raise `PermissionDenied` (HTTP 403); illegal source states
and missing fields raise `ValidationError` (HTTP 400). Nothing here writes.
"""
from typing import Optional

from django.core.exceptions import PermissionDenied, ValidationError

from accounts import permissions as perms
from academic_requests.models import Request


def require_text(value, field: str, message: Optional[str] = None) -> str:
    text = str(value or '').strip()
    if not text:
        raise ValidationError({field: message or 'This field is required.'})
    return text


def check_length(value: str, field: str, max_length: int) -> str:
    if len(value) > max_length:
        raise ValidationError({field: f'Ensure this field has no more than {max_length} characters.'})
    return value


def require_title(value) -> str:
    return check_length(require_text(value, 'title'), 'title', Request.TITLE_MAX_LENGTH)


def ensure_can_create(user):
    if not user.has_permission(perms.CREATE):
        raise PermissionDenied('You are not allowed to submit requests')


def ensure_creator(requete: Request, user):
    if requete.created_by != user.id:
        raise PermissionDenied('Only the creator may resubmit this request')


def ensure_can_validate(requete: Request, user):
    if not user.has_permission(perms.VALIDATE):
        raise PermissionDenied('You are not allowed to validate requests')
    # Validators without a global view stay within their own department.
    if not user.has_permission(perms.VIEW_ALL) and requete.department_code != (user.department_code or ''):
        raise PermissionDenied('This request belongs to another department')


def ensure_pending_validation(requete: Request):
    if requete.validation_status != Request.ValidationStatus.PENDING or requete.status != Request.Status.SUBMITTED:
        raise ValidationError('Request is not awaiting validation')


def ensure_validation_rejected(requete: Request):
    if requete.validation_status != Request.ValidationStatus.REJECTED or requete.final_status is not None:
        raise ValidationError('Only requests rejected at validation can be resubmitted')


def ensure_can_route(requete: Request, user):
    if not user.has_permission(perms.ROUTE):
        raise PermissionDenied('You are not allowed to route requests')
    if requete.validation_status != Request.ValidationStatus.VALIDATED:
        raise ValidationError('Request must be validated before routing')
    if requete.routed_to:
        raise ValidationError({'routed_to': 'Request is already routed; the handler cannot be changed.'})
    if requete.is_terminal:
        raise ValidationError('Request is closed')


def ensure_is_handler(requete: Request, user):
    if not user.has_permission(perms.RESOLVE):
        raise PermissionDenied('You are not allowed to process requests')
    if user.is_wildcard:
        return
    if not requete.routed_to or requete.routed_to != user.id:
        raise PermissionDenied('Only the assigned handler can act on this request')


def ensure_can_process(requete: Request):
    if requete.validation_status != Request.ValidationStatus.VALIDATED:
        raise ValidationError('Request must be validated before processing')
    if requete.final_status is not None or requete.status not in (Request.Status.SUBMITTED, Request.Status.ASSIGNED):
        raise ValidationError('Request cannot be taken into processing from its current state')


def ensure_can_decide(requete: Request):
    if requete.validation_status != Request.ValidationStatus.VALIDATED:
        raise ValidationError('Request must be validated before a decision')
    if requete.final_status is not None or requete.status not in Request.HANDLER_STATUSES:
        raise ValidationError('Request already has a final decision')
