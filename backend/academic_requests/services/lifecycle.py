"""Request lifecycle transitions.

    submitted --validate--> submitted (validated) --route--> assigned
        --process--> processing --decide--> completed | rejected
    submitted --reject validation--> rejected --resubmit--> submitted

Every transition is one atomic write of the Request row followed by a
notification and an audit entry. Those two side effects are best-effort: they
run in their own savepoints and never fail the transition. There is no
locking; concurrent transitions on the same request resolve as last write
wins.
"""
from typing import Iterable, Optional

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from academic_requests.models import AuditLog, Request
from academic_requests.services import audit_service, guards, notification_service, routing

SUBCATEGORY_SUFFIXES = {
    Request.Subcategory.MISSING: 'Absence de note',
    Request.Subcategory.ERROR: 'Erreur de note',
}


def _save(requete: Request, fields: Iterable[str]):
    requete.check_invariants()
    requete.save(update_fields=list(fields) + ['updated_at'])


def _title_with_subcategory(title: str, subcategory: str) -> str:
    suffix = f" ({SUBCATEGORY_SUFFIXES.get(subcategory, subcategory)})"
    if title.endswith(suffix):
        return title
    return title[:Request.TITLE_MAX_LENGTH - len(suffix)] + suffix


@transaction.atomic
def create_request(user, request_type, title, description, grade_type=None, subcategory=None,
                   routed_to=None, priority=None, subject=None) -> Request:
    """Submit a new request on behalf of `user`.

    Grade inquiries name their handler up front; CC/SN inquiries are
    auto-routed and the handler hears about them immediately.
    """
    guards.ensure_can_create(user)
    if request_type not in Request.RequestType.values:
        raise ValidationError({'request_type': f'Unknown request type: {request_type}'})
    title = guards.require_title(title)
    description = guards.require_text(description, 'description')
    priority = priority or Request.Priority.NORMAL
    if priority not in Request.Priority.values:
        raise ValidationError({'priority': f'Unknown priority: {priority}'})

    routed_to_role = None
    subcategory = guards.check_length(
        str(subcategory or '').strip(), 'subcategory', Request.SUBCATEGORY_MAX_LENGTH,
    )
    if request_type == Request.RequestType.GRADE_INQUIRY:
        grade_type = routing.normalize_grade_type(grade_type)
        if grade_type is None:
            raise ValidationError({'grade_type': 'Grade inquiries require a grade type (CC or SN).'})
        routed_to = str(routed_to or '').strip()
        routed_to_role = routing.check_handler_choice(user, grade_type, routed_to)
        if grade_type == Request.GradeType.CC and subcategory:
            title = _title_with_subcategory(title, subcategory)
        else:
            subcategory = ''
    else:
        grade_type = None
        routed_to = None
        subcategory = ''

    requete = Request(
        created_by=user.id,
        request_type=request_type,
        grade_type=grade_type,
        subcategory=subcategory,
        title=title,
        description=description,
        priority=priority,
        subject=str(subject or '').strip(),
        department_code=user.department_code or '',
        program_code=user.program_code or '',
        routed_to=routed_to,
        routed_to_role=routed_to_role,
        routed_at=timezone.now() if routed_to else None,
    )
    requete.check_invariants()
    requete.save()

    notification_service.notify_request_created(requete)
    audit_service.log_request_action(requete, AuditLog.Action.CREATE, user.id, None, audit_service.snapshot(requete))
    return requete


@transaction.atomic
def validate_request(requete: Request, user, routed_to=None, routed_to_role=None) -> Request:
    """Approve a pending request at the validation gate.

    `status` stays submitted. A handler named here is applied only when the
    request has none yet.
    """
    guards.ensure_can_validate(requete, user)
    guards.ensure_pending_validation(requete)
    routed_to = str(routed_to or '').strip() or None
    if routed_to and requete.routed_to and routed_to != requete.routed_to:
        raise ValidationError({'routed_to': 'Request is already routed; the handler cannot be changed.'})

    old = audit_service.snapshot(requete)
    requete.validation_status = Request.ValidationStatus.VALIDATED
    requete.validated_at = timezone.now()
    requete.validated_by = user.id
    _save(requete, ['validation_status', 'validated_at', 'validated_by'])

    notification_service.notify_request_validated(requete)
    audit_service.log_request_action(requete, AuditLog.Action.APPROVE, user.id, old, audit_service.snapshot(requete))

    if routed_to and not requete.routed_to:
        routing.route_request(requete, user, routed_to, routed_to_role)
    return requete


@transaction.atomic
def reject_validation(requete: Request, user, reason) -> Request:
    guards.ensure_can_validate(requete, user)
    reason = guards.require_text(reason, 'rejection_reason', 'A rejection reason is required.')
    guards.ensure_pending_validation(requete)

    old = audit_service.snapshot(requete)
    requete.validation_status = Request.ValidationStatus.REJECTED
    requete.status = Request.Status.REJECTED
    requete.rejection_reason = reason
    _save(requete, ['validation_status', 'status', 'rejection_reason'])

    notification_service.notify_validation_rejected(requete)
    audit_service.log_request_action(
        requete, AuditLog.Action.REJECT, user.id, old, audit_service.snapshot(requete), details=reason,
    )
    return requete


@transaction.atomic
def resubmit_request(requete: Request, user, title=None, description=None) -> Request:
    """Send a validation-rejected request back to the validation gate."""
    guards.ensure_creator(requete, user)
    guards.ensure_validation_rejected(requete)

    fields = ['status', 'validation_status', 'rejection_reason', 'validated_at', 'validated_by', 'submitted_at']
    if title is not None:
        title = guards.require_title(title)
        if requete.grade_type == Request.GradeType.CC and requete.subcategory:
            title = _title_with_subcategory(title, requete.subcategory)
        requete.title = title
        fields.append('title')
    if description is not None:
        requete.description = guards.require_text(description, 'description')
        fields.append('description')

    old = audit_service.snapshot(requete)
    old['rejection_reason'] = requete.rejection_reason
    requete.status = Request.Status.SUBMITTED
    requete.validation_status = Request.ValidationStatus.PENDING
    requete.rejection_reason = None
    requete.validated_at = None
    requete.validated_by = None
    requete.submitted_at = timezone.now()
    _save(requete, fields)

    notification_service.notify_request_resubmitted(requete)
    audit_service.log_request_action(requete, AuditLog.Action.RESUBMIT, user.id, old, audit_service.snapshot(requete))
    return requete


@transaction.atomic
def start_processing(requete: Request, user, comment=None) -> Request:
    guards.ensure_is_handler(requete, user)
    guards.ensure_can_process(requete)

    old = audit_service.snapshot(requete)
    requete.status = Request.Status.PROCESSING
    requete.processing_comment = str(comment or '').strip() or None
    _save(requete, ['status', 'processing_comment'])

    notification_service.notify_request_processing(requete)
    audit_service.log_request_action(
        requete, AuditLog.Action.PROCESS, user.id, old, audit_service.snapshot(requete),
        details=requete.processing_comment,
    )
    return requete


@transaction.atomic
def approve_request(requete: Request, user, comment=None) -> Request:
    """Handler approval: the request is completed and resolved by `user`."""
    guards.ensure_is_handler(requete, user)
    guards.ensure_can_decide(requete)

    old = audit_service.snapshot(requete)
    requete.final_status = Request.FinalStatus.APPROVED
    requete.status = Request.Status.COMPLETED
    requete.resolved_at = timezone.now()
    requete.resolved_by = user.id
    requete.final_comment = str(comment or '').strip() or None
    _save(requete, ['final_status', 'status', 'resolved_at', 'resolved_by', 'final_comment'])

    notification_service.notify_request_approved(requete)
    audit_service.log_request_action(
        requete, AuditLog.Action.COMPLETE, user.id, old, audit_service.snapshot(requete),
        details=requete.final_comment,
    )
    return requete


@transaction.atomic
def reject_request(requete: Request, user, comment) -> Request:
    """Handler rejection. Terminal: there is no resubmission after a final decision."""
    guards.ensure_is_handler(requete, user)
    comment = guards.require_text(comment, 'comment', 'A comment is required to reject a request.')
    guards.ensure_can_decide(requete)

    old = audit_service.snapshot(requete)
    requete.final_status = Request.FinalStatus.REJECTED
    requete.status = Request.Status.REJECTED
    requete.final_comment = comment
    _save(requete, ['final_status', 'status', 'final_comment'])

    notification_service.notify_request_rejected(requete)
    audit_service.log_request_action(
        requete, AuditLog.Action.REJECT, user.id, old, audit_service.snapshot(requete), details=comment,
    )
    return requete


def decide_request(requete: Request, user, decision, comment: Optional[str] = None) -> Request:
    action = str(decision or '').strip().lower()
    if action == 'approve':
        return approve_request(requete, user, comment)
    if action == 'reject':
        return reject_request(requete, user, comment)
    raise ValueError(f'Unknown decision: {decision}')
