"""Handler selection and assignment.

Grade inquiries are routed by grade type: continuous-assessment (CC) grades go
to a teacher of the requester's department and program, final-session (SN)
grades to a department head. Once set, `routed_to` never changes.
"""
from typing import Optional

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from accounts.models import AppRole, UserProfile
from academic_requests.models import AuditLog, Request
from academic_requests.services import audit_service, guards, notification_service

GRADE_TYPE_ROLES = {
    Request.GradeType.CC: AppRole.TEACHER,
    Request.GradeType.SN: AppRole.DEPARTMENT_HEAD,
}

HANDLER_ROLES = (AppRole.TEACHER, AppRole.DEPARTMENT_HEAD, AppRole.DIRECTOR, AppRole.ADMIN)


def normalize_grade_type(grade_type) -> Optional[str]:
    value = str(grade_type or '').strip().upper()
    return value if value in Request.GradeType.values else None


def handler_role_for_grade_type(grade_type) -> Optional[str]:
    role = GRADE_TYPE_ROLES.get(normalize_grade_type(grade_type))
    return str(role) if role else None


def eligible_handlers(user, grade_type):
    """UserProfile rows the requester may pick as handler for `grade_type`."""
    role = handler_role_for_grade_type(grade_type)
    if role is None or not user.department_code:
        return UserProfile.objects.none()

    qs = UserProfile.objects.filter(is_active=True, role=role, department_code=user.department_code)
    if role == AppRole.TEACHER:
        qs = qs.filter(Q(program_code='') | Q(program_code=user.program_code or ''))
    return qs


def check_handler_choice(user, grade_type, routed_to) -> str:
    """Validate a requester-chosen handler and return its routing role."""
    if not routed_to:
        raise ValidationError({'routed_to': 'A handler must be selected for grade inquiries.'})
    if not eligible_handlers(user, grade_type).filter(user_id=routed_to).exists():
        raise ValidationError({'routed_to': 'Selected handler is not eligible for this grade type.'})
    return handler_role_for_grade_type(grade_type)


def _check_profile(requete: Request, profile: UserProfile, routed_to_role: Optional[str]) -> str:
    if not profile.is_active:
        raise ValidationError({'routed_to': 'Selected handler is no longer active.'})
    if profile.role not in HANDLER_ROLES:
        raise ValidationError({'routed_to': f'A {profile.role} cannot handle requests.'})
    if routed_to_role and routed_to_role != profile.role:
        raise ValidationError({'routed_to_role': f'Selected handler is a {profile.role}, not a {routed_to_role}.'})
    # Teachers and department heads only handle requests of their own department.
    if (profile.role in (AppRole.TEACHER, AppRole.DEPARTMENT_HEAD)
            and requete.department_code and profile.department_code != requete.department_code):
        raise ValidationError({'routed_to': 'Selected handler belongs to another department.'})
    return str(profile.role)


def _resolve_role(requete: Request, routed_to: str, routed_to_role: Optional[str]) -> str:
    if routed_to_role and routed_to_role not in [str(r) for r in HANDLER_ROLES]:
        raise ValidationError({'routed_to_role': f'Unknown handler role: {routed_to_role}'})

    profile = UserProfile.objects.filter(user_id=routed_to).first()
    if profile is not None:
        return _check_profile(requete, profile, routed_to_role)

    # Not in the directory yet (never logged in): the caller must vouch for the role.
    if routed_to_role:
        return routed_to_role
    role = handler_role_for_grade_type(requete.grade_type)
    if role is None:
        raise ValidationError({'routed_to_role': 'Handler role could not be determined.'})
    return role


@transaction.atomic
def route_request(requete: Request, user, routed_to, routed_to_role: Optional[str] = None) -> Request:
    """Assign the handler of a validated request (status becomes assigned)."""
    guards.ensure_can_route(requete, user)
    routed_to = guards.require_text(routed_to, 'routed_to')
    role = _resolve_role(requete, routed_to, routed_to_role)

    old = audit_service.snapshot(requete)
    requete.routed_to = routed_to
    requete.routed_to_role = role
    requete.routed_at = timezone.now()
    requete.status = Request.Status.ASSIGNED
    requete.check_invariants()
    requete.save(update_fields=['routed_to', 'routed_to_role', 'routed_at', 'status', 'updated_at'])

    notification_service.notify_request_assigned(requete)
    audit_service.log_request_action(requete, AuditLog.Action.ASSIGN, user.id, old, audit_service.snapshot(requete))
    return requete
