from django.db.models import Q

from accounts import permissions as perms
from academic_requests.models import Request


def can_view_request(requete: Request, user) -> bool:
    """Whether `user` may read `requete`.

    Rules (True if any):
    - `*` or `requetes:view-all`
    - creator, with `requetes:view-own`
    - routed handler, with `requetes:view-routed-to-me`
    - same department, with `requetes:view-department`

    No DB access.
    """
    if user is None or not getattr(user, 'is_authenticated', False):
        return False

    if user.has_permission(perms.VIEW_ALL):
        return True

    if user.has_permission(perms.VIEW_OWN) and requete.created_by == user.id:
        return True

    if user.has_permission(perms.VIEW_ROUTED_TO_ME) and requete.routed_to and requete.routed_to == user.id:
        return True

    if user.has_permission(perms.VIEW_DEPARTMENT) and user.department_code:
        return requete.department_code == user.department_code

    return False


def visible_requests(user, queryset=None):
    """Queryset counterpart of `can_view_request`."""
    qs = Request.objects.all() if queryset is None else queryset
    if user is None or not getattr(user, 'is_authenticated', False):
        return qs.none()

    if user.has_permission(perms.VIEW_ALL):
        return qs

    condition = Q(pk__in=[])
    if user.has_permission(perms.VIEW_OWN):
        condition |= Q(created_by=user.id)
    if user.has_permission(perms.VIEW_ROUTED_TO_ME):
        condition |= Q(routed_to=user.id)
    if user.has_permission(perms.VIEW_DEPARTMENT) and user.department_code:
        condition |= Q(department_code=user.department_code)
    return qs.filter(condition)


def can_view_history(user) -> bool:
    return user.has_permission(perms.VIEW_ALL)
