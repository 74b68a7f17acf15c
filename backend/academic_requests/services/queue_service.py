"""Work queues: requests awaiting a validator's or a handler's action."""
from django.db.models import Count

from accounts import permissions as perms
from academic_requests.models import Request


def handler_queue(user):
    """Validated, undecided requests routed to `user`."""
    return Request.objects.filter(
        routed_to=user.id,
        validation_status=Request.ValidationStatus.VALIDATED,
        final_status__isnull=True,
        status__in=Request.HANDLER_STATUSES,
    ).order_by('-submitted_at')


def validation_queue(user):
    """Pending requests `user` may validate, oldest submission first."""
    if not user.has_permission(perms.VALIDATE):
        return Request.objects.none()

    qs = Request.objects.filter(
        validation_status=Request.ValidationStatus.PENDING,
        status=Request.Status.SUBMITTED,
    )
    if not user.has_permission(perms.VIEW_ALL):
        qs = qs.filter(department_code=user.department_code or '')
    return qs.order_by('submitted_at')


def status_counts(queryset=None):
    qs = Request.objects.all() if queryset is None else queryset
    by_status = {value: 0 for value in Request.Status.values}
    for row in qs.order_by().values('status').annotate(total=Count('id')):
        by_status[row['status']] = row['total']

    by_validation = {value: 0 for value in Request.ValidationStatus.values}
    for row in qs.order_by().values('validation_status').annotate(total=Count('id')):
        by_validation[row['validation_status']] = row['total']

    return {
        'total': sum(by_status.values()),
        'by_status': by_status,
        'by_validation_status': by_validation,
    }
