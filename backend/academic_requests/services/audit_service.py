import logging
from typing import Any, Dict, Optional

from django.db import transaction

from academic_requests.models import AuditLog, Request

logger = logging.getLogger(__name__)

SNAPSHOT_FIELDS = ('status', 'validation_status', 'final_status', 'routed_to', 'routed_to_role')


def snapshot(requete: Request) -> Dict[str, Any]:
    """Lifecycle fields recorded as old/new values in the audit trail."""
    return {name: getattr(requete, name) for name in SNAPSHOT_FIELDS}


def log_request_action(requete: Request, action: str, user_id: Optional[str], old_value=None, new_value=None, details=None) -> Optional[AuditLog]:
    """Append one audit row. A failed insert is logged and does not fail the caller."""
    if details:
        new_value = dict(new_value or {}, details=details)
    try:
        with transaction.atomic():
            return AuditLog.objects.create(
                request=requete,
                user_id=str(user_id) if user_id else None,
                action=action,
                old_value=old_value,
                new_value=new_value,
            )
    except Exception:
        logger.warning('Failed to write %s audit entry for request %s', action, requete.id, exc_info=True)
        return None


def history_for(requete: Request):
    return requete.audit_logs.all()
