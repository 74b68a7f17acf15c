"""In-app notifications for request lifecycle events.

Notifications are a side effect: every insert runs in its own savepoint and a
failure is logged and swallowed, so the transition that triggered it still
reports success.
"""
import logging
from typing import List, Optional

from django.db import transaction

from academic_requests.models import Notification, Request

logger = logging.getLogger(__name__)

Type = Notification.Type


def _log(event: str, requete: Request, target_user_ids: List[str], reason: str):
    payload = {
        'event': event,
        'request_id': requete.id,
        'request_type': str(requete.request_type),
        'status': str(requete.status),
        'target_user_ids': target_user_ids,
        'reason': reason,
    }
    logger.info('%s', payload)


def notify(user_id: Optional[str], requete: Optional[Request], type: str, title: str, message: str) -> Optional[Notification]:
    """Insert one notification row; returns None when nothing was stored."""
    if not user_id:
        return None
    try:
        with transaction.atomic():
            return Notification.objects.create(
                user_id=str(user_id),
                request=requete,
                type=type,
                title=title,
                message=message,
            )
    except Exception:
        logger.warning(
            'Failed to store %s notification for user %s (request %s)',
            type, user_id, getattr(requete, 'id', None), exc_info=True,
        )
        return None


def _sent(*notifications) -> List[Notification]:
    return [n for n in notifications if n is not None]


def notify_request_created(requete: Request) -> List[Notification]:
    """Confirm the submission to the creator; auto-routed requests also reach their handler."""
    created = [notify(
        requete.created_by, requete, Type.REQUEST_CREATED,
        'Requête soumise',
        f'Votre requête "{requete.title}" a été soumise et est en attente de validation.',
    )]
    targets = [requete.created_by]
    if requete.is_auto_routed and requete.routed_to:
        created.append(notify(
            requete.routed_to, requete, Type.REQUEST_ASSIGNED,
            'Nouvelle requête assignée',
            f'Une nouvelle requête "{requete.title}" vous a été assignée.',
        ))
        targets.append(requete.routed_to)
    _log('request_created', requete, targets, 'Request submitted by creator')
    return _sent(*created)


def notify_request_validated(requete: Request) -> List[Notification]:
    # Auto-routed requests were announced at submission; approval only confirms the documents.
    if requete.is_auto_routed:
        _log('request_validated', requete, [], 'Auto-routed request, validation not announced')
        return []
    sent = notify(
        requete.created_by, requete, Type.REQUEST_VALIDATED,
        'Requête validée',
        f'Votre requête "{requete.title}" a été validée et transmise pour traitement.',
    )
    _log('request_validated', requete, [requete.created_by], 'Request validated')
    return _sent(sent)


def notify_validation_rejected(requete: Request) -> List[Notification]:
    sent = notify(
        requete.created_by, requete, Type.REQUEST_REJECTED,
        'Requête rejetée',
        f'Votre requête "{requete.title}" a été rejetée lors de la validation. Motif : {requete.rejection_reason}',
    )
    _log('request_validation_rejected', requete, [requete.created_by], requete.rejection_reason or '')
    return _sent(sent)


def notify_request_resubmitted(requete: Request) -> List[Notification]:
    sent = notify(
        requete.created_by, requete, Type.REQUEST_RESUBMITTED,
        'Requête resoumise',
        f'Votre requête "{requete.title}" a été soumise à nouveau et est en attente de validation.',
    )
    _log('request_resubmitted', requete, [requete.created_by], 'Request resubmitted after rejection')
    return _sent(sent)


def notify_request_assigned(requete: Request) -> List[Notification]:
    sent = notify(
        requete.routed_to, requete, Type.REQUEST_ASSIGNED,
        'Nouvelle requête assignée',
        f'La requête "{requete.title}" vous a été assignée pour traitement.',
    )
    _log('request_assigned', requete, [requete.routed_to], f'Routed to {requete.routed_to_role}')
    return _sent(sent)


def notify_request_processing(requete: Request) -> List[Notification]:
    sent = notify(
        requete.created_by, requete, Type.REQUEST_PROCESSING,
        'Requête en traitement',
        f'Votre requête "{requete.title}" est en cours de traitement.',
    )
    _log('request_processing', requete, [requete.created_by], 'Handler started processing')
    return _sent(sent)


def notify_request_approved(requete: Request) -> List[Notification]:
    message = f'Votre requête "{requete.title}" a été approuvée.'
    if requete.final_comment:
        message = f'{message} Commentaire : {requete.final_comment}'
    sent = notify(requete.created_by, requete, Type.REQUEST_APPROVED, 'Requête approuvée', message)
    _log('request_approved', requete, [requete.created_by], requete.final_comment or '')
    return _sent(sent)


def notify_request_rejected(requete: Request) -> List[Notification]:
    sent = notify(
        requete.created_by, requete, Type.REQUEST_REJECTED,
        'Requête rejetée',
        f'Votre requête "{requete.title}" a été rejetée. Commentaire : {requete.final_comment}',
    )
    _log('request_rejected', requete, [requete.created_by], requete.final_comment or '')
    return _sent(sent)


def mark_read(user_id: str, notification_id: int) -> bool:
    return Notification.objects.filter(pk=notification_id, user_id=user_id).update(is_read=True) > 0


def mark_all_read(user_id: str) -> int:
    return Notification.objects.filter(user_id=user_id, is_read=False).update(is_read=True)
