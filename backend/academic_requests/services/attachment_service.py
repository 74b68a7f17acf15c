"""Attachment storage and time-limited download links.

Files go through Django's default storage under
`<user_id>/<request_id>/<timestamp>_<random>_<name>`. Downloads are served
from signed tokens so a link can be shared without the bearer token.
"""
import logging
import os
import time
from typing import List, Optional

from django.conf import settings
from django.core import signing
from django.core.exceptions import PermissionDenied, SuspiciousOperation, ValidationError
from django.core.files.storage import default_storage
from django.db import DatabaseError, transaction
from django.urls import reverse
from django.utils.crypto import get_random_string
from django.utils.http import urlencode
from django.utils.text import get_valid_filename

from academic_requests.models import Attachment, Request
from academic_requests.services import access_control

logger = logging.getLogger(__name__)

SIGNING_SALT = 'academic_requests.attachments'


def can_upload(requete: Request, user) -> bool:
    if requete.is_terminal:
        return False
    return requete.created_by == user.id or user.is_wildcard


def list_attachments(requete: Request, user):
    if not access_control.can_view_request(requete, user):
        return Attachment.objects.none()
    return requete.attachments.all()


def build_storage_path(user_id, request_id, file_name: str) -> str:
    name = get_valid_filename(os.path.basename(file_name or '')) or 'fichier'
    stamp = int(time.time() * 1000)
    rand = get_random_string(8, allowed_chars='abcdefghijklmnopqrstuvwxyz0123456789')
    return f'{user_id}/{request_id}/{stamp}_{rand}_{name}'


def upload_files(requete: Request, user, files) -> List[Attachment]:
    """Store `files` and record them against `requete`.

    Oversized files and files the storage or the database refuse are skipped;
    the call fails only when none was stored.
    """
    if not can_upload(requete, user):
        raise PermissionDenied('Not authorized to upload attachments')

    files = list(files or [])
    if not files:
        raise ValidationError({'files': 'No files provided.'})

    max_size = getattr(settings, 'ATTACHMENT_MAX_SIZE', 10 * 1024 * 1024)
    created = []
    for upload in files:
        size = getattr(upload, 'size', None)
        if size is not None and size > max_size:
            logger.warning('Skipping %s for request %s: %s bytes exceeds %s', upload.name, requete.id, size, max_size)
            continue

        try:
            path = default_storage.save(build_storage_path(user.id, requete.id, upload.name), upload)
        except (OSError, SuspiciousOperation):
            logger.warning('Storage refused %s for request %s', upload.name, requete.id, exc_info=True)
            continue

        try:
            with transaction.atomic():
                attachment = Attachment.objects.create(
                    request=requete,
                    file_name=os.path.basename(upload.name),
                    file_path=path,
                    file_size=size,
                    file_type=getattr(upload, 'content_type', '') or '',
                    uploaded_by=user.id,
                )
        except DatabaseError:
            logger.warning('Failed to record attachment %s for request %s', path, requete.id, exc_info=True)
            default_storage.delete(path)
            continue
        created.append(attachment)

    if not created:
        raise ValidationError('No files were uploaded successfully')

    logger.info('Stored %s attachment(s) for request %s', len(created), requete.id)
    return created


def _signer() -> signing.TimestampSigner:
    return signing.TimestampSigner(salt=SIGNING_SALT)


def create_signed_url(path: str, ttl: Optional[int] = None) -> str:
    """Relative download URL for `path`, valid for `ttl` seconds."""
    ttl = int(ttl or getattr(settings, 'ATTACHMENT_SIGNED_URL_TTL', 3600))
    token = _signer().sign_object({'path': path, 'ttl': ttl})
    return f"{reverse('attachment-download')}?{urlencode({'token': token})}"


def resolve_signed_token(token: str) -> str:
    """Storage path carried by `token`.

    Raises `signing.SignatureExpired` once the token's ttl has elapsed and
    `signing.BadSignature` for anything tampered with or malformed.
    """
    signer = _signer()
    payload = signer.unsign_object(token)
    if not isinstance(payload, dict) or not payload.get('path'):
        raise signing.BadSignature('Malformed attachment token')
    # Second pass enforces the ttl the token was issued with.
    signer.unsign(token, max_age=int(payload.get('ttl') or 0))
    return payload['path']
