import logging

from django.db import DatabaseError, transaction

from accounts.models import UserProfile
from accounts.session import SessionUser

logger = logging.getLogger(__name__)

# Filled from the identity payload only when it carries a value, so that
# directory edits made here survive the next login.
OPTIONAL_IDENTITY_FIELDS = ('email', 'first_name', 'last_name', 'matricule')


def sync_user_profile(user: SessionUser):
    """Upsert the directory row for an authenticated user.

    Non-critical: a store failure is logged and the request proceeds.
    """
    defaults = {
        'role': user.role,
        'department_code': user.department_code or '',
        'program_code': user.program_code or '',
        'is_active': True,
    }
    for name in OPTIONAL_IDENTITY_FIELDS:
        value = getattr(user, name)
        if value:
            defaults[name] = value

    try:
        with transaction.atomic():
            profile, created = UserProfile.objects.update_or_create(user_id=user.id, defaults=defaults)
    except DatabaseError:
        logger.warning('Failed to sync profile for user %s', user.id, exc_info=True)
        return None

    if created:
        logger.info('Directory profile created for user %s (%s)', user.id, user.role)
    return profile


def update_profile(profile: UserProfile, changes: dict, actor_id: str) -> UserProfile:
    """Apply locally editable fields to a directory row."""
    fields = [name for name, value in changes.items() if getattr(profile, name) != value]
    if not fields:
        return profile

    for name in fields:
        setattr(profile, name, changes[name])
    profile.save(update_fields=fields + ['synced_at'])
    logger.info('%s', {
        'event': 'profile_updated',
        'user_id': profile.user_id,
        'fields': sorted(fields),
        'actor': actor_id,
    })
    return profile
