"""Role and permission vocabulary for the request platform."""
from typing import FrozenSet, Iterable, Optional

from accounts.models import AppRole

WILDCARD = '*'

CREATE = 'requetes:create'
VIEW_OWN = 'requetes:view-own'
VIEW_ROUTED_TO_ME = 'requetes:view-routed-to-me'
VIEW_DEPARTMENT = 'requetes:view-department'
VALIDATE = 'requetes:validate'
ROUTE = 'requetes:route'
RESOLVE = 'requetes:resolve'
VIEW_ALL = 'requetes:view-all'
SYSTEM_MANAGE = 'system:manage'

KNOWN_PERMISSIONS = frozenset({
    CREATE, VIEW_OWN, VIEW_ROUTED_TO_ME, VIEW_DEPARTMENT, VALIDATE,
    ROUTE, RESOLVE, VIEW_ALL, SYSTEM_MANAGE, WILDCARD,
})

_HANDLER = [VIEW_OWN, VIEW_ROUTED_TO_ME, RESOLVE]
_DEPARTMENT_HEAD = _HANDLER + [VIEW_DEPARTMENT, VALIDATE, ROUTE]

ROLE_PERMISSIONS = {
    AppRole.STUDENT: frozenset({CREATE, VIEW_OWN}),
    AppRole.TEACHER: frozenset(_HANDLER),
    AppRole.DEPARTMENT_HEAD: frozenset(_DEPARTMENT_HEAD),
    AppRole.DIRECTOR: frozenset(_DEPARTMENT_HEAD + [VIEW_ALL]),
    AppRole.ADMIN: frozenset({WILDCARD}),
}

# Role names used by the identity service, mapped onto application roles.
ROLE_ALIASES = {
    'étudiant': AppRole.STUDENT,
    'etudiant': AppRole.STUDENT,
    'student': AppRole.STUDENT,
    'enseignant': AppRole.TEACHER,
    'teacher': AppRole.TEACHER,
    'responsable_pedagogique': AppRole.DEPARTMENT_HEAD,
    'department_head': AppRole.DEPARTMENT_HEAD,
    'directeur': AppRole.DIRECTOR,
    'director': AppRole.DIRECTOR,
    'admin': AppRole.ADMIN,
}


def normalize_role(raw: Optional[str]) -> str:
    """Map an identity-service role name to an `AppRole` value (default student)."""
    key = str(raw or '').strip().lower()
    return str(ROLE_ALIASES.get(key, AppRole.STUDENT))


def get_role_permissions(role: Optional[str], extra: Optional[Iterable[str]] = None) -> FrozenSet[str]:
    """Return the permission codes of `role`, merged with any known codes in `extra`.

    Identity-service permissions outside this platform's vocabulary are ignored.
    """
    perms = set(ROLE_PERMISSIONS.get(normalize_role(role), frozenset()))
    for code in extra or ():
        code = str(code or '').strip().rstrip('.')
        if code in KNOWN_PERMISSIONS:
            perms.add(code)
    return frozenset(perms)
