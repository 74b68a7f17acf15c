"""Client for the external identity service.

The service issues bearer tokens on login and answers `/api/verify` with the
user behind a token:

    {"valid": true, "user": {"id": 7, "email": ..., "firstName": ...,
     "lastName": ..., "matricule": ..., "role": "etudiant",
     "permissions": [...], "departement": "GI" | {"code": "GI"},
     "promotion": {"code": "GI3"} | null}}

Every call returns None (or False) on failure; callers treat that as
"unauthenticated".
"""
import logging
from typing import Any, Dict, Optional

import requests
from django.conf import settings

from accounts.permissions import get_role_permissions, normalize_role
from accounts.session import SessionUser

logger = logging.getLogger(__name__)


class IdentityClient:
    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None, session: Optional[requests.Session] = None):
        self.base_url = (base_url or getattr(settings, 'IDENTITY_SERVICE_URL', '')).rstrip('/')
        self.timeout = float(timeout or getattr(settings, 'IDENTITY_SERVICE_TIMEOUT', 8.0))
        self.http = session or requests.Session()

    def _post(self, path: str, token: Optional[str] = None, payload: Optional[Dict[str, Any]] = None) -> Optional[requests.Response]:
        headers = {'Accept': 'application/json'}
        if token:
            headers['Authorization'] = f'Bearer {token}'
        try:
            return self.http.post(f'{self.base_url}{path}', json=payload, headers=headers, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning('Identity service call %s failed: %s', path, exc)
            return None

    def verify(self, token: str) -> Optional[Dict[str, Any]]:
        """Return the identity-service user dict for `token`, or None."""
        if not token:
            return None
        resp = self._post('/api/verify', token=token)
        if resp is None:
            return None
        if not resp.ok:
            logger.info('Token verification rejected with status %s', resp.status_code)
            return None
        try:
            data = resp.json()
        except ValueError:
            logger.warning('Identity service returned a non-JSON verify response')
            return None
        if not isinstance(data, dict) or not data.get('valid') or not isinstance(data.get('user'), dict):
            return None
        return data['user']

    def login(self, email: str, password: str) -> Optional[str]:
        """Exchange credentials for a bearer token."""
        resp = self._post('/api/auth/login', payload={'email': email, 'password': password})
        if resp is None or not resp.ok:
            return None
        try:
            token = resp.json().get('token')
        except (ValueError, AttributeError):
            return None
        return token or None

    def logout(self, token: str) -> bool:
        resp = self._post('/api/auth/logout', token=token)
        return bool(resp is not None and resp.ok)


def _code_of(value) -> Optional[str]:
    if isinstance(value, dict):
        value = value.get('code')
    value = str(value or '').strip()
    return value or None


def session_user_from_identity(data: Dict[str, Any], token: Optional[str] = None) -> SessionUser:
    """Build the per-request `SessionUser` from a verify payload."""
    raw_role = data.get('role')
    if isinstance(raw_role, dict):
        raw_role = raw_role.get('name')
    return SessionUser(
        id=str(data.get('id')),
        role=normalize_role(raw_role),
        permissions=get_role_permissions(raw_role, data.get('permissions') or ()),
        email=str(data.get('email') or ''),
        first_name=str(data.get('firstName') or data.get('first_name') or ''),
        last_name=str(data.get('lastName') or data.get('last_name') or ''),
        matricule=str(data.get('matricule') or ''),
        department_code=_code_of(data.get('departement') or data.get('department')),
        program_code=_code_of(data.get('promotion') or data.get('program')),
        token=token,
    )
