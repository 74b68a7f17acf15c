"""Per-request identity context.

A `SessionUser` is built by the authentication class for every request and
attached to `request.user`. Nothing about the current user is kept at
module level.
"""
from dataclasses import dataclass, field
from typing import FrozenSet, Optional

from accounts.permissions import WILDCARD


@dataclass(frozen=True)
class SessionUser:
    id: str
    role: str
    permissions: FrozenSet[str] = field(default_factory=frozenset)
    email: str = ''
    first_name: str = ''
    last_name: str = ''
    matricule: str = ''
    department_code: Optional[str] = None
    program_code: Optional[str] = None
    token: Optional[str] = field(default=None, repr=False, compare=False)

    is_authenticated = True
    is_anonymous = False
    is_active = True

    @property
    def pk(self):
        return self.id

    @property
    def username(self) -> str:
        return self.email or self.id

    @property
    def full_name(self) -> str:
        return ' '.join(filter(None, [self.first_name, self.last_name]))

    @property
    def is_wildcard(self) -> bool:
        return WILDCARD in self.permissions

    def has_permission(self, code: str) -> bool:
        return self.is_wildcard or code in self.permissions

    def has_any_permission(self, *codes: str) -> bool:
        return any(self.has_permission(c) for c in codes)

    def __str__(self):
        return f"{self.username} ({self.role})"
