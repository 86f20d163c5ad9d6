"""
Request-scoped caller identity.

Views build a :class:`Caller` once from the authenticated request and
hand it to service functions, which never look at ``request.user``
themselves.
"""
from __future__ import annotations

from dataclasses import dataclass

from rest_framework.exceptions import NotAuthenticated, PermissionDenied

from .models import User


@dataclass(frozen=True)
class Caller:
    user: User
    ip: str | None = None

    @property
    def user_id(self) -> int:
        return self.user.id

    @property
    def role(self) -> str:
        return self.user.role

    @property
    def is_admin(self) -> bool:
        return self.role == User.ROLE_ADMIN

    @property
    def is_doctor(self) -> bool:
        return self.role == User.ROLE_DOCTOR

    @property
    def is_patient(self) -> bool:
        return self.role == User.ROLE_PATIENT

    def require(self, *roles: str) -> None:
        if self.role not in roles:
            raise PermissionDenied(f"This operation requires {' or '.join(roles)} role.")


def caller_from_request(request) -> Caller:
    user = getattr(request, 'user', None)
    if not user or not getattr(user, 'is_authenticated', False):
        raise NotAuthenticated()
    return Caller(user=user, ip=request.META.get('REMOTE_ADDR'))
