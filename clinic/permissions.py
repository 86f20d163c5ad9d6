"""
Custom permission classes for role based access control.
"""
from rest_framework.permissions import BasePermission

from .models import User


class _RoleRequired(BasePermission):
    role: str = ''

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated and getattr(user, "role", None) == self.role)


class IsAdminRole(_RoleRequired):
    """Allow access only to users with the admin role."""
    role = User.ROLE_ADMIN
    message = "Access denied. This endpoint requires admin role."


class IsDoctorRole(_RoleRequired):
    """Allow access only to users with the doctor role."""
    role = User.ROLE_DOCTOR
    message = "Access denied. This endpoint requires doctor role."


class IsPatientRole(_RoleRequired):
    """Allow access only to users with the patient role."""
    role = User.ROLE_PATIENT
    message = "Access denied. This endpoint requires patient role."
