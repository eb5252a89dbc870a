"""
Custom permission classes for role based access control.
"""
from rest_framework.permissions import BasePermission, SAFE_METHODS

from clinic.models import User

PROFESSIONAL_ROLES = {User.ROLE_PHARMACIST, User.ROLE_DOCTOR, User.ROLE_NUTRITIONIST}


def _role(request):
    user = getattr(request, "user", None)
    if not (user and user.is_authenticated):
        return None
    return getattr(user, "role", None)


class IsAdminRole(BasePermission):
    """Allow access only to users with the admin role."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _role(request) == User.ROLE_ADMIN


class IsPatientRole(BasePermission):
    """Allow access only to users with the patient role."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _role(request) == User.ROLE_PATIENT


class IsProfessional(BasePermission):
    """Pharmacist, doctor or nutritionist."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _role(request) in PROFESSIONAL_ROLES


class IsAdminOrReadOnly(BasePermission):
    """Anyone may read; only admins may write."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return request.method in SAFE_METHODS or _role(request) == User.ROLE_ADMIN
