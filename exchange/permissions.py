"""
Role based permission classes for the exchange API.

Views use these for the coarse role gate; ownership checks (requester
vs. provider) live in the lifecycle service where the request row is
loaded.
"""
from rest_framework.permissions import BasePermission

from exchange.models import User
from exchange.services.principal import Principal, principal_for_user


class IsHospitalRole(BasePermission):
    """Allow access only to hospital accounts."""
    message = 'Access denied.'

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated and getattr(user, "role", None) == User.ROLE_HOSPITAL)


class IsAdminRole(BasePermission):
    """Allow access only to platform administrators."""
    message = 'Access denied.'

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated and getattr(user, "role", None) == User.ROLE_ADMIN)


def get_principal(request) -> Principal:
    """Resolve the principal for a DRF request, caching it on the request."""
    principal = getattr(request, '_exchange_principal', None)
    if principal is None:
        principal = principal_for_user(getattr(request, 'user', None))
        request._exchange_principal = principal
    return principal
