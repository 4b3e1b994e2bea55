"""
Principals and the role checks of the authorization gate.

A :class:`Principal` is resolved once from the authenticated user and
passed explicitly into every service call; services never read the
request or any ambient session state.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from exchange.exceptions import Forbidden, Unauthenticated
from exchange.models import Hospital, User


@dataclass(frozen=True)
class Principal:
    id: int
    role: str
    name: str
    hospital_id: Optional[int] = None

    @property
    def is_hospital(self) -> bool:
        return self.role == User.ROLE_HOSPITAL and self.hospital_id is not None

    @property
    def is_admin(self) -> bool:
        return self.role == User.ROLE_ADMIN


def principal_for_user(user) -> Principal:
    """Build the principal for ``user`` or raise :class:`Unauthenticated`."""
    if user is None or not getattr(user, 'is_authenticated', False):
        raise Unauthenticated()
    hospital_id = None
    name = user.get_full_name() or user.username
    if user.role == User.ROLE_HOSPITAL:
        hospital = Hospital.objects.filter(user_id=user.pk).only('id', 'name').first()
        if hospital is not None:
            hospital_id = hospital.id
            name = hospital.name
    return Principal(id=user.pk, role=user.role, name=name, hospital_id=hospital_id)


def require_principal(principal: Optional[Principal]) -> Principal:
    if principal is None:
        raise Unauthenticated()
    return principal


def require_hospital(principal: Optional[Principal]) -> Principal:
    """Only hospital principals may take part in the request lifecycle."""
    principal = require_principal(principal)
    if not principal.is_hospital:
        raise Forbidden('Access denied.')
    return principal


def require_admin(principal: Optional[Principal]) -> Principal:
    principal = require_principal(principal)
    if not principal.is_admin:
        raise Forbidden('Access denied.')
    return principal
