"""
Capability checks shared by every view.

All handlers go through one result type, Access, instead of each module
deciding "is this staff?" its own way. Resolution order:

  1. break-glass email allow-list (settings.BREAK_GLASS_EMAILS)
  2. enabled StaffUser row with role admin / staff / operator
  3. enabled CarrierUser rows (one user may drive for several carriers)
  4. any other authenticated user is a customer
"""

from dataclasses import dataclass, field

from django.conf import settings
from rest_framework import permissions, status

from apps.core.errors import error_response
from .models import StaffUser, normalize_email

STAFF     = "staff"
CARRIER   = "carrier"
CUSTOMER  = "customer"
ANONYMOUS = "anonymous"

STAFF_ROLES = (StaffUser.Role.ADMIN, StaffUser.Role.STAFF, StaffUser.Role.OPERATOR)


@dataclass(frozen=True)
class Access:
    ok: bool
    kind: str = ANONYMOUS
    user: object = None
    role: str = ""
    carrier_ids: tuple = field(default_factory=tuple)
    error: str = ""
    status: int = status.HTTP_200_OK

    @property
    def is_staff(self) -> bool:
        return self.ok and self.kind == STAFF

    @property
    def email(self) -> str:
        return normalize_email(getattr(self.user, "email", ""))

    def as_response(self):
        return error_response(self.error or "FORBIDDEN", self.status)


def _unauthenticated() -> Access:
    return Access(ok=False, error="UNAUTHENTICATED", status=status.HTTP_401_UNAUTHORIZED)


def _forbidden(actor: Access) -> Access:
    return Access(
        ok=False, kind=actor.kind, user=actor.user, role=actor.role,
        carrier_ids=actor.carrier_ids, error="FORBIDDEN", status=status.HTTP_403_FORBIDDEN,
    )


def is_break_glass(email) -> bool:
    allowed = {normalize_email(e) for e in getattr(settings, "BREAK_GLASS_EMAILS", [])}
    return normalize_email(email) in allowed


def resolve_actor(user) -> Access:
    """Classify an authenticated principal. Never raises."""
    if user is None or not getattr(user, "is_authenticated", False):
        return _unauthenticated()

    if is_break_glass(user.email):
        return Access(ok=True, kind=STAFF, user=user, role=StaffUser.Role.ADMIN)

    staff = StaffUser.objects.filter(user=user, enabled=True, role__in=STAFF_ROLES).first()
    if staff:
        return Access(ok=True, kind=STAFF, user=user, role=staff.role)

    from apps.pallets.models import CarrierUser

    links = list(
        CarrierUser.objects.filter(user=user, enabled=True).values_list("carrier_id", "role")
    )
    if links:
        return Access(
            ok=True, kind=CARRIER, user=user, role=links[0][1],
            carrier_ids=tuple(carrier_id for carrier_id, _ in links),
        )

    return Access(ok=True, kind=CUSTOMER, user=user)


def require_staff(user) -> Access:
    actor = resolve_actor(user)
    if actor.kind == ANONYMOUS:
        return actor
    return actor if actor.is_staff else _forbidden(actor)


def require_carrier(user, carrier_id) -> Access:
    """Caller must be an enabled user of this specific carrier."""
    actor = resolve_actor(user)
    if actor.kind == ANONYMOUS:
        return actor
    if actor.kind == CARRIER and carrier_id in actor.carrier_ids:
        return actor
    return _forbidden(actor)


def can_access_owned(actor: Access, owner_email) -> bool:
    """Staff see everything; customers only rows whose email matches theirs."""
    if actor.is_staff:
        return True
    return actor.ok and bool(actor.email) and actor.email == normalize_email(owner_email)


class IsStaff(permissions.BasePermission):
    """DRF permission built on require_staff."""

    def has_permission(self, request, view):
        return require_staff(request.user).ok
