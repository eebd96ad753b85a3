"""
WaveService: pallet-wave creation, listing and the status workflow.
WaveNotifier: carrier recipient resolution + email for notify-worthy edges.

Flow:  create_wave → (staff) bozza→inviata → (carrier) inviata→in_corso → ...
                          │                         │
                          └── assigned email        └── accepted email
Notification runs after the status commit, as a Celery task; its failures
are logged and never reach the caller.
"""

import logging
from datetime import date

from django.conf import settings
from django.db import transaction, DatabaseError
from django.db.models import Sum
from django.utils import timezone
from django.utils.dateparse import parse_date
from rest_framework import status

from apps.core.errors import ServiceError, db_error
from apps.authentication.access import (
    Access, ANONYMOUS, CARRIER, resolve_actor, require_staff, require_carrier,
)
from apps.authentication.models import normalize_email
from apps.notifications.service import NotificationService, normalize_recipients
from apps.shipments.models import Shipment
from .models import PalletWave, CarrierUser, WaveStatus
from .procedures import ProcedureError, create_pallet_wave, get_pallets_pool
from .workflow import is_transition_allowed, notification_for, ASSIGNED, ACCEPTED

logger = logging.getLogger("spst.pallets")

SUBJECTS = {
    ASSIGNED: "SPST • Nuova wave assegnata — {code}",
    ACCEPTED: "SPST • Wave accettata — {code}",
}
TEMPLATES = {
    ASSIGNED: "wave_assigned.html",
    ACCEPTED: "wave_accepted.html",
}


def _pickup_day(value):
    """date, or None when the value is not a real calendar day."""
    if isinstance(value, date):
        return value
    try:
        return parse_date(str(value))
    except ValueError:
        return None


class WaveNotifier:
    """Emails every enabled user of the wave's carrier."""

    def __init__(self, notification_service=None):
        self.notifier = notification_service or NotificationService()

    def recipients(self, wave: PalletWave) -> list:
        emails = (
            CarrierUser.objects
            .filter(carrier_id=wave.carrier_id, enabled=True, user__is_active=True)
            .values_list("user__email", flat=True)
        )
        return normalize_recipients(emails)

    def aggregates(self, wave: PalletWave) -> dict:
        shipments = Shipment.objects.filter(wave_items__wave=wave)
        return {
            "shipments_count": shipments.count(),
            "pallets_count":   shipments.aggregate(n=Sum("colli_n"))["n"] or 0,
        }

    def wave_url(self, wave: PalletWave) -> str:
        return f"{settings.PUBLIC_APP_URL.rstrip('/')}/carrier/waves/{wave.id}"

    def send(self, wave_id, kind: str) -> bool:
        if kind not in TEMPLATES:
            raise ValueError(f"Unknown wave notification: {kind}")
        wave = PalletWave.objects.select_related("carrier").filter(pk=wave_id).first()
        if wave is None:
            logger.warning("Wave %s vanished before %s notification", wave_id, kind)
            return False

        to = self.recipients(wave)
        if not to:
            logger.warning("Wave %s: no enabled carrier users for %s", wave.code, wave.carrier.name)
            return False

        context = {
            "wave":     wave,
            "wave_url": self.wave_url(wave),
            "app_url":  settings.PUBLIC_APP_URL.rstrip("/"),
            **self.aggregates(wave),
        }
        subject = SUBJECTS[kind].format(code=wave.code)
        context["subject"] = subject
        return self.notifier.send_template(to, subject, TEMPLATES[kind], context)

    def dispatch(self, wave_id, kind: str) -> None:
        """Queue the email after the status commit."""
        from apps.pallets.tasks import notify_wave_transition
        notify_wave_transition.delay(str(wave_id), kind)


class WaveService:
    """
    Wave orchestration. Dependencies are injected so they can be swapped in tests.
    """

    def __init__(self, notifier=None, create_procedure=None, pool_procedure=None):
        self.notifier         = notifier or WaveNotifier()
        self.create_procedure = create_procedure or create_pallet_wave
        self.pool_procedure   = pool_procedure or get_pallets_pool

    # ── Create ────────────────────────────────────────────────────────────────
    def create_wave(self, user, shipment_ids, planned_pickup_date, carrier_id,
                    pickup_window=None, notes=None) -> dict:
        staff = require_staff(user)
        if not staff.ok:
            raise ServiceError(staff.error, staff.status)

        if not isinstance(shipment_ids, (list, tuple)) or not shipment_ids:
            raise ServiceError("shipment_ids_required")
        if not planned_pickup_date or not carrier_id:
            raise ServiceError("planned_pickup_date_and_carrier_id_required")
        if _pickup_day(planned_pickup_date) is None:
            raise ServiceError("INVALID_PICKUP_DATE", details=str(planned_pickup_date))

        try:
            wave_id = self.create_procedure(
                shipment_ids, planned_pickup_date, pickup_window, notes, carrier_id, user,
            )
        except ProcedureError as exc:
            if exc.sentinel == "MIN_PALLETS_REQUIRED":
                logger.info("Wave rejected below minimum pallets: %s", exc.detail)
                raise ServiceError("MIN_6_PALLETS_REQUIRED")
            logger.error("create_pallet_wave rejected: %s %s", exc.sentinel, exc.detail)
            raise ServiceError("DB_ERROR", status.HTTP_500_INTERNAL_SERVER_ERROR,
                               details=f"{exc.sentinel}: {exc.detail}" if exc.detail else exc.sentinel)
        except DatabaseError as exc:
            raise db_error(exc, "create_pallet_wave")

        return {"wave_id": str(wave_id)}

    # ── Reads ─────────────────────────────────────────────────────────────────
    def visible_waves(self, actor: Access):
        qs = PalletWave.objects.select_related("carrier")
        if actor.is_staff:
            return qs
        if actor.kind == CARRIER:
            return qs.filter(carrier_id__in=actor.carrier_ids)
        return qs.none()

    def list_waves(self, user):
        actor = resolve_actor(user)
        if actor.kind == ANONYMOUS:
            raise ServiceError(actor.error, actor.status)
        return self.visible_waves(actor)

    def get_wave(self, wave_id, user) -> PalletWave:
        """Absent and not-yours are the same NOT_FOUND."""
        actor = resolve_actor(user)
        if actor.kind == ANONYMOUS:
            raise ServiceError(actor.error, actor.status)
        wave = (
            self.visible_waves(actor)
            .prefetch_related("items__shipment__packages")
            .filter(pk=wave_id)
            .first()
        )
        if wave is None:
            raise ServiceError("NOT_FOUND", status.HTTP_404_NOT_FOUND)
        return wave

    def pool(self, user) -> list:
        staff = require_staff(user)
        if not staff.ok:
            raise ServiceError(staff.error, staff.status)
        return self.pool_procedure()

    # ── Status workflow ───────────────────────────────────────────────────────
    def set_wave_status(self, wave_id, requested, user) -> dict:
        actor = resolve_actor(user)
        if actor.kind == ANONYMOUS:
            raise ServiceError("UNAUTHENTICATED", status.HTTP_401_UNAUTHORIZED)

        wave = PalletWave.objects.filter(pk=wave_id).first()
        if wave is None:
            raise ServiceError("NOT_FOUND", status.HTTP_404_NOT_FOUND)

        if actor.kind == CARRIER:
            link = require_carrier(user, wave.carrier_id)
            if not link.ok:
                raise ServiceError(link.error, link.status)
        if not is_transition_allowed(actor.kind, wave.status, requested):
            raise ServiceError("FORBIDDEN", status.HTTP_403_FORBIDDEN)

        target = WaveStatus.parse(requested)
        if target is None:
            raise ServiceError("INVALID_STATUS", details={"allowed": list(WaveStatus.values)})

        previous = wave.status
        try:
            with transaction.atomic():
                PalletWave.objects.filter(pk=wave.pk).update(status=target, updated_at=timezone.now())
        except DatabaseError as exc:
            raise db_error(exc, f"set_wave_status {wave.code}")

        logger.info("Wave %s: %s → %s by %s %s",
                    wave.code, previous, target, actor.kind, normalize_email(user.email))

        kind = notification_for(actor.kind, previous, target)
        if kind:
            try:
                self.notifier.dispatch(wave.pk, kind)
            except Exception as exc:
                logger.warning("Wave %s %s notification failed: %s", wave.code, kind, exc)
        return {"ok": True}
