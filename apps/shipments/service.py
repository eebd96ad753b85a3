"""
ShipmentService: the write side of the Shipment Store.

  create_shipment   → human_id with unique-collision retry, packages, booked email
  replace_packages  → delete-all / insert-all + totals recompute, one transaction
  set_status        → closed enum, staff only
  update_tracking   → carrier / tracking_code patch
  attach_document   → storage upload into one of the attachment slots
  save_shipper_defaults → sender block that prefills bookings sent without one
"""

import logging
from decimal import Decimal, InvalidOperation

from django.conf import settings
from django.core.files.storage import default_storage
from django.db import transaction, IntegrityError, DatabaseError
from django.utils import timezone
from django.utils.text import get_valid_filename
from rest_framework import status

from apps.core.errors import ServiceError, db_error
from apps.authentication.access import Access, can_access_owned
from apps.authentication.models import User, normalize_email
from apps.notifications.service import NotificationService
from .models import Shipment, Package, ShipperDefaults, ATTACHMENT_SLOTS, PARTY_FIELDS

logger = logging.getLogger("spst.shipments")

HUMAN_ID_ATTEMPTS = 6
SIDES = ("lato1_cm", "lato2_cm", "lato3_cm")


def _to_decimal(value):
    if value is None or value == "":
        return None
    try:
        return Decimal(str(value).replace(",", "."))
    except InvalidOperation:
        return None


def clean_package_rows(rows) -> list:
    """Keep rows with a positive weight and three positive sides."""
    cleaned = []
    for row in rows or []:
        if not isinstance(row, dict):
            continue
        weight = _to_decimal(row.get("peso_reale_kg"))
        sides  = [_to_decimal(row.get(side)) for side in SIDES]
        if weight is None or weight <= 0 or any(s is None or s <= 0 for s in sides):
            continue
        cleaned.append({
            "contenuto":     str(row.get("contenuto") or "")[:255],
            "peso_reale_kg": weight.quantize(Decimal("0.01")),
            "lato1_cm":      sides[0],
            "lato2_cm":      sides[1],
            "lato3_cm":      sides[2],
        })
    return cleaned


def _has_content(party) -> bool:
    return isinstance(party, dict) and any(str(v or "").strip() for v in party.values())


def clean_party(party) -> dict:
    party = party if isinstance(party, dict) else {}
    return {key: str(party.get(key) or "").strip() for key in PARTY_FIELDS}


def next_human_id(day, offset: int = 0, model=Shipment, code: str = "SP") -> str:
    """SP-YYYY-MM-DD-NNNNN, sequence per calendar day (Q- for quotes)."""
    prefix = f"{code}-{day:%Y-%m-%d}-"
    taken  = model.objects.filter(human_id__startswith=prefix).count()
    return f"{prefix}{taken + 1 + offset:05d}"


class ShipmentService:
    """
    Dependencies are injected so they can be swapped in tests.
    """

    def __init__(self, storage=None, notification_service=None):
        self.storage  = storage or default_storage
        self.notifier = notification_service or NotificationService()

    # ── Reads ─────────────────────────────────────────────────────────────────
    def visible_queryset(self, actor: Access):
        qs = Shipment.objects.all()
        if actor.is_staff:
            return qs
        return qs.filter(email_norm=actor.email) if actor.email else qs.none()

    def get_visible(self, shipment_id, actor: Access) -> Shipment:
        """Owner or staff. Absent and hidden are the same NOT_FOUND."""
        shipment = Shipment.objects.filter(pk=shipment_id).first()
        if shipment is None or not can_access_owned(actor, shipment.email_norm):
            raise ServiceError("NOT_FOUND", status.HTTP_404_NOT_FOUND)
        return shipment

    def get(self, shipment_id) -> Shipment:
        shipment = Shipment.objects.filter(pk=shipment_id).first()
        if shipment is None:
            raise ServiceError("NOT_FOUND", status.HTTP_404_NOT_FOUND)
        return shipment

    # ── Create ────────────────────────────────────────────────────────────────
    def create_shipment(self, actor: Access, data: dict) -> Shipment:
        data = dict(data)
        colli = clean_package_rows(data.pop("colli", []))
        if not colli:
            raise ServiceError("NO_VALID_PACKAGES")

        # Customers always book for themselves
        requested_email = normalize_email(data.pop("email_cliente", ""))
        email = requested_email if actor.is_staff else actor.email
        if not email:
            raise ServiceError("EMAIL_CLIENTE_REQUIRED")
        customer = actor.user if not actor.is_staff else User.objects.filter(email=email).first()

        if not _has_content(data.get("mittente")):
            saved = self.get_shipper_defaults(email)
            if saved is None:
                raise ServiceError("MITTENTE_REQUIRED")
            data["mittente"] = saved

        today = timezone.localdate()
        last_error = None
        for attempt in range(HUMAN_ID_ATTEMPTS):
            try:
                with transaction.atomic():
                    shipment = Shipment.objects.create(
                        human_id      = next_human_id(today, offset=attempt),
                        customer      = customer,
                        email_cliente = email,
                        **data,
                    )
                    self._write_packages(shipment, colli)
                break
            except IntegrityError as exc:
                last_error = exc
                logger.info("human_id collision on attempt %d: %s", attempt + 1, exc)
        else:
            logger.error("Shipment insert failed after %d attempts: %s", HUMAN_ID_ATTEMPTS, last_error)
            raise ServiceError("INSERT_FAILED", status.HTTP_500_INTERNAL_SERVER_ERROR,
                               details=str(last_error))

        logger.info("Shipment %s created for %s", shipment.human_id, email)
        self._queue_booked_email(shipment)
        return shipment

    def _queue_booked_email(self, shipment):
        from apps.shipments.tasks import send_shipment_booked_email
        try:
            send_shipment_booked_email.delay(str(shipment.id))
        except Exception as exc:
            logger.warning("Could not queue booked email for %s: %s", shipment.human_id, exc)

    # ── Packages ──────────────────────────────────────────────────────────────
    def _write_packages(self, shipment: Shipment, rows: list) -> list:
        shipment.packages.all().delete()
        packages = Package.objects.bulk_create(
            [Package(shipment=shipment, **row) for row in rows]
        )
        shipment.colli_n       = len(rows)
        shipment.peso_reale_kg = sum((row["peso_reale_kg"] for row in rows), Decimal("0"))
        shipment.save(update_fields=["colli_n", "peso_reale_kg", "updated_at"])
        return packages

    def replace_packages(self, shipment: Shipment, rows) -> list:
        cleaned = clean_package_rows(rows)
        if not cleaned:
            raise ServiceError("NO_VALID_PACKAGES")
        try:
            with transaction.atomic():
                packages = self._write_packages(shipment, cleaned)
        except DatabaseError as exc:
            raise db_error(exc, f"replace_packages {shipment.human_id}")
        logger.info("Packages replaced for %s: %d colli", shipment.human_id, len(cleaned))
        return packages

    # ── Staff mutations ───────────────────────────────────────────────────────
    def set_status(self, shipment_id, value) -> Shipment:
        requested = str(value or "").strip().upper()
        if requested not in Shipment.Status.values:
            raise ServiceError("INVALID_STATUS", details={"allowed": list(Shipment.Status.values)})

        shipment = self.get(shipment_id)
        try:
            updated = Shipment.objects.filter(pk=shipment.pk).update(
                status=requested, updated_at=timezone.now()
            )
        except DatabaseError as exc:
            logger.error("Status update failed for %s: %s", shipment.human_id, exc)
            raise ServiceError("UPDATE_FAILED", status.HTTP_500_INTERNAL_SERVER_ERROR, details=str(exc))
        if not updated:
            raise ServiceError("UPDATE_FAILED", status.HTTP_500_INTERNAL_SERVER_ERROR)

        shipment.refresh_from_db()
        logger.info("Shipment %s status → %s", shipment.human_id, requested)
        return shipment

    def update_tracking(self, shipment_id, patch: dict) -> Shipment:
        fields = [f for f in ("carrier", "tracking_code") if f in patch]
        if not fields:
            raise ServiceError("EMPTY_PATCH")

        shipment = self.get(shipment_id)
        for f in fields:
            setattr(shipment, f, (patch[f] or "").strip())
        try:
            shipment.save(update_fields=fields + ["updated_at"])
        except DatabaseError as exc:
            raise db_error(exc, f"update_tracking {shipment.human_id}")
        return shipment

    # ── Attachments ───────────────────────────────────────────────────────────
    def attach_document(self, shipment: Shipment, slot, upload) -> dict:
        if not upload or not slot:
            raise ServiceError("FILE_OR_TYPE_MISSING")
        if slot not in ATTACHMENT_SLOTS:
            raise ServiceError("INVALID_ATTACHMENT_TYPE", details={"allowed": list(ATTACHMENT_SLOTS)})

        file_name = get_valid_filename(upload.name or slot)
        stamp     = timezone.now().strftime("%Y%m%d%H%M%S")
        path      = f"shipments/{shipment.id}/{slot}/{stamp}_{file_name}"

        stored = self.storage.save(path, upload)
        entry  = {"url": self.storage.url(stored), "file_name": upload.name}

        attachments = dict(shipment.attachments or {})
        attachments[slot] = entry
        shipment.attachments = attachments
        shipment.save(update_fields=["attachments", "updated_at"])
        logger.info("Attachment %s uploaded for %s", slot, shipment.human_id)
        return entry

    # ── Sender defaults ───────────────────────────────────────────────────────
    def get_shipper_defaults(self, email):
        """Saved sender block for the email, None when nothing is saved."""
        row = ShipperDefaults.objects.filter(email_norm=normalize_email(email)).first()
        if row is None or not _has_content(row.mittente):
            return None
        return clean_party(row.mittente)

    def save_shipper_defaults(self, email, mittente) -> dict:
        email = normalize_email(email)
        if not email:
            raise ServiceError("EMAIL_REQUIRED")
        block = clean_party(mittente)
        try:
            ShipperDefaults.objects.update_or_create(email_norm=email, defaults={"mittente": block})
        except DatabaseError as exc:
            raise db_error(exc, f"save_shipper_defaults {email}")
        logger.info("Sender defaults saved for %s", email)
        return block if _has_content(block) else None

    # ── Emails ────────────────────────────────────────────────────────────────
    def _email_context(self, shipment):
        return {"shipment": shipment, "app_url": settings.PUBLIC_APP_URL.rstrip("/")}

    def send_booked_email(self, shipment: Shipment) -> bool:
        return self.notifier.send_template(
            shipment.email_norm,
            f"SPST • Spedizione confermata — {shipment.human_id}",
            "shipment_booked.html",
            self._email_context(shipment),
        )

    def send_dispatched_email(self, shipment: Shipment) -> bool:
        if not shipment.email_norm:
            raise ServiceError("MISSING_RECIPIENT")
        return self.notifier.send_template(
            shipment.email_norm,
            f"SPST • Spedizione evasa — {shipment.human_id}",
            "shipment_dispatched.html",
            self._email_context(shipment),
        )
