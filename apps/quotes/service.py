"""
QuoteService: quote requests, staff-priced options and acceptance.

  create_quote      → Q-YYYY-MM-DD-NNNNN, status IN LAVORAZIONE
  upsert_option     → staff pricing, total = freight + customs + extras when omitted
  send_public_link  → public_token + status INVIATA + email to the customer
  accept            → one transaction: quote, chosen option, siblings rifiutata
"""

import logging
import secrets
import uuid
from decimal import Decimal

from django.conf import settings
from django.db import transaction, IntegrityError, DatabaseError
from django.utils import timezone
from rest_framework import status

from apps.core.errors import ServiceError, db_error
from apps.authentication.access import Access, can_access_owned
from apps.authentication.models import User, normalize_email
from apps.notifications.service import NotificationService
from apps.shipments.service import HUMAN_ID_ATTEMPTS, next_human_id
from .models import Quote, QuoteOption

logger = logging.getLogger("spst.quotes")

OPTION_FIELDS = (
    "label", "carrier", "service_name", "transit_time",
    "freight_price", "customs_price", "extras", "total_price", "currency",
    "public_notes", "visible_to_client",
    "internal_cost", "internal_profit", "internal_notes", "status",
)
PRICING_FIELDS = ("freight_price", "customs_price", "extras")


def compute_option_total(freight, customs, extras):
    """Sum of the priced parts, None when nothing is priced."""
    extras_total = sum((Decimal(str(e.get("amount") or 0)) for e in extras or []), Decimal("0"))
    parts = [p for p in (freight, customs) if p is not None]
    if not parts and not extras_total:
        return None
    return sum(parts, Decimal("0")) + extras_total


def _parse_uuid(value):
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None


class QuoteService:

    def __init__(self, notification_service=None):
        self.notifier = notification_service or NotificationService()

    # ── Reads ─────────────────────────────────────────────────────────────────
    def visible_queryset(self, actor: Access):
        qs = Quote.objects.all()
        if actor.is_staff:
            return qs
        return qs.filter(email_norm=actor.email) if actor.email else qs.none()

    def get(self, quote_id) -> Quote:
        quote = Quote.objects.filter(pk=quote_id).first()
        if quote is None:
            raise ServiceError("QUOTE_NOT_FOUND", status.HTTP_404_NOT_FOUND)
        return quote

    def get_for_customer(self, quote_id, actor: Access) -> Quote:
        """Owner or staff. Absent and hidden are the same NOT_FOUND."""
        quote = Quote.objects.filter(pk=quote_id).first()
        if quote is None or not can_access_owned(actor, quote.email_norm):
            raise ServiceError("NOT_FOUND", status.HTTP_404_NOT_FOUND)
        return quote

    def get_by_token(self, token) -> Quote:
        token = str(token or "").strip()
        if not token:
            raise ServiceError("MISSING_TOKEN")
        quote = Quote.objects.filter(public_token=token).first()
        if quote is None:
            raise ServiceError("QUOTE_NOT_FOUND", status.HTTP_404_NOT_FOUND)
        return quote

    # ── Create ────────────────────────────────────────────────────────────────
    def create_quote(self, actor: Access, data: dict) -> dict:
        data = dict(data)
        requested_email = normalize_email(data.pop("email_cliente", ""))
        email = requested_email if actor.is_staff else actor.email
        if not email:
            raise ServiceError("EMAIL_CLIENTE_REQUIRED")
        customer = actor.user if not actor.is_staff else User.objects.filter(email=email).first()

        today = timezone.localdate()
        last_error = None
        for attempt in range(HUMAN_ID_ATTEMPTS):
            try:
                with transaction.atomic():
                    quote = Quote.objects.create(
                        human_id      = next_human_id(today, offset=attempt, model=Quote, code="Q"),
                        customer      = customer,
                        email_cliente = email,
                        **data,
                    )
                break
            except IntegrityError as exc:
                last_error = exc
                logger.info("Quote human_id collision on attempt %d: %s", attempt + 1, exc)
        else:
            raise db_error(last_error, "create_quote")

        logger.info("Quote %s requested by %s", quote.human_id, email)
        return {"ok": True, "id": str(quote.id), "displayId": quote.human_id}

    # ── Staff: options ────────────────────────────────────────────────────────
    def upsert_option(self, quote: Quote, data: dict) -> QuoteOption:
        data = dict(data)
        option_id = data.pop("optionId", None)
        values = {f: data[f] for f in OPTION_FIELDS if f in data}
        if values.get("extras") is None:
            values.pop("extras", None)
        else:
            values["extras"] = [
                {"label": e["label"], "amount": float(e["amount"])} for e in values["extras"]
            ]
        # Acceptance and rejection only happen through accept()
        if values.get("status", QuoteOption.Status.BOZZA) != QuoteOption.Status.BOZZA:
            raise ServiceError("INVALID_OPTION_STATUS", details={"allowed": [QuoteOption.Status.BOZZA]})

        option = None
        if option_id:
            option = quote.options.filter(pk=option_id).first()
            if option is None:
                raise ServiceError("OPTION_NOT_FOUND", status.HTTP_404_NOT_FOUND)

        priced = any(f in values for f in PRICING_FIELDS)
        if values.get("total_price") is None and (option is None or priced):
            merged = {f: values.get(f, getattr(option, f, None)) for f in PRICING_FIELDS}
            values["total_price"] = compute_option_total(
                merged["freight_price"], merged["customs_price"], merged["extras"],
            )

        try:
            if option is not None:
                for f, v in values.items():
                    setattr(option, f, v)
                option.save()
            else:
                option = QuoteOption.objects.create(quote=quote, **values)
        except DatabaseError as exc:
            raise db_error(exc, f"upsert_option {quote.human_id}")

        logger.info("Option %s saved on quote %s", option.id, quote.human_id)
        return option

    def delete_option(self, option_id):
        option = QuoteOption.objects.select_related("quote").filter(pk=option_id).first()
        if option is None:
            raise ServiceError("OPTION_NOT_FOUND", status.HTTP_404_NOT_FOUND)
        if option.quote.accepted_option_id == option.id:
            raise ServiceError("OPTION_ACCEPTED", status.HTTP_409_CONFLICT)
        option.delete()
        logger.info("Option %s deleted from quote %s", option_id, option.quote.human_id)

    # ── Staff: share ──────────────────────────────────────────────────────────
    def public_url(self, quote: Quote) -> str:
        return f"{settings.PUBLIC_APP_URL.rstrip('/')}/quote/{quote.public_token}"

    def send_public_link(self, quote: Quote) -> dict:
        if not quote.email_norm:
            raise ServiceError("MISSING_CUSTOMER_EMAIL")

        now = timezone.now()
        try:
            with transaction.atomic():
                if not quote.public_token:
                    quote.public_token = secrets.token_urlsafe(24)
                if quote.status != Quote.Status.ACCETTATA:
                    quote.status = Quote.Status.INVIATA
                quote.save(update_fields=["public_token", "status", "updated_at"])
                quote.options.filter(visible_to_client=True, sent_at__isnull=True).update(sent_at=now)
        except DatabaseError as exc:
            raise db_error(exc, f"send_public_link {quote.human_id}")

        public_url = self.public_url(quote)
        sent = self.notifier.send_template(
            quote.email_norm,
            f"SPST • Quotazione pronta — {quote.human_id}",
            "quote_link.html",
            {
                "quote":         quote,
                "options_count": quote.options.filter(visible_to_client=True).count(),
                "public_url":    public_url,
            },
        )
        logger.info("Public link for %s sent to %s (delivered=%s)", quote.human_id, quote.email_norm, sent)
        return {"ok": True, "to": quote.email_norm, "publicUrl": public_url, "sent": sent}

    # ── Acceptance ────────────────────────────────────────────────────────────
    def accept(self, quote: Quote, option_id, require_visible: bool = False) -> dict:
        """
        Accept one option. Replaying the accepted option is a no-op; a
        different option on an already accepted quote is a conflict.
        The public path only sees options marked visible_to_client.
        """
        if not option_id:
            raise ServiceError("MISSING_OPTION_ID")
        wanted = _parse_uuid(option_id)
        if wanted is None:
            raise ServiceError("OPTION_NOT_FOUND", status.HTTP_404_NOT_FOUND)

        try:
            with transaction.atomic():
                locked = Quote.objects.select_for_update().get(pk=quote.pk)
                if locked.accepted_option_id == wanted:
                    return {"ok": True, "alreadyAccepted": True, "accepted_option_id": str(wanted)}
                if locked.accepted_option_id:
                    raise ServiceError("QUOTE_ALREADY_ACCEPTED", status.HTTP_409_CONFLICT)

                options = locked.options.all()
                if require_visible:
                    options = options.filter(visible_to_client=True)
                option = options.filter(pk=wanted).first()
                if option is None:
                    raise ServiceError("OPTION_NOT_FOUND", status.HTTP_404_NOT_FOUND)

                now = timezone.now()
                locked.status = Quote.Status.ACCETTATA
                locked.accepted_option_id = option.id
                locked.save(update_fields=["status", "accepted_option_id", "updated_at"])
                QuoteOption.objects.filter(pk=option.pk).update(
                    status=QuoteOption.Status.ACCETTATA, accepted_at=now, updated_at=now,
                )
                locked.options.exclude(pk=option.pk).update(
                    status=QuoteOption.Status.RIFIUTATA, updated_at=now,
                )
        except DatabaseError as exc:
            raise db_error(exc, f"accept {quote.human_id}")

        logger.info("Quote %s accepted with option %s", quote.human_id, option.id)
        return {"ok": True, "accepted_option_id": str(option.id)}
