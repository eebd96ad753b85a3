"""
US duties collection: pricing, Stripe checkout and webhook handling.

  compute_totals   → shipping (bottle table) + 15% duties, grossed up for the card fee
  create_checkout  → DutiesPayment PENDING + Stripe session URL
  handle_event     → checkout.session.completed marks PAID, confirmation emails queued
"""

import logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from django.conf import settings
from django.db import transaction
from django.utils import timezone
from rest_framework import status

from apps.core.errors import ServiceError
from apps.notifications.service import NotificationService
from apps.shipments.models import Shipment
from .models import DutiesPayment, StripeError, get_payment_adapter

logger = logging.getLogger("spst.payments")

CENTS = Decimal("0.01")
CHECKOUT_COMPLETED = "checkout.session.completed"


def _money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def compute_totals(bottle_count, goods_value) -> dict:
    """
    total = (shipping + duties + fixed fee) / (1 - percent fee), to the cent,
    so that what is left after the card fee covers shipping + duties.
    """
    table = {int(k): v for k, v in settings.USA_SHIPPING_TABLE.items()}
    try:
        bottles = int(bottle_count)
    except (TypeError, ValueError):
        raise ServiceError("UNSUPPORTED_BOTTLE_COUNT")
    if bottles not in table:
        raise ServiceError("UNSUPPORTED_BOTTLE_COUNT", details={"allowed": sorted(table)})
    try:
        goods = _money(goods_value)
    except (InvalidOperation, TypeError, ValueError):
        raise ServiceError("INVALID_GOODS_VALUE")
    if goods < 0:
        raise ServiceError("INVALID_GOODS_VALUE")

    shipping = _money(table[bottles])
    duties   = _money(goods * Decimal(str(settings.USA_DUTIES_RATE)))
    base     = shipping + duties
    percent  = Decimal(str(settings.STRIPE_PERCENT))
    fixed    = Decimal(str(settings.STRIPE_FIXED))
    total    = _money((base + fixed) / (1 - percent))
    return {
        "bottle_count": bottles,
        "goods_value":  goods,
        "shipping":     shipping,
        "duties":       duties,
        "base_charge":  base,
        "stripe_fee":   total - base,
        "total":        total,
    }


class DutiesService:

    def __init__(self, adapter=None, notification_service=None):
        self._adapter  = adapter
        self._notifier = notification_service

    @property
    def adapter(self):
        return self._adapter or get_payment_adapter(settings.PAYMENT_PROVIDER)

    @property
    def notifier(self):
        if self._notifier is not None:
            return self._notifier
        sender = f"SPST <{settings.DUTIES_FROM_EMAIL}>" if settings.DUTIES_FROM_EMAIL else None
        return NotificationService(sender=sender)

    # ── Checkout ──────────────────────────────────────────────────────────────
    def create_checkout(self, data: dict) -> dict:
        customer_email = (data.get("customer_email") or "").strip()
        has_breakdown  = data.get("bottle_count") is not None and data.get("goods_value") is not None
        if not customer_email or not (has_breakdown or data.get("amount")):
            raise ServiceError("MISSING_FIELDS")

        adapter = self.adapter
        if not adapter.secret_key:
            logger.error("STRIPE_SECRET_KEY not configured")
            raise ServiceError("SERVER_MISCONFIG", status.HTTP_500_INTERNAL_SERVER_ERROR)

        if has_breakdown:
            totals = compute_totals(data["bottle_count"], data["goods_value"])
            amounts = {k: totals[k] for k in ("bottle_count", "goods_value", "shipping", "duties", "stripe_fee", "total")}
        else:
            # Pre-priced charge: the amount is the base, nothing broken down
            amounts = {"shipping": _money(data["amount"]), "total": _money(data["amount"])}

        shipment = None
        if data.get("shipment_id"):
            shipment = Shipment.objects.filter(pk=data["shipment_id"]).first()

        payment = DutiesPayment.objects.create(
            shipment       = shipment,
            winery_name    = data.get("winery_name") or "",
            winery_email   = data.get("winery_email") or "",
            customer_email = customer_email,
            **amounts,
        )

        base_url = settings.PUBLIC_APP_URL.rstrip("/")
        try:
            session = adapter.create_checkout_session(
                payment,
                success_url=f"{base_url}/usa-shipping-pay/success?session_id={{CHECKOUT_SESSION_ID}}",
                cancel_url=f"{base_url}/usa-shipping-pay/cancel",
                description=data.get("description") or "",
            )
        except StripeError as exc:
            logger.error("Stripe checkout failed for payment %s: %s", payment.id, exc)
            payment.status = DutiesPayment.Status.FAILED
            payment.save(update_fields=["status", "updated_at"])
            raise ServiceError("CHECKOUT_FAILED", status.HTTP_502_BAD_GATEWAY, details=str(exc))

        payment.checkout_session_id = session["id"] or ""
        payment.save(update_fields=["checkout_session_id", "updated_at"])
        return {"url": session["url"], "payment_id": str(payment.id)}

    # ── Webhook ───────────────────────────────────────────────────────────────
    def find_payment(self, session: dict):
        metadata   = session.get("metadata") or {}
        payment_id = metadata.get("payment_id") or session.get("client_reference_id")
        qs = DutiesPayment.objects.all()
        if payment_id:
            payment = qs.filter(pk=payment_id).first()
            if payment:
                return payment
        if session.get("id"):
            return qs.filter(checkout_session_id=session["id"]).first()
        return None

    def handle_event(self, event: dict) -> bool:
        """Returns True when the event changed a payment."""
        if event.get("type") != CHECKOUT_COMPLETED:
            logger.info("Stripe event %s ignored", event.get("type"))
            return False

        session = (event.get("data") or {}).get("object") or {}
        payment = self.find_payment(session)
        if payment is None:
            logger.warning("checkout.session.completed for unknown session %s", session.get("id"))
            return False
        if payment.status == DutiesPayment.Status.PAID:
            return False

        with transaction.atomic():
            payment.status  = DutiesPayment.Status.PAID
            payment.paid_at = timezone.now()
            if session.get("id"):
                payment.checkout_session_id = session["id"]
            payment.save(update_fields=["status", "paid_at", "checkout_session_id", "updated_at"])

        logger.info("Duties payment %s PAID (%s %s)", payment.id, payment.total, payment.currency)
        self._queue_confirmation(payment)
        return True

    def _queue_confirmation(self, payment):
        from apps.payments.tasks import send_duties_confirmation
        try:
            send_duties_confirmation.delay(str(payment.id))
        except Exception as exc:
            logger.warning("Could not queue duties confirmation for %s: %s", payment.id, exc)

    # ── Emails ────────────────────────────────────────────────────────────────
    def send_confirmations(self, payment: DutiesPayment) -> dict:
        notifier = self.notifier
        context  = {"payment": payment}
        return {
            "customer": notifier.send_template(
                payment.customer_email,
                "Your payment has been received – SPST US Wine Shipping",
                "duties_customer.html",
                context,
            ),
            "winery": notifier.send_template(
                payment.winery_email,
                "Pagamento trasporto + dazi confermato (SPST – USA)",
                "duties_winery.html",
                context,
            ),
        }
