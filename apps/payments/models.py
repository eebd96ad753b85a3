"""
Payment models + Stripe gateway adapter.
DutiesPayment records one US shipping + duties charge collected through a
Stripe Checkout session; the webhook flips it to PAID.
"""

import uuid
import hmac
import time
import hashlib
import logging
from decimal import Decimal, ROUND_HALF_UP

import requests
from django.db import models
from django.conf import settings

logger = logging.getLogger("spst.payments")

SIGNATURE_TOLERANCE_SECONDS = 300


# ── Model ─────────────────────────────────────────────────────────────────────
class DutiesPayment(models.Model):
    class Status(models.TextChoices):
        PENDING = "PENDING", "Pending"
        PAID    = "PAID",    "Paid"
        FAILED  = "FAILED",  "Failed"

    id       = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    shipment = models.ForeignKey(
        "shipments.Shipment", on_delete=models.SET_NULL, null=True, blank=True,
        related_name="duties_payments",
    )
    winery_name    = models.CharField(max_length=200, blank=True)
    winery_email   = models.EmailField(blank=True)
    customer_email = models.EmailField()
    bottle_count   = models.PositiveIntegerField(null=True, blank=True)
    goods_value    = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0"))

    shipping   = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0"))
    duties     = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0"))
    stripe_fee = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0"))
    total      = models.DecimalField(max_digits=12, decimal_places=2)
    currency   = models.CharField(max_length=3, default="EUR")

    checkout_session_id = models.CharField(max_length=255, blank=True, db_index=True)
    status     = models.CharField(max_length=8, choices=Status.choices, default=Status.PENDING)
    paid_at    = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes  = [models.Index(fields=["status"], name="duties_status_idx")]

    @property
    def base_amount(self) -> Decimal:
        return self.shipping + self.duties

    def __str__(self):
        return f"{self.customer_email} – {self.status} ({self.total} {self.currency})"


# ── Gateway Adapter Interface ──────────────────────────────────────────────────
class PaymentGatewayAdapter:
    """Abstract base: all gateways implement this interface."""

    def create_checkout_session(self, payment: DutiesPayment, success_url: str, cancel_url: str,
                                description: str = "") -> dict:
        raise NotImplementedError

    def verify_webhook_signature(self, payload: bytes, header: str) -> bool:
        raise NotImplementedError


class StripeError(Exception):
    pass


# ── Stripe ─────────────────────────────────────────────────────────────────────
class StripeAdapter(PaymentGatewayAdapter):
    """
    Stripe Checkout over the plain REST API.

    Sessions are created with form-encoded POSTs to /v1/checkout/sessions.
    Webhooks carry a Stripe-Signature header "t=<unix>,v1=<hex>[,v1=...]" where
    each v1 is HMAC-SHA256(secret, "<t>.<raw body>").
    """

    def __init__(self, secret_key=None, webhook_secret=None, base_url=None, timeout=10):
        self.secret_key     = settings.STRIPE_SECRET_KEY if secret_key is None else secret_key
        self.webhook_secret = settings.STRIPE_WEBHOOK_SECRET if webhook_secret is None else webhook_secret
        self.base_url       = (base_url or settings.STRIPE_API_BASE_URL).rstrip("/")
        self.timeout        = timeout

    def _form(self, payment: DutiesPayment, success_url: str, cancel_url: str, description: str) -> dict:
        cents = int((payment.total * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
        shipment_id = str(payment.shipment_id or "")
        metadata = {
            "type":           "duties",
            "shipmentId":     shipment_id,
            "baseAmount":     str(payment.base_amount),
            "payment_id":     str(payment.id),
            "winery_name":    payment.winery_name,
            "winery_email":   payment.winery_email,
            "customer_email": payment.customer_email,
            "bottle_count":   str(payment.bottle_count or 0),
            "goods_value":    str(payment.goods_value),
            "shipping":       str(payment.shipping),
            "duties":         str(payment.duties),
            "stripe_fee":     str(payment.stripe_fee),
            "total":          str(payment.total),
        }
        form = {
            "mode":                                   "payment",
            "customer_email":                         payment.customer_email,
            "client_reference_id":                    str(payment.id),
            "shipping_address_collection[allowed_countries][0]": "US",
            "phone_number_collection[enabled]":       "true",
            "line_items[0][quantity]":                "1",
            "line_items[0][price_data][currency]":    payment.currency.lower(),
            "line_items[0][price_data][unit_amount]": str(cents),
            "line_items[0][price_data][product_data][name]": "US Wine Shipping",
            "line_items[0][price_data][product_data][description]": description or (
                "Taxes, Duties and Excise included. "
                f"Door-to-door US Shipment for winery {shipment_id}".strip()
            ),
            "success_url": success_url,
            "cancel_url":  cancel_url,
        }
        form.update({f"metadata[{k}]": v for k, v in metadata.items()})
        return form

    def create_checkout_session(self, payment, success_url, cancel_url, description=""):
        try:
            resp = requests.post(
                f"{self.base_url}/v1/checkout/sessions",
                data=self._form(payment, success_url, cancel_url, description),
                auth=(self.secret_key, ""),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise StripeError(str(exc)) from exc

        if resp.status_code >= 400:
            try:
                message = resp.json().get("error", {}).get("message", resp.text)
            except ValueError:
                message = resp.text
            raise StripeError(f"HTTP {resp.status_code}: {message}")

        session = resp.json()
        logger.info("Stripe session %s created for payment %s", session.get("id"), payment.id)
        return {"id": session.get("id"), "url": session.get("url")}

    def verify_webhook_signature(self, payload: bytes, header: str, now=None) -> bool:
        """HMAC-SHA256 signature verification with replay tolerance."""
        if not header or not self.webhook_secret:
            return False

        timestamp, signatures = None, []
        for item in header.split(","):
            key, _, value = item.strip().partition("=")
            if key == "t":
                timestamp = value
            elif key == "v1":
                signatures.append(value)
        if not timestamp or not signatures:
            return False
        try:
            ts = int(timestamp)
        except ValueError:
            return False

        now = int(time.time()) if now is None else now
        if abs(now - ts) > SIGNATURE_TOLERANCE_SECONDS:
            logger.warning("Stripe signature outside tolerance (t=%s)", ts)
            return False

        signed   = timestamp.encode() + b"." + payload
        expected = hmac.new(self.webhook_secret.encode(), signed, hashlib.sha256).hexdigest()
        return any(hmac.compare_digest(expected, sig) for sig in signatures)


# ── Factory ────────────────────────────────────────────────────────────────────
def get_payment_adapter(provider: str = "stripe") -> PaymentGatewayAdapter:
    adapters = {
        "stripe": StripeAdapter,
    }
    cls = adapters.get(provider)
    if not cls:
        raise ValueError(f"Unknown payment provider: {provider}")
    return cls()
