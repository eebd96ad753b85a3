"""
US duties payment tests
=======================
Covers: totals formula | quote endpoint | checkout session | webhook
        signature | PAID transition + receipts | idempotent replay
"""

import hashlib
import hmac
import json
import time
import pytest
from decimal import Decimal
from unittest.mock import patch, MagicMock
from rest_framework import status

WEBHOOK_URL = "/api/stripe/webhook/"


def sign(body: bytes, secret="whsec_test_123", timestamp=None) -> str:
    timestamp = int(time.time()) if timestamp is None else timestamp
    digest = hmac.new(secret.encode(), f"{timestamp}.".encode() + body, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={digest}"


def completed_event(payment, session_id="cs_test_1") -> bytes:
    return json.dumps({
        "id":   "evt_1",
        "type": "checkout.session.completed",
        "data": {"object": {
            "id":                  session_id,
            "client_reference_id": str(payment.id),
            "metadata":            {"type": "duties", "payment_id": str(payment.id)},
        }},
    }).encode()


def stripe_ok(session_id="cs_test_1"):
    resp = MagicMock(status_code=200)
    resp.json.return_value = {"id": session_id, "url": f"https://checkout.stripe.test/{session_id}"}
    return resp


@pytest.fixture
def payment(db):
    from apps.payments.models import DutiesPayment
    return DutiesPayment.objects.create(
        customer_email="buyer@example.us", winery_email="cantina@example.com",
        winery_name="Cantina Rossi", bottle_count=6, goods_value=Decimal("100.00"),
        shipping=Decimal("119.00"), duties=Decimal("15.00"),
        stripe_fee=Decimal("4.76"), total=Decimal("138.76"),
        checkout_session_id="cs_test_1",
    )


# ═══════════════════════════════════════════════════════════════════════════════
# UNIT TESTS — Totals
# ═══════════════════════════════════════════════════════════════════════════════

class TestComputeTotals:

    @pytest.mark.parametrize("bottles,goods,total,fee", [
        (6,  "100.00", "138.76", "4.76"),
        (12, "240.00", "222.48", "7.48"),
    ])
    def test_known_charges(self, bottles, goods, total, fee):
        from apps.payments.service import compute_totals
        totals = compute_totals(bottles, goods)
        assert totals["total"] == Decimal(total)
        assert totals["stripe_fee"] == Decimal(fee)
        assert totals["base_charge"] == totals["shipping"] + totals["duties"]

    def test_fee_covers_card_cost(self):
        from apps.payments.service import compute_totals
        totals = compute_totals(18, "500")
        net = totals["total"] * (1 - Decimal("0.0325")) - Decimal("0.25")
        assert abs(net - totals["base_charge"]) < Decimal("0.01")

    def test_unsupported_bottle_count(self):
        from apps.core.errors import ServiceError
        from apps.payments.service import compute_totals
        with pytest.raises(ServiceError) as exc:
            compute_totals(7, "100")
        assert exc.value.code == "UNSUPPORTED_BOTTLE_COUNT"
        assert 6 in exc.value.details["allowed"]

    def test_negative_goods_value(self):
        from apps.core.errors import ServiceError
        from apps.payments.service import compute_totals
        with pytest.raises(ServiceError) as exc:
            compute_totals(6, "-1")
        assert exc.value.code == "INVALID_GOODS_VALUE"


# ═══════════════════════════════════════════════════════════════════════════════
# UNIT TESTS — Signature verification
# ═══════════════════════════════════════════════════════════════════════════════

class TestSignature:

    def setup_method(self):
        from apps.payments.models import StripeAdapter
        self.adapter = StripeAdapter(secret_key="sk", webhook_secret="whsec_x", base_url="http://x")

    def test_valid(self):
        body = b'{"a":1}'
        assert self.adapter.verify_webhook_signature(body, sign(body, "whsec_x")) is True

    def test_any_of_several_v1(self):
        body = b'{"a":1}'
        header = sign(body, "whsec_x").replace("v1=", "v1=deadbeef,v1=")
        assert self.adapter.verify_webhook_signature(body, header) is True

    def test_tampered_body(self):
        assert self.adapter.verify_webhook_signature(b'{"a":2}', sign(b'{"a":1}', "whsec_x")) is False

    def test_stale_timestamp(self):
        body = b"{}"
        header = sign(body, "whsec_x", timestamp=int(time.time()) - 3600)
        assert self.adapter.verify_webhook_signature(body, header) is False

    @pytest.mark.parametrize("header", ["", "garbage", "t=abc,v1=00", "v1=00"])
    def test_malformed_header(self, header):
        assert self.adapter.verify_webhook_signature(b"{}", header) is False


class TestAdapterFactory:

    def test_stripe_by_default(self):
        from apps.payments.models import StripeAdapter, get_payment_adapter
        assert isinstance(get_payment_adapter(), StripeAdapter)

    def test_unknown_provider(self):
        from apps.payments.models import get_payment_adapter
        with pytest.raises(ValueError):
            get_payment_adapter("paypal")

    def test_service_resolves_configured_provider(self, settings):
        from apps.payments.models import StripeAdapter, get_payment_adapter
        from apps.payments.service import DutiesService
        settings.PAYMENT_PROVIDER = "stripe"
        with patch("apps.payments.service.get_payment_adapter", wraps=get_payment_adapter) as factory:
            adapter = DutiesService().adapter
        factory.assert_called_once_with("stripe")
        assert isinstance(adapter, StripeAdapter)

    def test_injected_adapter_wins(self):
        from apps.payments.service import DutiesService
        injected = MagicMock()
        with patch("apps.payments.service.get_payment_adapter") as factory:
            assert DutiesService(adapter=injected).adapter is injected
        factory.assert_not_called()


# ═══════════════════════════════════════════════════════════════════════════════
# INTEGRATION TESTS — Quote + checkout
# ═══════════════════════════════════════════════════════════════════════════════

@pytest.mark.django_db
class TestCheckout:

    def test_quote_endpoint(self, api_client):
        resp = api_client.post("/api/usa-shipping-pay/quote/", {"bottleCount": 6, "goodsValue": "100"},
                               format="json")
        assert resp.status_code == status.HTTP_200_OK
        assert resp.data["total"] == "138.76"
        assert resp.data["shipping"] == "119.00"
        assert resp.data["duties"] == "15.00"

    def test_quote_unsupported_count(self, api_client):
        resp = api_client.post("/api/usa-shipping-pay/quote/", {"bottle_count": 5, "goods_value": "10"},
                               format="json")
        assert resp.status_code == status.HTTP_400_BAD_REQUEST
        assert resp.data["error"] == "UNSUPPORTED_BOTTLE_COUNT"

    def test_creates_session(self, api_client):
        from apps.payments.models import DutiesPayment
        with patch("apps.payments.models.requests.post", return_value=stripe_ok()) as post:
            resp = api_client.post("/api/usa-shipping-pay/create-checkout/", {
                "customerEmail": "buyer@example.us",
                "wineryEmail":   "cantina@example.com",
                "bottleCount":   6,
                "goodsValue":    "100.00",
            }, format="json")

        assert resp.status_code == status.HTTP_200_OK
        assert resp.data["url"] == "https://checkout.stripe.test/cs_test_1"
        payment = DutiesPayment.objects.get(pk=resp.data["payment_id"])
        assert payment.status == "PENDING"
        assert payment.total == Decimal("138.76")
        assert payment.checkout_session_id == "cs_test_1"

        args, kwargs = post.call_args
        assert args[0] == "http://stripe-mock/v1/checkout/sessions"
        assert kwargs["auth"] == ("sk_test_123", "")
        form = kwargs["data"]
        assert form["line_items[0][price_data][unit_amount]"] == "13876"
        assert form["metadata[type]"] == "duties"
        assert form["metadata[baseAmount]"] == "134.00"
        assert form["client_reference_id"] == str(payment.id)

    def test_pre_priced_amount(self, api_client):
        with patch("apps.payments.models.requests.post", return_value=stripe_ok()) as post:
            resp = api_client.post("/api/usa-shipping-pay/create-checkout/", {
                "customer_email": "buyer@example.us", "amount": "250.00",
            }, format="json")
        assert resp.status_code == status.HTTP_200_OK
        assert post.call_args.kwargs["data"]["line_items[0][price_data][unit_amount]"] == "25000"

    def test_missing_fields(self, api_client):
        resp = api_client.post("/api/usa-shipping-pay/create-checkout/", {"bottleCount": 6}, format="json")
        assert resp.status_code == status.HTTP_400_BAD_REQUEST
        assert resp.data["error"] == "MISSING_FIELDS"

    def test_missing_secret(self, api_client, settings):
        settings.STRIPE_SECRET_KEY = ""
        resp = api_client.post("/api/usa-shipping-pay/create-checkout/", {
            "customer_email": "buyer@example.us", "amount": "10",
        }, format="json")
        assert resp.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert resp.data["error"] == "SERVER_MISCONFIG"

    def test_stripe_rejects(self, api_client):
        from apps.payments.models import DutiesPayment
        failure = MagicMock(status_code=400, text="bad")
        failure.json.return_value = {"error": {"message": "Invalid currency"}}
        with patch("apps.payments.models.requests.post", return_value=failure):
            resp = api_client.post("/api/usa-shipping-pay/create-checkout/", {
                "customer_email": "buyer@example.us", "amount": "10",
            }, format="json")

        assert resp.status_code == status.HTTP_502_BAD_GATEWAY
        assert resp.data["error"] == "CHECKOUT_FAILED"
        assert DutiesPayment.objects.get().status == "FAILED"


# ═══════════════════════════════════════════════════════════════════════════════
# INTEGRATION TESTS — Webhook
# ═══════════════════════════════════════════════════════════════════════════════

@pytest.mark.django_db
class TestWebhook:

    def _post(self, client, body, header):
        extra = {"HTTP_STRIPE_SIGNATURE": header} if header is not None else {}
        return client.post(WEBHOOK_URL, data=body, content_type="application/json", **extra)

    def test_completed_marks_paid(self, api_client, payment, no_real_email):
        body = completed_event(payment)
        resp = self._post(api_client, body, sign(body))

        assert resp.status_code == 200
        assert resp.content == b"ok"
        payment.refresh_from_db()
        assert payment.status == "PAID"
        assert payment.paid_at is not None

        # Customer receipt (EN) and winery receipt (IT)
        recipients = [c[0][0]["to"] for c in no_real_email.call_args_list]
        assert recipients == [["buyer@example.us"], ["cantina@example.com"]]
        assert no_real_email.call_args_list[0][0][0]["from"] == "SPST <duties@spst.test>"

    def test_replay_is_idempotent(self, api_client, payment, no_real_email):
        body = completed_event(payment)
        self._post(api_client, body, sign(body))
        payment.refresh_from_db()
        paid_at = payment.paid_at

        resp = self._post(api_client, body, sign(body))

        assert resp.status_code == 200
        payment.refresh_from_db()
        assert payment.paid_at == paid_at
        assert no_real_email.call_count == 2

    def test_found_by_session_id(self, api_client, payment):
        body = json.dumps({"type": "checkout.session.completed",
                           "data": {"object": {"id": "cs_test_1"}}}).encode()
        self._post(api_client, body, sign(body))
        payment.refresh_from_db()
        assert payment.status == "PAID"

    def test_other_events_acknowledged(self, api_client, payment):
        body = json.dumps({"type": "payment_intent.created", "data": {"object": {}}}).encode()
        resp = self._post(api_client, body, sign(body))
        assert resp.status_code == 200
        payment.refresh_from_db()
        assert payment.status == "PENDING"

    def test_missing_signature(self, api_client, payment):
        resp = self._post(api_client, completed_event(payment), None)
        assert resp.status_code == 400
        assert resp.data["error"] == "MISSING_SIGNATURE"

    def test_invalid_signature(self, api_client, payment):
        body = completed_event(payment)
        resp = self._post(api_client, body, sign(body, secret="whsec_wrong"))
        assert resp.status_code == 400
        assert resp.data["error"] == "INVALID_SIGNATURE"
        payment.refresh_from_db()
        assert payment.status == "PENDING"

    def test_stale_signature(self, api_client, payment):
        body = completed_event(payment)
        resp = self._post(api_client, body, sign(body, timestamp=int(time.time()) - 600))
        assert resp.data["error"] == "INVALID_SIGNATURE"

    def test_signed_garbage(self, api_client):
        body = b"{not json"
        resp = self._post(api_client, body, sign(body))
        assert resp.status_code == 400
        assert resp.data["error"] == "INVALID_JSON"

    def test_missing_webhook_secret(self, api_client, payment, settings):
        settings.STRIPE_WEBHOOK_SECRET = ""
        body = completed_event(payment)
        resp = self._post(api_client, body, sign(body))
        assert resp.status_code == 500
        assert resp.data["error"] == "MISSING_STRIPE_ENV"
