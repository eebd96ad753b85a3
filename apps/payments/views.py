"""Payment views: US duties pricing, Stripe checkout, Stripe webhook."""

import json
import logging

from django.conf import settings
from django.http import HttpResponse
from django.utils.decorators import method_decorator
from django.views.decorators.csrf import csrf_exempt
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_spectacular.utils import extend_schema, OpenApiExample

from apps.core.errors import error_response
from .models import get_payment_adapter
from .serializers import DutiesQuoteSerializer, CheckoutSerializer
from .service import DutiesService, compute_totals

logger = logging.getLogger("spst.payments")


# ── POST /api/usa-shipping-pay/quote/ ─────────────────────────────────────────
@extend_schema(
    tags=["Payments"],
    summary="Price a US wine shipment: shipping + duties + card fee",
    examples=[OpenApiExample("12 bottles", value={"bottle_count": 12, "goods_value": "240.00"})],
)
class DutiesQuoteView(APIView):
    permission_classes     = [AllowAny]
    authentication_classes = []

    def post(self, request):
        ser = DutiesQuoteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        totals = compute_totals(ser.validated_data["bottle_count"], ser.validated_data["goods_value"])
        totals = {k: v if k == "bottle_count" else str(v) for k, v in totals.items()}
        return Response({"ok": True, **totals})


# ── POST /api/usa-shipping-pay/create-checkout/ ───────────────────────────────
@extend_schema(tags=["Payments"], summary="Open a Stripe Checkout session for US shipping + duties")
class CreateCheckoutView(APIView):
    permission_classes     = [AllowAny]
    authentication_classes = []
    service = DutiesService()

    def post(self, request):
        ser = CheckoutSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        result = self.service.create_checkout(ser.validated_data)
        return Response(result)


# ── POST /api/stripe/webhook/ ─────────────────────────────────────────────────
@extend_schema(tags=["Payments"], summary="Stripe webhook (signature-verified)")
@method_decorator(csrf_exempt, name="dispatch")
class StripeWebhookView(APIView):
    """
    Signature is verified against the raw body before anything is parsed.
    Unknown event types are acknowledged with 200.
    """
    permission_classes = [AllowAny]
    authentication_classes = []   # webhooks are not JWT-authenticated
    service = DutiesService()

    def post(self, request):
        adapter = get_payment_adapter(settings.PAYMENT_PROVIDER)
        if not adapter.webhook_secret:
            logger.error("STRIPE_WEBHOOK_SECRET not configured")
            return error_response("MISSING_STRIPE_ENV", status.HTTP_500_INTERNAL_SERVER_ERROR)

        payload   = request.body
        signature = request.headers.get("Stripe-Signature", "")
        if not signature:
            return error_response("MISSING_SIGNATURE", status.HTTP_400_BAD_REQUEST)
        if not adapter.verify_webhook_signature(payload, signature):
            logger.warning("Stripe webhook with invalid signature")
            return error_response("INVALID_SIGNATURE", status.HTTP_400_BAD_REQUEST)

        try:
            event = json.loads(payload)
        except (json.JSONDecodeError, UnicodeDecodeError):
            return error_response("INVALID_JSON", status.HTTP_400_BAD_REQUEST)

        self.service.handle_event(event)
        return HttpResponse("ok", status=200, content_type="text/plain")
