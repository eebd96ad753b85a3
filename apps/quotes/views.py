"""Quote API views: customer, public-token and staff surfaces."""

import logging
from rest_framework import generics, status, permissions
from rest_framework.exceptions import ParseError
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_spectacular.utils import extend_schema

from apps.authentication.access import IsStaff, resolve_actor
from apps.core.errors import ServiceError
from .models import Quote
from .service import QuoteService
from . import serializers as sz

logger = logging.getLogger("spst.quotes")


def _option_id(request):
    """optionId from a JSON body; unreadable bodies are INVALID_JSON."""
    try:
        data = request.data
    except ParseError:
        raise ServiceError("INVALID_JSON")
    if not isinstance(data, dict):
        raise ServiceError("INVALID_JSON")
    return data.get("optionId") or data.get("option_id")


def _row(quote):
    data = sz.QuotePublicSerializer(quote).data
    return {**data, "displayId": quote.human_id}


# ── GET|POST /api/quotazioni/ ─────────────────────────────────────────────────
@extend_schema(tags=["Quotes"], summary="List own quote requests or create one")
class QuoteListCreateView(generics.ListCreateAPIView):
    permission_classes = [permissions.IsAuthenticated]
    service = QuoteService()

    def get_serializer_class(self):
        if self.request.method == "POST":
            return sz.QuoteCreateSerializer
        return sz.QuoteListSerializer

    def get_queryset(self):
        return self.service.visible_queryset(resolve_actor(self.request.user))

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = self.service.create_quote(resolve_actor(request.user), serializer.validated_data)
        return Response(result, status=status.HTTP_201_CREATED)


# ── GET|POST /api/quotazioni/{id}/ ────────────────────────────────────────────
@extend_schema(tags=["Quotes"], summary="Read a quote (owner or staff) or accept one of its options")
class QuoteDetailView(APIView):
    permission_classes = [permissions.IsAuthenticated]
    service = QuoteService()

    def get(self, request, pk):
        quote = self.service.get_for_customer(pk, resolve_actor(request.user))
        return Response({"ok": True, "row": _row(quote)})

    def post(self, request, pk):
        quote = self.service.get_for_customer(pk, resolve_actor(request.user))
        return Response(self.service.accept(quote, _option_id(request)))


# ── GET /api/quote-public/{token}/ ────────────────────────────────────────────
@extend_schema(tags=["Quotes"], summary="Public quote view by share token")
class PublicQuoteView(APIView):
    permission_classes     = [permissions.AllowAny]
    authentication_classes = []
    service = QuoteService()

    def get(self, request, token):
        quote = self.service.get_by_token(token)
        return Response({"ok": True, "quote": sz.QuotePublicSerializer(quote).data})


# ── POST /api/quote-public/{token}/accept/ ────────────────────────────────────
@extend_schema(tags=["Quotes"], summary="Accept a visible option through the share token")
class PublicQuoteAcceptView(APIView):
    permission_classes     = [permissions.AllowAny]
    authentication_classes = []
    service = QuoteService()

    def post(self, request, token):
        quote = self.service.get_by_token(token)
        return Response(self.service.accept(quote, _option_id(request), require_visible=True))


# ── GET /api/quote-requests/ ──────────────────────────────────────────────────
@extend_schema(tags=["Quotes (staff)"], summary="Latest quote requests")
class StaffQuoteListView(APIView):
    permission_classes = [IsStaff]

    def get(self, request):
        qs = Quote.objects.all()
        if request.query_params.get("status"):
            qs = qs.filter(status=request.query_params["status"])
        return Response({"ok": True, "rows": sz.QuoteListSerializer(qs[:200], many=True).data})


# ── GET /api/quote-requests/{id}/ ─────────────────────────────────────────────
@extend_schema(tags=["Quotes (staff)"], summary="Quote with every option, internal fields included")
class StaffQuoteDetailView(APIView):
    permission_classes = [IsStaff]
    service = QuoteService()

    def get(self, request, pk):
        quote = self.service.get(pk)
        return Response({"ok": True, "quote": sz.QuoteStaffSerializer(quote).data})


# ── POST /api/quote-requests/{id}/options/ ────────────────────────────────────
@extend_schema(tags=["Quotes (staff)"], summary="Create or update a quote option")
class StaffQuoteOptionsView(APIView):
    permission_classes = [IsStaff]
    service = QuoteService()

    def post(self, request, pk):
        quote = self.service.get(pk)
        ser = sz.QuoteOptionUpsertSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        option = self.service.upsert_option(quote, ser.validated_data)
        return Response({"ok": True, "option": sz.StaffOptionSerializer(option).data})


# ── POST /api/quote-requests/{id}/send-public-link/ ───────────────────────────
@extend_schema(tags=["Quotes (staff)"], summary="Share the quote with the customer by email")
class SendPublicLinkView(APIView):
    permission_classes = [IsStaff]
    service = QuoteService()

    def post(self, request, pk):
        quote = self.service.get(pk)
        return Response(self.service.send_public_link(quote))


# ── DELETE /api/quote-options/{id}/ ───────────────────────────────────────────
@extend_schema(tags=["Quotes (staff)"], summary="Delete a quote option")
class QuoteOptionDeleteView(APIView):
    permission_classes = [IsStaff]
    service = QuoteService()

    def delete(self, request, pk):
        self.service.delete_option(pk)
        return Response({"ok": True})
