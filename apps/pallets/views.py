"""Pallet wave API views (staff back office + carrier portal)."""

import logging
from rest_framework import status, permissions
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_spectacular.utils import extend_schema, OpenApiExample

from apps.authentication.access import IsStaff
from .models import Carrier
from .service import WaveService
from . import serializers as sz

logger = logging.getLogger("spst.pallets")


# ── GET|POST /api/pallets/waves/ ──────────────────────────────────────────────
@extend_schema(
    tags=["Pallets"],
    summary="List visible waves (staff: all, carrier: own) or create a wave (staff)",
    examples=[
        OpenApiExample(
            "Create",
            value={
                "shipment_ids":        ["<uuid>", "<uuid>"],
                "planned_pickup_date": "2025-06-01",
                "pickup_window":       "09:00-12:00",
                "carrier_id":          "<uuid>",
            },
            request_only=True,
        )
    ],
)
class WaveListCreateView(APIView):
    permission_classes = [permissions.IsAuthenticated]
    service = WaveService()

    def get(self, request):
        waves = self.service.list_waves(request.user)
        return Response({"items": sz.WaveListSerializer(waves, many=True).data})

    def post(self, request):
        ser = sz.WaveCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        d = ser.validated_data
        result = self.service.create_wave(
            request.user,
            shipment_ids        = d["shipment_ids"],
            planned_pickup_date = d["planned_pickup_date"],
            carrier_id          = d["carrier_id"],
            pickup_window       = d.get("pickup_window"),
            notes               = d.get("notes"),
        )
        return Response(result, status=status.HTTP_201_CREATED)


# ── GET /api/pallets/waves/{id}/ ──────────────────────────────────────────────
@extend_schema(tags=["Pallets"], summary="Wave detail with items, shipments and packages")
class WaveDetailView(APIView):
    permission_classes = [permissions.IsAuthenticated]
    service = WaveService()

    def get(self, request, pk):
        wave = self.service.get_wave(pk, request.user)
        return Response({"wave": sz.WaveDetailSerializer(wave).data})


# ── PATCH /api/pallets/waves/{id}/status/ ─────────────────────────────────────
@extend_schema(tags=["Pallets"], summary="Transition wave status (staff: any, carrier: inviata→in_corso)")
class WaveStatusView(APIView):
    # Anonymous callers reach the service so they get UNAUTHENTICATED from it
    permission_classes = [permissions.AllowAny]
    service = WaveService()

    def patch(self, request, pk):
        ser = sz.WaveStatusSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        return Response(self.service.set_wave_status(pk, ser.validated_data["status"], request.user))


# ── GET /api/pallets/pool/ ────────────────────────────────────────────────────
@extend_schema(tags=["Pallets"], summary="Pallet shipments eligible for a new wave (staff)")
class PalletPoolView(APIView):
    permission_classes = [IsStaff]
    service = WaveService()

    def get(self, request):
        return Response({"items": self.service.pool(request.user)})


# ── GET /api/pallets/carriers/ ────────────────────────────────────────────────
@extend_schema(tags=["Pallets"], summary="Active carriers for the wave form (staff)")
class CarrierListView(APIView):
    permission_classes = [IsStaff]

    def get(self, request):
        carriers = Carrier.objects.filter(is_active=True)
        return Response({"items": sz.CarrierSerializer(carriers, many=True).data})
