"""Shipment API views."""

import logging
from rest_framework import generics, status, permissions
from rest_framework.parsers import MultiPartParser, FormParser
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_spectacular.utils import extend_schema
from django_filters.rest_framework import DjangoFilterBackend

from apps.authentication.access import IsStaff, resolve_actor
from apps.authentication.models import normalize_email
from apps.core.errors import ServiceError
from .service import ShipmentService
from . import serializers as sz

logger = logging.getLogger("spst.shipments")


# ── GET|POST /api/spedizioni/ ─────────────────────────────────────────────────
@extend_schema(tags=["Shipments"], summary="List own shipments (staff: all) or create one")
class ShipmentListCreateView(generics.ListCreateAPIView):
    permission_classes = [permissions.IsAuthenticated]
    filter_backends    = [DjangoFilterBackend]
    filterset_fields   = ["status", "formato_sped"]
    service = ShipmentService()

    def get_serializer_class(self):
        if self.request.method == "POST":
            return sz.ShipmentCreateSerializer
        return sz.ShipmentListSerializer

    def get_queryset(self):
        return self.service.visible_queryset(resolve_actor(self.request.user))

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        shipment = self.service.create_shipment(resolve_actor(request.user), serializer.validated_data)
        return Response(
            {
                "ok":       True,
                "id":       str(shipment.id),
                "shipment": sz.ShipmentDetailSerializer(shipment).data,
            },
            status=status.HTTP_201_CREATED,
        )


# ── GET /api/spedizioni/{id}/ ─────────────────────────────────────────────────
@extend_schema(tags=["Shipments"], summary="Shipment detail with packages (owner or staff)")
class ShipmentDetailView(APIView):
    permission_classes = [permissions.IsAuthenticated]
    service = ShipmentService()

    def get(self, request, pk):
        shipment = self.service.get_visible(pk, resolve_actor(request.user))
        return Response({"ok": True, "shipment": sz.ShipmentDetailSerializer(shipment).data})


# ── PATCH /api/spedizioni/{id}/status/ ────────────────────────────────────────
@extend_schema(tags=["Shipments"], summary="Set shipment status (staff)")
class ShipmentStatusView(APIView):
    permission_classes = [IsStaff]
    service = ShipmentService()

    def patch(self, request, pk):
        ser = sz.ShipmentStatusSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        shipment = self.service.set_status(pk, ser.validated_data["status"])
        return Response({"ok": True, "shipment": sz.ShipmentDetailSerializer(shipment).data})


# ── PATCH /api/spedizioni/{id}/tracking/ ──────────────────────────────────────
@extend_schema(tags=["Shipments"], summary="Set carrier and tracking code (staff)")
class ShipmentTrackingView(APIView):
    permission_classes = [IsStaff]
    service = ShipmentService()

    def patch(self, request, pk):
        ser = sz.TrackingSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        shipment = self.service.update_tracking(pk, ser.validated_data)
        return Response({
            "ok":            True,
            "carrier":       shipment.carrier,
            "tracking_code": shipment.tracking_code,
        })


# ── GET|PUT /api/spedizioni/{id}/colli/ ───────────────────────────────────────
@extend_schema(tags=["Shipments"], summary="Read or replace all packages of a shipment")
class ShipmentPackagesView(APIView):
    permission_classes = [permissions.IsAuthenticated]
    service = ShipmentService()

    def _payload(self, shipment):
        return {
            "ok":            True,
            "colli":         sz.PackageSerializer(shipment.packages.all(), many=True).data,
            "colli_n":       shipment.colli_n,
            "peso_reale_kg": str(shipment.peso_reale_kg),
        }

    def get(self, request, pk):
        shipment = self.service.get_visible(pk, resolve_actor(request.user))
        return Response(self._payload(shipment))

    def put(self, request, pk):
        shipment = self.service.get_visible(pk, resolve_actor(request.user))
        rows = request.data.get("colli") if isinstance(request.data, dict) else request.data
        if not isinstance(rows, list):
            raise ServiceError("INVALID_PAYLOAD")
        self.service.replace_packages(shipment, rows)
        shipment.refresh_from_db()
        return Response(self._payload(shipment))


# ── GET /api/spedizioni/{id}/attachments/ ─────────────────────────────────────
@extend_schema(tags=["Shipments"], summary="Attachment slots of a shipment")
class ShipmentAttachmentsView(APIView):
    permission_classes = [permissions.IsAuthenticated]
    service = ShipmentService()

    def get(self, request, pk):
        shipment = self.service.get_visible(pk, resolve_actor(request.user))
        return Response({"ok": True, "attachments": shipment.attachments})


# ── POST /api/spedizioni/{id}/upload/ ─────────────────────────────────────────
@extend_schema(tags=["Shipments"], summary="Upload a document into an attachment slot")
class ShipmentUploadView(APIView):
    permission_classes = [permissions.IsAuthenticated]
    parser_classes     = [MultiPartParser, FormParser]
    service = ShipmentService()

    def post(self, request, pk):
        shipment = self.service.get_visible(pk, resolve_actor(request.user))
        entry = self.service.attach_document(
            shipment, request.data.get("type"), request.FILES.get("file")
        )
        return Response({"ok": True, "url": entry["url"], "file_name": entry["file_name"]})


# ── POST /api/spedizioni/{id}/evasa/ ──────────────────────────────────────────
@extend_schema(tags=["Shipments"], summary="Email the customer that the shipment was dispatched (staff)")
class ShipmentDispatchedEmailView(APIView):
    permission_classes = [IsStaff]
    service = ShipmentService()

    def post(self, request, pk):
        shipment = self.service.get(pk)
        sent = self.service.send_dispatched_email(shipment)
        return Response({"ok": True, "sent": sent})


# ── GET|POST /api/impostazioni/ ───────────────────────────────────────────────
@extend_schema(tags=["Shipments"], summary="Saved sender block used to prefill new shipments")
class ShipperDefaultsView(APIView):
    """
    Customers read and write their own block. Staff work on a customer's
    block through ?email=.
    """
    permission_classes = [permissions.IsAuthenticated]
    service = ShipmentService()

    def _email(self, request):
        actor = resolve_actor(request.user)
        if actor.is_staff:
            return normalize_email(request.query_params.get("email")) or actor.email
        return actor.email

    def get(self, request):
        email = self._email(request)
        return Response({"ok": True, "email": email, "mittente": self.service.get_shipper_defaults(email)})

    def post(self, request):
        ser = sz.ShipperDefaultsSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        email = self._email(request)
        mittente = self.service.save_shipper_defaults(email, ser.validated_data["mittente"])
        return Response({"ok": True, "email": email, "mittente": mittente})
