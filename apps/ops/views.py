"""
Operations views:
  - Deep health check (DB, cache, provider config)
  - Prometheus-formatted metrics
  - Back-office dashboard summary
  - Back-office useful links
"""

import logging

from django.conf import settings
from django.core.cache import cache
from django.db import connection, DatabaseError
from django.db.models import Count
from django.http import HttpResponse
from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import AllowAny
from drf_spectacular.utils import extend_schema

from apps.authentication.access import IsStaff
from apps.core.errors import ServiceError
from .models import BackofficeLink
from .serializers import BackofficeLinkSerializer

logger = logging.getLogger("spst.ops")

PROVIDER_SETTINGS = ("RESEND_API_KEY", "STRIPE_SECRET_KEY", "STRIPE_WEBHOOK_SECRET")


def _counts_by_status(model) -> dict:
    return dict(model.objects.order_by().values_list("status").annotate(c=Count("pk")))


# ── GET /api/health/deep/ ─────────────────────────────────────────────────────
@extend_schema(tags=["Ops"], summary="Deep health check: DB, cache, provider config")
class DeepHealthView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request):
        checks = {}

        # Database
        try:
            with connection.cursor() as cur:
                cur.execute("SELECT 1")
            checks["database"] = "ok"
        except DatabaseError as exc:
            logger.error("Health: database check failed: %s", exc)
            checks["database"] = f"error: {exc}"

        # Cache (Redis in production)
        try:
            cache.set("healthcheck", "1", 5)
            checks["cache"] = "ok" if cache.get("healthcheck") == "1" else "miss"
        except Exception as exc:
            logger.error("Health: cache check failed: %s", exc)
            checks["cache"] = f"error: {exc}"

        # Providers are reported, not required
        checks["config"] = {name.lower(): bool(getattr(settings, name, "")) for name in PROVIDER_SETTINGS}

        overall = "ok" if checks["database"] == "ok" and checks["cache"] == "ok" else "degraded"
        return Response({"status": overall, "checks": checks})


# ── GET /api/ops/metrics/ ─────────────────────────────────────────────────────
@extend_schema(tags=["Ops"], summary="Prometheus-formatted operational metrics (staff)")
class MetricsView(APIView):
    permission_classes = [IsStaff]

    def get(self, request):
        from apps.shipments.models import Shipment
        from apps.pallets.models import PalletWave

        lines = [
            "# HELP spst_shipments_total Shipments by status",
            "# TYPE spst_shipments_total gauge",
        ]
        for state, count in sorted(_counts_by_status(Shipment).items()):
            lines.append(f'spst_shipments_total{{status="{state}"}} {count}')
        lines += [
            "",
            "# HELP spst_waves_total Pallet waves by status",
            "# TYPE spst_waves_total gauge",
        ]
        for state, count in sorted(_counts_by_status(PalletWave).items()):
            lines.append(f'spst_waves_total{{status="{state}"}} {count}')
        return HttpResponse("\n".join(lines) + "\n", content_type="text/plain; version=0.0.4")


# ── GET /api/admin/dashboard/summary/ ─────────────────────────────────────────
@extend_schema(tags=["Admin"], summary="Back-office overview: shipments, waves, quotes, duties")
class DashboardSummaryView(APIView):
    permission_classes = [IsStaff]

    def get(self, request):
        from apps.shipments.models import Shipment
        from apps.pallets.models import PalletWave
        from apps.quotes.models import Quote
        from apps.payments.models import DutiesPayment

        return Response({
            "ok":                       True,
            "shipments_by_status":      _counts_by_status(Shipment),
            "waves_by_status":          _counts_by_status(PalletWave),
            "open_quotes":              Quote.objects.exclude(status=Quote.Status.ACCETTATA).count(),
            "pending_duties_payments":  DutiesPayment.objects.filter(
                status=DutiesPayment.Status.PENDING
            ).count(),
        })


# ── GET|POST /api/admin/links/ ────────────────────────────────────────────────
@extend_schema(tags=["Admin"], summary="Back-office useful links (staff)")
class BackofficeLinkListView(APIView):
    permission_classes = [IsStaff]

    def get(self, request):
        rows = BackofficeLink.objects.filter(is_active=True)
        return Response({"ok": True, "rows": BackofficeLinkSerializer(rows, many=True).data})

    def post(self, request):
        data = request.data if isinstance(request.data, dict) else {}
        if not all(str(data.get(f) or "").strip() for f in ("category", "label", "url")):
            raise ServiceError("MISSING_FIELDS")
        ser = BackofficeLinkSerializer(data=data)
        ser.is_valid(raise_exception=True)
        link = ser.save()
        logger.info("Back-office link %s added by %s", link.label, request.user.email)
        return Response({"ok": True, "row": BackofficeLinkSerializer(link).data})


# ── PATCH|DELETE /api/admin/links/{id}/ ───────────────────────────────────────
@extend_schema(tags=["Admin"], summary="Edit or retire a back-office link (staff)")
class BackofficeLinkDetailView(APIView):
    permission_classes = [IsStaff]

    def _get(self, pk):
        link = BackofficeLink.objects.filter(pk=pk).first()
        if link is None:
            raise ServiceError("LINK_NOT_FOUND", status.HTTP_404_NOT_FOUND)
        return link

    def patch(self, request, pk):
        ser = BackofficeLinkSerializer(self._get(pk), data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        link = ser.save()
        return Response({"ok": True, "row": BackofficeLinkSerializer(link).data})

    def delete(self, request, pk):
        link = self._get(pk)
        link.is_active = False
        link.save(update_fields=["is_active"])
        logger.info("Back-office link %s retired by %s", link.label, request.user.email)
        return Response({"ok": True, "row": BackofficeLinkSerializer(link).data})
