"""
Wave persistence procedures.

create_pallet_wave and get_pallets_pool own the consolidation rules
(eligibility, duplicate prevention, minimum pallets). Callers only see a
wave id or a ProcedureError carrying a sentinel string.
"""

import logging
import uuid

from django.conf import settings
from django.db import transaction
from django.db.models import Q
from django.utils.dateparse import parse_date

from apps.shipments.models import Shipment
from .models import Carrier, PalletWave, PalletWaveItem, WaveStatus

logger = logging.getLogger("spst.pallets")

# A shipment in one of these waves is free to join another
RELEASED_WAVE_STATUSES = (WaveStatus.ANNULLATA,)

# Shipments in these statuses never enter the pool
CLOSED_SHIPMENT_STATUSES = (Shipment.Status.ANNULLATA, Shipment.Status.CONSEGNATA)


class ProcedureError(Exception):
    def __init__(self, sentinel: str, detail: str = ""):
        super().__init__(sentinel)
        self.sentinel = sentinel
        self.detail   = detail


def _as_uuid(value, sentinel):
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        raise ProcedureError(sentinel, str(value))


def _active_items():
    return PalletWaveItem.objects.exclude(wave__status__in=RELEASED_WAVE_STATUSES)


def _next_wave_code(day) -> str:
    """WV-YYYYMMDD-NNN, sequence per planned pickup day."""
    prefix = f"WV-{day:%Y%m%d}-"
    taken  = PalletWave.objects.filter(code__startswith=prefix).count()
    return f"{prefix}{taken + 1:03d}"


@transaction.atomic
def create_pallet_wave(shipment_ids, planned_pickup_date, pickup_window, notes, carrier_id, created_by):
    """Validate and persist a wave with its items. Returns the new wave id."""
    pickup_day = planned_pickup_date
    if isinstance(pickup_day, str):
        try:
            pickup_day = parse_date(pickup_day)
        except ValueError:
            pickup_day = None
    if pickup_day is None:
        raise ProcedureError("INVALID_PICKUP_DATE", str(planned_pickup_date))

    carrier = Carrier.objects.filter(pk=_as_uuid(carrier_id, "CARRIER_NOT_FOUND"), is_active=True).first()
    if carrier is None:
        raise ProcedureError("CARRIER_NOT_FOUND", str(carrier_id))

    ids = list(dict.fromkeys(_as_uuid(s, "SHIPMENT_NOT_FOUND") for s in shipment_ids))
    shipments = list(Shipment.objects.select_for_update().filter(pk__in=ids))
    if len(shipments) != len(ids):
        missing = set(ids) - {s.id for s in shipments}
        raise ProcedureError("SHIPMENT_NOT_FOUND", ", ".join(sorted(str(m) for m in missing)))

    not_pallet = [s.human_id for s in shipments if s.formato_sped != Shipment.Formato.PALLET]
    if not_pallet:
        raise ProcedureError("SHIPMENT_NOT_PALLET", ", ".join(not_pallet))

    closed = [s.human_id for s in shipments if s.status in CLOSED_SHIPMENT_STATUSES]
    if closed:
        raise ProcedureError("SHIPMENT_NOT_ELIGIBLE", ", ".join(closed))

    busy = list(_active_items().filter(shipment_id__in=ids).values_list("shipment_human_id", flat=True))
    if busy:
        raise ProcedureError("SHIPMENT_ALREADY_IN_WAVE", ", ".join(busy))

    pallets = sum(s.colli_n or 0 for s in shipments)
    if pallets < settings.MIN_PALLETS_PER_WAVE:
        raise ProcedureError("MIN_PALLETS_REQUIRED", f"{pallets} < {settings.MIN_PALLETS_PER_WAVE}")

    wave = PalletWave.objects.create(
        code                = _next_wave_code(pickup_day),
        status              = WaveStatus.BOZZA,
        planned_pickup_date = pickup_day,
        pickup_window       = pickup_window or "",
        notes               = notes or "",
        carrier             = carrier,
        created_by          = created_by,
    )
    PalletWaveItem.objects.bulk_create([
        PalletWaveItem(
            wave                  = wave,
            shipment              = s,
            shipment_human_id     = s.human_id,
            requested_pickup_date = s.giorno_ritiro,
            planned_pickup_date   = pickup_day,
        )
        for s in shipments
    ])
    logger.info("Wave %s created: %d shipments, %d pallets, carrier %s",
                wave.code, len(shipments), pallets, carrier.name)
    return wave.id


def get_pallets_pool() -> list:
    """PALLET shipments still open and not sitting in an active wave."""
    busy = _active_items().values("shipment_id")
    rows = (
        Shipment.objects
        .filter(formato_sped=Shipment.Formato.PALLET)
        .exclude(status__in=CLOSED_SHIPMENT_STATUSES)
        .exclude(Q(pk__in=busy))
        .order_by("giorno_ritiro", "created_at")
    )
    return [
        {
            "id":            str(s.id),
            "human_id":      s.human_id,
            "status":        s.status,
            "giorno_ritiro": s.giorno_ritiro.isoformat() if s.giorno_ritiro else None,
            "mittente_rs":   (s.mittente or {}).get("rs", ""),
            "mittente_citta":(s.mittente or {}).get("citta", ""),
            "destinatario_paese": (s.destinatario or {}).get("paese", ""),
            "colli_n":       s.colli_n,
            "peso_reale_kg": str(s.peso_reale_kg),
        }
        for s in rows
    ]
