"""
Pallet consolidation models.
A PalletWave groups PALLET shipments for one pickup by one Carrier;
CarrierUser links an authenticated user to the carrier they drive for.
"""

import uuid
from django.db import models
from django.conf import settings


class Carrier(models.Model):
    id         = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name       = models.CharField(max_length=120, unique=True)
    is_active  = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class CarrierUser(models.Model):
    """Authorization join: user → carrier. Disabled rows grant nothing."""

    class Role(models.TextChoices):
        CARRIER = "carrier", "Carrier"
        DRIVER  = "driver",  "Driver"
        ADMIN   = "admin",   "Carrier admin"

    user       = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE,
                                   related_name="carrier_links")
    carrier    = models.ForeignKey(Carrier, on_delete=models.CASCADE, related_name="users")
    role       = models.CharField(max_length=10, choices=Role.choices, default=Role.CARRIER)
    enabled    = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["user", "carrier"], name="carrier_user_unique"),
        ]

    def __str__(self):
        return f"{self.user} @ {self.carrier} ({self.role})"


class WaveStatus(models.TextChoices):
    BOZZA      = "bozza",      "Bozza"
    INVIATA    = "inviata",    "Inviata al carrier"
    IN_CORSO   = "in_corso",   "In corso"
    COMPLETATA = "completata", "Completata"
    ANNULLATA  = "annullata",  "Annullata"

    @classmethod
    def parse(cls, value):
        """Trim + lower-case; None when outside the enum."""
        normalized = str(value or "").strip().lower()
        return cls(normalized) if normalized in cls.values else None


class PalletWave(models.Model):
    id                  = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    code                = models.CharField(max_length=24, unique=True)
    status              = models.CharField(max_length=12, choices=WaveStatus.choices,
                                           default=WaveStatus.BOZZA)
    planned_pickup_date = models.DateField()
    pickup_window       = models.CharField(max_length=60, blank=True)
    carrier             = models.ForeignKey(Carrier, on_delete=models.PROTECT, related_name="waves")
    notes               = models.TextField(blank=True)
    created_by          = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL,
                                            null=True, blank=True, related_name="created_waves")
    created_at          = models.DateTimeField(auto_now_add=True)
    updated_at          = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes  = [
            models.Index(fields=["status"], name="wave_status_idx"),
            models.Index(fields=["carrier", "status"], name="wave_carrier_status_idx"),
        ]

    def __str__(self):
        return f"{self.code} [{self.status}]"


class PalletWaveItem(models.Model):
    wave                  = models.ForeignKey(PalletWave, on_delete=models.CASCADE, related_name="items")
    shipment              = models.ForeignKey("shipments.Shipment", on_delete=models.PROTECT,
                                              related_name="wave_items")
    shipment_human_id     = models.CharField(max_length=24)
    requested_pickup_date = models.DateField(null=True, blank=True)
    planned_pickup_date   = models.DateField(null=True, blank=True)

    class Meta:
        ordering    = ["id"]
        constraints = [
            models.UniqueConstraint(fields=["wave", "shipment"], name="wave_item_unique"),
        ]

    def __str__(self):
        return f"{self.wave.code} ← {self.shipment_human_id}"
