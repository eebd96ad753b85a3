"""
Shipment models.
A Shipment carries its party blocks and attachment slots as JSON; Package rows
are the physical parcels/pallets and drive the colli_n / peso_reale_kg totals.
"""

import uuid
from decimal import Decimal

from django.db import models
from django.conf import settings
from django.core.validators import MinValueValidator

ATTACHMENT_SLOTS = (
    "ldv",
    "fattura_proforma",
    "fattura_commerciale",
    "dle",
    "allegato1",
    "allegato2",
    "allegato3",
    "allegato4",
)

PARTY_FIELDS = ("rs", "referente", "telefono", "piva", "paese", "citta", "cap", "indirizzo")


def empty_attachments():
    return {slot: None for slot in ATTACHMENT_SLOTS}


class Shipment(models.Model):
    """Core cargo movement record. Never deleted; cancelled via status."""

    class Status(models.TextChoices):
        CREATA      = "CREATA",      "Creata"
        IN_RITIRO   = "IN RITIRO",   "In ritiro"
        IN_TRANSITO = "IN TRANSITO", "In transito"
        CONSEGNATA  = "CONSEGNATA",  "Consegnata"
        ECCEZIONE   = "ECCEZIONE",   "Eccezione"
        ANNULLATA   = "ANNULLATA",   "Annullata"

    class Tipo(models.TextChoices):
        B2B          = "B2B",          "B2B"
        B2C          = "B2C",          "B2C"
        CAMPIONATURA = "CAMPIONATURA", "Campionatura"

    class Formato(models.TextChoices):
        PACCO  = "PACCO",  "Pacco"
        PALLET = "PALLET", "Pallet"

    class Valuta(models.TextChoices):
        EUR = "EUR", "EUR"
        USD = "USD", "USD"
        GBP = "GBP", "GBP"
        CHF = "CHF", "CHF"

    id       = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    human_id = models.CharField(max_length=24, unique=True)
    status   = models.CharField(max_length=12, choices=Status.choices, default=Status.CREATA)

    customer      = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL,
                                      null=True, blank=True, related_name="shipments")
    email_cliente = models.EmailField(blank=True)
    email_norm    = models.CharField(max_length=254, blank=True, db_index=True)

    tipo_spedizione    = models.CharField(max_length=12, choices=Tipo.choices, default=Tipo.B2B)
    incoterm           = models.CharField(max_length=10, blank=True)
    declared_value     = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True,
                                             validators=[MinValueValidator(0)])
    fatt_valuta        = models.CharField(max_length=3, choices=Valuta.choices, default=Valuta.EUR)
    giorno_ritiro      = models.DateField(null=True, blank=True)
    note_ritiro        = models.TextField(blank=True)
    formato_sped       = models.CharField(max_length=6, choices=Formato.choices, default=Formato.PACCO)
    contenuto_generale = models.CharField(max_length=255, blank=True)

    # Party blocks: {rs, referente, telefono, piva, paese, citta, cap, indirizzo}
    mittente     = models.JSONField(default=dict, blank=True)
    destinatario = models.JSONField(default=dict, blank=True)
    fatturazione = models.JSONField(default=dict, blank=True)
    dest_abilitato_import = models.BooleanField(null=True, blank=True)

    carrier       = models.CharField(max_length=80, blank=True)
    tracking_code = models.CharField(max_length=80, blank=True)

    attachments = models.JSONField(default=empty_attachments, blank=True)

    # Derived from Package rows, see ShipmentService.replace_packages
    colli_n       = models.PositiveIntegerField(default=0)
    peso_reale_kg = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0"))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes  = [
            models.Index(fields=["status"], name="ship_status_idx"),
            models.Index(fields=["formato_sped", "status"], name="ship_formato_status_idx"),
            models.Index(fields=["created_at"], name="ship_created_idx"),
        ]

    def save(self, *args, **kwargs):
        self.email_norm = str(self.email_cliente or "").strip().lower()
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.human_id} [{self.status}]"


class Package(models.Model):
    """One physical parcel or pallet. Replaced wholesale, never patched."""
    shipment      = models.ForeignKey(Shipment, on_delete=models.CASCADE, related_name="packages")
    contenuto     = models.CharField(max_length=255, blank=True)
    peso_reale_kg = models.DecimalField(max_digits=10, decimal_places=2,
                                        validators=[MinValueValidator(0)])
    lato1_cm      = models.DecimalField(max_digits=8, decimal_places=2)
    lato2_cm      = models.DecimalField(max_digits=8, decimal_places=2)
    lato3_cm      = models.DecimalField(max_digits=8, decimal_places=2)

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.shipment.human_id} – {self.peso_reale_kg} kg"


class ShipperDefaults(models.Model):
    """Saved sender block per customer email, used to prefill new bookings."""
    email_norm = models.CharField(max_length=254, unique=True)
    mittente   = models.JSONField(default=dict, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "Shipper defaults"

    def __str__(self):
        return self.email_norm
