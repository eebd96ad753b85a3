"""
Quote models.
A Quote is a pre-shipment price request; each QuoteOption is one carrier/price
proposal. At most one option per quote ends up accettata.
"""

import uuid

from django.db import models
from django.conf import settings


class Quote(models.Model):

    class Status(models.TextChoices):
        IN_LAVORAZIONE = "IN LAVORAZIONE", "In lavorazione"
        INVIATA        = "INVIATA",        "Inviata al cliente"
        ACCETTATA      = "ACCETTATA",      "Accettata"

    id       = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    human_id = models.CharField(max_length=24, unique=True)
    status   = models.CharField(max_length=16, choices=Status.choices, default=Status.IN_LAVORAZIONE)

    customer      = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL,
                                      null=True, blank=True, related_name="quotes")
    email_cliente = models.EmailField(blank=True)
    email_norm    = models.CharField(max_length=254, blank=True, db_index=True)

    tipo_spedizione = models.CharField(max_length=12, blank=True)
    incoterm        = models.CharField(max_length=10, blank=True)
    valuta          = models.CharField(max_length=3, default="EUR")
    declared_value  = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    data_ritiro     = models.DateField(null=True, blank=True)

    mittente     = models.JSONField(default=dict, blank=True)
    destinatario = models.JSONField(default=dict, blank=True)
    colli        = models.JSONField(default=list, blank=True)
    note         = models.TextField(blank=True)

    public_token       = models.CharField(max_length=64, unique=True, null=True, blank=True)
    accepted_option_id = models.UUIDField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes  = [models.Index(fields=["status"], name="quote_status_idx")]

    def save(self, *args, **kwargs):
        self.email_norm = str(self.email_cliente or "").strip().lower()
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.human_id} [{self.status}]"


class QuoteOption(models.Model):

    class Status(models.TextChoices):
        BOZZA     = "bozza",     "Bozza"
        ACCETTATA = "accettata", "Accettata"
        RIFIUTATA = "rifiutata", "Rifiutata"

    id    = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    quote = models.ForeignKey(Quote, on_delete=models.CASCADE, related_name="options")

    label        = models.CharField(max_length=80, blank=True)
    carrier      = models.CharField(max_length=80, blank=True)
    service_name = models.CharField(max_length=120, blank=True)
    transit_time = models.CharField(max_length=80, blank=True)

    freight_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    customs_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    extras        = models.JSONField(default=list, blank=True)  # [{"label", "amount"}]
    total_price   = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    currency      = models.CharField(max_length=3, default="EUR")

    public_notes      = models.TextField(blank=True)
    visible_to_client = models.BooleanField(default=True)

    # Never exposed outside staff endpoints
    internal_cost   = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    internal_profit = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    internal_notes  = models.TextField(blank=True)

    status      = models.CharField(max_length=10, choices=Status.choices, default=Status.BOZZA)
    sent_at     = models.DateTimeField(null=True, blank=True)
    accepted_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["created_at"]

    def __str__(self):
        return f"{self.quote.human_id} – {self.label or self.carrier} [{self.status}]"
