import uuid
import django.core.validators
import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models

import apps.shipments.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Shipment",
            fields=[
                ("id",       models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("human_id", models.CharField(max_length=24, unique=True)),
                ("status",   models.CharField(
                    choices=[
                        ("CREATA",      "Creata"),
                        ("IN RITIRO",   "In ritiro"),
                        ("IN TRANSITO", "In transito"),
                        ("CONSEGNATA",  "Consegnata"),
                        ("ECCEZIONE",   "Eccezione"),
                        ("ANNULLATA",   "Annullata"),
                    ],
                    default="CREATA",
                    max_length=12,
                )),
                ("email_cliente",   models.EmailField(blank=True, max_length=254)),
                ("email_norm",      models.CharField(blank=True, db_index=True, max_length=254)),
                ("tipo_spedizione", models.CharField(
                    choices=[("B2B", "B2B"), ("B2C", "B2C"), ("CAMPIONATURA", "Campionatura")],
                    default="B2B",
                    max_length=12,
                )),
                ("incoterm",       models.CharField(blank=True, max_length=10)),
                ("declared_value", models.DecimalField(
                    blank=True, decimal_places=2, max_digits=12, null=True,
                    validators=[django.core.validators.MinValueValidator(0)],
                )),
                ("fatt_valuta",    models.CharField(
                    choices=[("EUR", "EUR"), ("USD", "USD"), ("GBP", "GBP"), ("CHF", "CHF")],
                    default="EUR",
                    max_length=3,
                )),
                ("giorno_ritiro",      models.DateField(blank=True, null=True)),
                ("note_ritiro",        models.TextField(blank=True)),
                ("formato_sped",       models.CharField(
                    choices=[("PACCO", "Pacco"), ("PALLET", "Pallet")],
                    default="PACCO",
                    max_length=6,
                )),
                ("contenuto_generale", models.CharField(blank=True, max_length=255)),
                ("mittente",           models.JSONField(blank=True, default=dict)),
                ("destinatario",       models.JSONField(blank=True, default=dict)),
                ("fatturazione",       models.JSONField(blank=True, default=dict)),
                ("dest_abilitato_import", models.BooleanField(blank=True, null=True)),
                ("carrier",            models.CharField(blank=True, max_length=80)),
                ("tracking_code",      models.CharField(blank=True, max_length=80)),
                ("attachments",        models.JSONField(blank=True, default=apps.shipments.models.empty_attachments)),
                ("colli_n",            models.PositiveIntegerField(default=0)),
                ("peso_reale_kg",      models.DecimalField(decimal_places=2, default=Decimal("0"), max_digits=10)),
                ("created_at",         models.DateTimeField(auto_now_add=True)),
                ("updated_at",         models.DateTimeField(auto_now=True)),
                ("customer",           models.ForeignKey(
                    blank=True, null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name="shipments",
                    to=settings.AUTH_USER_MODEL,
                )),
            ],
            options={"ordering": ["-created_at"]},
        ),
        migrations.AddIndex(
            model_name="shipment",
            index=models.Index(fields=["status"], name="ship_status_idx"),
        ),
        migrations.AddIndex(
            model_name="shipment",
            index=models.Index(fields=["formato_sped", "status"], name="ship_formato_status_idx"),
        ),
        migrations.AddIndex(
            model_name="shipment",
            index=models.Index(fields=["created_at"], name="ship_created_idx"),
        ),
        migrations.CreateModel(
            name="Package",
            fields=[
                ("id",            models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("contenuto",     models.CharField(blank=True, max_length=255)),
                ("peso_reale_kg", models.DecimalField(
                    decimal_places=2, max_digits=10,
                    validators=[django.core.validators.MinValueValidator(0)],
                )),
                ("lato1_cm",      models.DecimalField(decimal_places=2, max_digits=8)),
                ("lato2_cm",      models.DecimalField(decimal_places=2, max_digits=8)),
                ("lato3_cm",      models.DecimalField(decimal_places=2, max_digits=8)),
                ("shipment",      models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="packages",
                    to="shipments.shipment",
                )),
            ],
            options={"ordering": ["id"]},
        ),
    ]
