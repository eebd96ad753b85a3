import uuid
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Quote",
            fields=[
                ("id",       models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("human_id", models.CharField(max_length=24, unique=True)),
                ("status",   models.CharField(
                    choices=[
                        ("IN LAVORAZIONE", "In lavorazione"),
                        ("INVIATA",        "Inviata al cliente"),
                        ("ACCETTATA",      "Accettata"),
                    ],
                    default="IN LAVORAZIONE",
                    max_length=16,
                )),
                ("email_cliente",   models.EmailField(blank=True, max_length=254)),
                ("email_norm",      models.CharField(blank=True, db_index=True, max_length=254)),
                ("tipo_spedizione", models.CharField(blank=True, max_length=12)),
                ("incoterm",        models.CharField(blank=True, max_length=10)),
                ("valuta",          models.CharField(default="EUR", max_length=3)),
                ("declared_value",  models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ("data_ritiro",     models.DateField(blank=True, null=True)),
                ("mittente",        models.JSONField(blank=True, default=dict)),
                ("destinatario",    models.JSONField(blank=True, default=dict)),
                ("colli",           models.JSONField(blank=True, default=list)),
                ("note",            models.TextField(blank=True)),
                ("public_token",       models.CharField(blank=True, max_length=64, null=True, unique=True)),
                ("accepted_option_id", models.UUIDField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("customer", models.ForeignKey(
                    blank=True, null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name="quotes",
                    to=settings.AUTH_USER_MODEL,
                )),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes":  [models.Index(fields=["status"], name="quote_status_idx")],
            },
        ),
        migrations.CreateModel(
            name="QuoteOption",
            fields=[
                ("id",           models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("label",        models.CharField(blank=True, max_length=80)),
                ("carrier",      models.CharField(blank=True, max_length=80)),
                ("service_name", models.CharField(blank=True, max_length=120)),
                ("transit_time", models.CharField(blank=True, max_length=80)),
                ("freight_price", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ("customs_price", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ("extras",        models.JSONField(blank=True, default=list)),
                ("total_price",   models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ("currency",      models.CharField(default="EUR", max_length=3)),
                ("public_notes",      models.TextField(blank=True)),
                ("visible_to_client", models.BooleanField(default=True)),
                ("internal_cost",   models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ("internal_profit", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ("internal_notes",  models.TextField(blank=True)),
                ("status", models.CharField(
                    choices=[("bozza", "Bozza"), ("accettata", "Accettata"), ("rifiutata", "Rifiutata")],
                    default="bozza",
                    max_length=10,
                )),
                ("sent_at",     models.DateTimeField(blank=True, null=True)),
                ("accepted_at", models.DateTimeField(blank=True, null=True)),
                ("created_at",  models.DateTimeField(auto_now_add=True)),
                ("updated_at",  models.DateTimeField(auto_now=True)),
                ("quote", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="options",
                    to="quotes.quote",
                )),
            ],
            options={"ordering": ["created_at"]},
        ),
    ]
