import uuid
import django.db.models.deletion
from decimal import Decimal
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("shipments", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="DutiesPayment",
            fields=[
                ("id",             models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("winery_name",    models.CharField(blank=True, max_length=200)),
                ("winery_email",   models.EmailField(blank=True, max_length=254)),
                ("customer_email", models.EmailField(max_length=254)),
                ("bottle_count",   models.PositiveIntegerField(blank=True, null=True)),
                ("goods_value",    models.DecimalField(decimal_places=2, default=Decimal("0"), max_digits=12)),
                ("shipping",       models.DecimalField(decimal_places=2, default=Decimal("0"), max_digits=12)),
                ("duties",         models.DecimalField(decimal_places=2, default=Decimal("0"), max_digits=12)),
                ("stripe_fee",     models.DecimalField(decimal_places=2, default=Decimal("0"), max_digits=12)),
                ("total",          models.DecimalField(decimal_places=2, max_digits=12)),
                ("currency",       models.CharField(default="EUR", max_length=3)),
                ("checkout_session_id", models.CharField(blank=True, db_index=True, max_length=255)),
                ("status",         models.CharField(
                    choices=[("PENDING", "Pending"), ("PAID", "Paid"), ("FAILED", "Failed")],
                    default="PENDING",
                    max_length=8,
                )),
                ("paid_at",    models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("shipment",   models.ForeignKey(
                    blank=True, null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name="duties_payments",
                    to="shipments.shipment",
                )),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes":  [models.Index(fields=["status"], name="duties_status_idx")],
            },
        ),
    ]
