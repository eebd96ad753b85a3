import uuid
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("shipments", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Carrier",
            fields=[
                ("id",         models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name",       models.CharField(max_length=120, unique=True)),
                ("is_active",  models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={"ordering": ["name"]},
        ),
        migrations.CreateModel(
            name="CarrierUser",
            fields=[
                ("id",         models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("role",       models.CharField(
                    choices=[("carrier", "Carrier"), ("driver", "Driver"), ("admin", "Carrier admin")],
                    default="carrier",
                    max_length=10,
                )),
                ("enabled",    models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("carrier",    models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="users",
                    to="pallets.carrier",
                )),
                ("user",       models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="carrier_links",
                    to=settings.AUTH_USER_MODEL,
                )),
            ],
        ),
        migrations.AddConstraint(
            model_name="carrieruser",
            constraint=models.UniqueConstraint(fields=("user", "carrier"), name="carrier_user_unique"),
        ),
        migrations.CreateModel(
            name="PalletWave",
            fields=[
                ("id",     models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("code",   models.CharField(max_length=24, unique=True)),
                ("status", models.CharField(
                    choices=[
                        ("bozza",      "Bozza"),
                        ("inviata",    "Inviata al carrier"),
                        ("in_corso",   "In corso"),
                        ("completata", "Completata"),
                        ("annullata",  "Annullata"),
                    ],
                    default="bozza",
                    max_length=12,
                )),
                ("planned_pickup_date", models.DateField()),
                ("pickup_window",       models.CharField(blank=True, max_length=60)),
                ("notes",               models.TextField(blank=True)),
                ("created_at",          models.DateTimeField(auto_now_add=True)),
                ("updated_at",          models.DateTimeField(auto_now=True)),
                ("carrier",             models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="waves",
                    to="pallets.carrier",
                )),
                ("created_by",          models.ForeignKey(
                    blank=True, null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name="created_waves",
                    to=settings.AUTH_USER_MODEL,
                )),
            ],
            options={"ordering": ["-created_at"]},
        ),
        migrations.AddIndex(
            model_name="palletwave",
            index=models.Index(fields=["status"], name="wave_status_idx"),
        ),
        migrations.AddIndex(
            model_name="palletwave",
            index=models.Index(fields=["carrier", "status"], name="wave_carrier_status_idx"),
        ),
        migrations.CreateModel(
            name="PalletWaveItem",
            fields=[
                ("id",                    models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("shipment_human_id",     models.CharField(max_length=24)),
                ("requested_pickup_date", models.DateField(blank=True, null=True)),
                ("planned_pickup_date",   models.DateField(blank=True, null=True)),
                ("shipment",              models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="wave_items",
                    to="shipments.shipment",
                )),
                ("wave",                  models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="items",
                    to="pallets.palletwave",
                )),
            ],
            options={"ordering": ["id"]},
        ),
        migrations.AddConstraint(
            model_name="palletwaveitem",
            constraint=models.UniqueConstraint(fields=("wave", "shipment"), name="wave_item_unique"),
        ),
    ]
