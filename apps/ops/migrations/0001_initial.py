import uuid
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="BackofficeLink",
            fields=[
                ("id",          models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("category",    models.CharField(max_length=80)),
                ("label",       models.CharField(max_length=120)),
                ("url",         models.URLField(max_length=500)),
                ("description", models.TextField(blank=True)),
                ("sort_order",  models.IntegerField(default=100)),
                ("is_active",   models.BooleanField(default=True)),
                ("created_at",  models.DateTimeField(auto_now_add=True)),
            ],
            options={"ordering": ["category", "sort_order", "label"]},
        ),
    ]
