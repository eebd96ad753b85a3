import django.db.models.deletion
import uuid
import apps.authentication.models
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("auth", "0012_alter_user_first_name_max_length"),
    ]

    operations = [
        migrations.CreateModel(
            name="User",
            fields=[
                ("password",     models.CharField(max_length=128, verbose_name="password")),
                ("last_login",   models.DateTimeField(blank=True, null=True, verbose_name="last login")),
                ("is_superuser", models.BooleanField(
                    default=False,
                    help_text="Designates that this user has all permissions without explicitly assigning them.",
                    verbose_name="superuser status",
                )),
                ("id",         models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("email",      models.EmailField(max_length=254, unique=True)),
                ("full_name",  models.CharField(blank=True, max_length=120)),
                ("phone",      models.CharField(blank=True, max_length=30)),
                ("is_active",  models.BooleanField(default=True)),
                ("is_staff",   models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("groups",     models.ManyToManyField(
                    blank=True,
                    help_text="The groups this user belongs to. A user will get all permissions granted to each of their groups.",
                    related_name="user_set",
                    related_query_name="user",
                    to="auth.group",
                    verbose_name="groups",
                )),
                ("user_permissions", models.ManyToManyField(
                    blank=True,
                    help_text="Specific permissions for this user.",
                    related_name="user_set",
                    related_query_name="user",
                    to="auth.permission",
                    verbose_name="user permissions",
                )),
            ],
            options={"verbose_name": "User"},
            managers=[("objects", apps.authentication.models.UserManager())],
        ),
        migrations.CreateModel(
            name="StaffUser",
            fields=[
                ("id",         models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("role",       models.CharField(
                    choices=[("admin", "Admin"), ("staff", "Staff"), ("operator", "Operator")],
                    default="staff",
                    max_length=10,
                )),
                ("enabled",    models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("user",       models.OneToOneField(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="staff_profile",
                    to="authentication.user",
                )),
            ],
            options={"verbose_name": "Staff user"},
        ),
    ]
