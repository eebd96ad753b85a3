from django.apps import AppConfig


class PalletsConfig(AppConfig):
    name = "apps.pallets"
    label = "pallets"
    default_auto_field = "django.db.models.BigAutoField"
