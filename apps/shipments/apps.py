from django.apps import AppConfig


class ShipmentsConfig(AppConfig):
    name = "apps.shipments"
    label = "shipments"
    default_auto_field = "django.db.models.BigAutoField"
