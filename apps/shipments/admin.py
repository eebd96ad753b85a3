from django.contrib import admin
from .models import Shipment, Package, ShipperDefaults


class PackageInline(admin.TabularInline):
    model  = Package
    extra  = 0


@admin.register(Shipment)
class ShipmentAdmin(admin.ModelAdmin):
    list_display    = ("human_id", "status", "email_cliente", "formato_sped", "colli_n",
                       "peso_reale_kg", "carrier", "tracking_code", "created_at")
    list_filter     = ("status", "formato_sped", "tipo_spedizione", "fatt_valuta")
    search_fields   = ("human_id", "email_cliente", "tracking_code")
    readonly_fields = ("id", "human_id", "colli_n", "peso_reale_kg", "created_at", "updated_at")
    inlines         = [PackageInline]


@admin.register(ShipperDefaults)
class ShipperDefaultsAdmin(admin.ModelAdmin):
    list_display  = ("email_norm", "updated_at")
    search_fields = ("email_norm", "mittente__rs")
