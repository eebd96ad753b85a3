from django.contrib import admin
from .models import Carrier, CarrierUser, PalletWave, PalletWaveItem


@admin.register(Carrier)
class CarrierAdmin(admin.ModelAdmin):
    list_display  = ("name", "is_active", "created_at")
    list_filter   = ("is_active",)
    search_fields = ("name",)


@admin.register(CarrierUser)
class CarrierUserAdmin(admin.ModelAdmin):
    list_display  = ("user", "carrier", "role", "enabled")
    list_filter   = ("role", "enabled", "carrier")
    search_fields = ("user__email", "carrier__name")


class PalletWaveItemInline(admin.TabularInline):
    model           = PalletWaveItem
    extra           = 0
    readonly_fields = ("shipment", "shipment_human_id", "requested_pickup_date", "planned_pickup_date")


@admin.register(PalletWave)
class PalletWaveAdmin(admin.ModelAdmin):
    list_display    = ("code", "status", "carrier", "planned_pickup_date", "pickup_window", "created_at")
    list_filter     = ("status", "carrier")
    search_fields   = ("code", "items__shipment_human_id")
    readonly_fields = ("id", "code", "created_by", "created_at", "updated_at")
    inlines         = [PalletWaveItemInline]
