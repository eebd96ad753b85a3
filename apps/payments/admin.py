from django.contrib import admin
from .models import DutiesPayment


@admin.register(DutiesPayment)
class DutiesPaymentAdmin(admin.ModelAdmin):
    list_display  = ("customer_email", "winery_name", "bottle_count", "total", "currency", "status", "paid_at", "created_at")
    list_filter   = ("status", "currency")
    search_fields = ("customer_email", "winery_email", "checkout_session_id")
    readonly_fields = ("id", "checkout_session_id", "paid_at", "created_at", "updated_at")
