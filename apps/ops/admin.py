from django.contrib import admin
from .models import BackofficeLink


@admin.register(BackofficeLink)
class BackofficeLinkAdmin(admin.ModelAdmin):
    list_display  = ("label", "category", "url", "sort_order", "is_active")
    list_filter   = ("category", "is_active")
    search_fields = ("label", "url", "description")
