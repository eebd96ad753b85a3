from django.contrib import admin
from .models import Quote, QuoteOption


class QuoteOptionInline(admin.StackedInline):
    model  = QuoteOption
    extra  = 0


@admin.register(Quote)
class QuoteAdmin(admin.ModelAdmin):
    list_display    = ("human_id", "status", "email_cliente", "tipo_spedizione", "incoterm", "created_at")
    list_filter     = ("status", "tipo_spedizione")
    search_fields   = ("human_id", "email_cliente", "public_token")
    readonly_fields = ("id", "human_id", "accepted_option_id", "created_at", "updated_at")
    inlines         = [QuoteOptionInline]
