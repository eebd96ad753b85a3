from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import User, StaffUser


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display    = ("email", "full_name", "is_active", "is_staff", "created_at")
    list_filter     = ("is_active", "is_staff")
    search_fields   = ("email", "full_name", "phone")
    ordering        = ("-created_at",)
    fieldsets = (
        (None,            {"fields": ("email", "password")}),
        ("Personal Info", {"fields": ("full_name", "phone")}),
        ("Permissions",   {"fields": ("is_active", "is_staff", "is_superuser", "groups", "user_permissions")}),
    )
    add_fieldsets = (
        (None, {"classes": ("wide",), "fields": ("email", "full_name", "password1", "password2")}),
    )


@admin.register(StaffUser)
class StaffUserAdmin(admin.ModelAdmin):
    list_display  = ("user", "role", "enabled", "created_at")
    list_filter   = ("role", "enabled")
    search_fields = ("user__email",)
