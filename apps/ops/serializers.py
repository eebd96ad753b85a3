from rest_framework import serializers
from .models import BackofficeLink


class BackofficeLinkSerializer(serializers.ModelSerializer):
    class Meta:
        model  = BackofficeLink
        fields = ["id", "category", "label", "url", "description", "sort_order", "is_active", "created_at"]
        read_only_fields = ["id", "created_at"]
