"""Payment serializers."""
from rest_framework import serializers
from .models import DutiesPayment

# Checkout form posts camelCase; both spellings are accepted
CAMEL_ALIASES = {
    "customerEmail": "customer_email",
    "shipmentId":    "shipment_id",
    "bottleCount":   "bottle_count",
    "goodsValue":    "goods_value",
    "wineryName":    "winery_name",
    "wineryEmail":   "winery_email",
}


class DutiesQuoteSerializer(serializers.Serializer):
    bottle_count = serializers.IntegerField()
    goods_value  = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)

    def to_internal_value(self, data):
        return super().to_internal_value(_snake(data))


class CheckoutSerializer(serializers.Serializer):
    customer_email = serializers.EmailField(required=False, allow_blank=True)
    winery_name    = serializers.CharField(required=False, allow_blank=True, max_length=200)
    winery_email   = serializers.EmailField(required=False, allow_blank=True)
    bottle_count   = serializers.IntegerField(required=False, allow_null=True)
    goods_value    = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0,
                                              required=False, allow_null=True)
    amount         = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0,
                                              required=False, allow_null=True)
    shipment_id    = serializers.UUIDField(required=False, allow_null=True)
    description    = serializers.CharField(required=False, allow_blank=True, max_length=500)

    def to_internal_value(self, data):
        return super().to_internal_value(_snake(data))


class DutiesPaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model  = DutiesPayment
        fields = ["id", "shipment", "winery_name", "winery_email", "customer_email",
                  "bottle_count", "goods_value", "shipping", "duties", "stripe_fee",
                  "total", "currency", "checkout_session_id", "status", "paid_at",
                  "created_at", "updated_at"]


def _snake(data):
    if not hasattr(data, "items"):
        return data
    return {CAMEL_ALIASES.get(k, k): v for k, v in data.items()}
