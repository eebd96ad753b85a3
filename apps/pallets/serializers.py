"""Pallet wave serializers."""

from rest_framework import serializers
from apps.shipments.serializers import PackageSerializer
from apps.shipments.models import Shipment
from .models import Carrier, PalletWave, PalletWaveItem


class CarrierSerializer(serializers.ModelSerializer):
    class Meta:
        model  = Carrier
        fields = ["id", "name"]


class WaveCreateSerializer(serializers.Serializer):
    """Shape only; business validation lives in WaveService / the procedure."""
    shipment_ids        = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    planned_pickup_date = serializers.CharField(required=False, allow_blank=True, default="")
    pickup_window       = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    notes               = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    carrier_id          = serializers.CharField(required=False, allow_blank=True, default="")


class WaveStatusSerializer(serializers.Serializer):
    status = serializers.CharField()


class WaveListSerializer(serializers.ModelSerializer):
    carriers = CarrierSerializer(source="carrier", read_only=True)

    class Meta:
        model  = PalletWave
        fields = ["id", "code", "status", "planned_pickup_date", "pickup_window",
                  "notes", "created_at", "carriers"]


class WaveShipmentSerializer(serializers.ModelSerializer):
    packages = PackageSerializer(many=True, read_only=True)
    ldv      = serializers.SerializerMethodField()

    class Meta:
        model  = Shipment
        fields = ["id", "human_id", "status", "mittente", "destinatario", "note_ritiro",
                  "colli_n", "peso_reale_kg", "ldv", "packages"]

    def get_ldv(self, obj):
        return (obj.attachments or {}).get("ldv")


class WaveItemSerializer(serializers.ModelSerializer):
    shipments = WaveShipmentSerializer(source="shipment", read_only=True)

    class Meta:
        model  = PalletWaveItem
        fields = ["shipment_id", "shipment_human_id", "requested_pickup_date",
                  "planned_pickup_date", "shipments"]


class WaveDetailSerializer(WaveListSerializer):
    pallet_wave_items = WaveItemSerializer(source="items", many=True, read_only=True)

    class Meta(WaveListSerializer.Meta):
        fields = WaveListSerializer.Meta.fields + ["pallet_wave_items"]
