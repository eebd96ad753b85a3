"""Shipment serializers."""

from rest_framework import serializers
from .models import Shipment, Package, PARTY_FIELDS


class PartySerializer(serializers.Serializer):
    """Sender / recipient / billing block."""
    rs        = serializers.CharField(required=False, allow_blank=True, max_length=200)
    referente = serializers.CharField(required=False, allow_blank=True, max_length=120)
    telefono  = serializers.CharField(required=False, allow_blank=True, max_length=40)
    piva      = serializers.CharField(required=False, allow_blank=True, max_length=40)
    paese     = serializers.CharField(required=False, allow_blank=True, max_length=80)
    citta     = serializers.CharField(required=False, allow_blank=True, max_length=120)
    cap       = serializers.CharField(required=False, allow_blank=True, max_length=20)
    indirizzo = serializers.CharField(required=False, allow_blank=True, max_length=255)

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        return {key: value.get(key, "") for key in PARTY_FIELDS}


class PackageSerializer(serializers.ModelSerializer):
    class Meta:
        model  = Package
        fields = ["id", "contenuto", "peso_reale_kg", "lato1_cm", "lato2_cm", "lato3_cm"]


class ShipmentCreateSerializer(serializers.Serializer):
    email_cliente      = serializers.EmailField(required=False, allow_blank=True)
    tipo_spedizione    = serializers.ChoiceField(choices=Shipment.Tipo.choices, default=Shipment.Tipo.B2B)
    incoterm           = serializers.CharField(required=False, allow_blank=True, max_length=10)
    declared_value     = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0,
                                                  required=False, allow_null=True)
    fatt_valuta        = serializers.ChoiceField(choices=Shipment.Valuta.choices, default=Shipment.Valuta.EUR)
    giorno_ritiro      = serializers.DateField(required=False, allow_null=True)
    note_ritiro        = serializers.CharField(required=False, allow_blank=True)
    formato_sped       = serializers.ChoiceField(choices=Shipment.Formato.choices, default=Shipment.Formato.PACCO)
    contenuto_generale = serializers.CharField(required=False, allow_blank=True, max_length=255)
    mittente           = PartySerializer(required=False)
    destinatario       = PartySerializer()
    fatturazione       = PartySerializer(required=False)
    dest_abilitato_import = serializers.BooleanField(required=False, allow_null=True)
    colli              = serializers.ListField(child=serializers.DictField(), min_length=1)


class ShipmentDetailSerializer(serializers.ModelSerializer):
    packages = PackageSerializer(many=True, read_only=True)

    class Meta:
        model  = Shipment
        fields = [
            "id", "human_id", "status", "email_cliente",
            "tipo_spedizione", "incoterm", "declared_value", "fatt_valuta",
            "giorno_ritiro", "note_ritiro", "formato_sped", "contenuto_generale",
            "mittente", "destinatario", "fatturazione", "dest_abilitato_import",
            "carrier", "tracking_code", "attachments",
            "colli_n", "peso_reale_kg", "packages",
            "created_at", "updated_at",
        ]


class ShipmentListSerializer(serializers.ModelSerializer):
    class Meta:
        model  = Shipment
        fields = [
            "id", "human_id", "status", "email_cliente", "tipo_spedizione",
            "formato_sped", "giorno_ritiro", "mittente", "destinatario",
            "carrier", "tracking_code", "colli_n", "peso_reale_kg", "created_at",
        ]


class TrackingSerializer(serializers.Serializer):
    carrier       = serializers.CharField(required=False, allow_blank=True, max_length=80)
    tracking_code = serializers.CharField(required=False, allow_blank=True, max_length=80)


class ShipmentStatusSerializer(serializers.Serializer):
    status = serializers.CharField(required=False, allow_blank=True, default="")


class ShipperDefaultsSerializer(serializers.Serializer):
    mittente = PartySerializer()
