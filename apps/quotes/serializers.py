"""Quote serializers. Staff, customer and public views expose different fields."""

from rest_framework import serializers

from apps.shipments.serializers import PartySerializer
from .models import Quote, QuoteOption


class QuoteCreateSerializer(serializers.Serializer):
    email_cliente   = serializers.EmailField(required=False, allow_blank=True)
    tipo_spedizione = serializers.CharField(required=False, allow_blank=True, max_length=12)
    incoterm        = serializers.CharField(required=False, allow_blank=True, max_length=10)
    valuta          = serializers.CharField(required=False, max_length=3, default="EUR")
    declared_value  = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0,
                                               required=False, allow_null=True)
    data_ritiro     = serializers.DateField(required=False, allow_null=True)
    mittente        = PartySerializer()
    destinatario    = PartySerializer()
    colli           = serializers.ListField(child=serializers.DictField(), min_length=1)
    note            = serializers.CharField(required=False, allow_blank=True)


class ExtraSerializer(serializers.Serializer):
    label  = serializers.CharField(max_length=120)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)


class QuoteOptionUpsertSerializer(serializers.Serializer):
    optionId          = serializers.UUIDField(required=False, allow_null=True)
    label             = serializers.CharField(required=False, allow_blank=True, max_length=80)
    carrier           = serializers.CharField(required=False, allow_blank=True, max_length=80)
    service_name      = serializers.CharField(required=False, allow_blank=True, max_length=120)
    transit_time      = serializers.CharField(required=False, allow_blank=True, max_length=80)
    freight_price     = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    customs_price     = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    extras            = ExtraSerializer(many=True, required=False, allow_null=True)
    total_price       = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    currency          = serializers.CharField(required=False, max_length=3)
    public_notes      = serializers.CharField(required=False, allow_blank=True)
    visible_to_client = serializers.BooleanField(required=False)
    internal_cost     = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    internal_profit   = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    internal_notes    = serializers.CharField(required=False, allow_blank=True)
    status            = serializers.ChoiceField(choices=QuoteOption.Status.choices, required=False)


class PublicOptionSerializer(serializers.ModelSerializer):
    """What a customer may see of an option."""
    class Meta:
        model  = QuoteOption
        fields = [
            "id", "label", "carrier", "service_name", "transit_time",
            "freight_price", "customs_price", "extras", "total_price", "currency",
            "public_notes", "status", "sent_at", "accepted_at",
        ]


class StaffOptionSerializer(serializers.ModelSerializer):
    class Meta:
        model  = QuoteOption
        fields = PublicOptionSerializer.Meta.fields + [
            "visible_to_client", "internal_cost", "internal_profit", "internal_notes",
            "created_at", "updated_at",
        ]


class QuotePublicSerializer(serializers.ModelSerializer):
    options = serializers.SerializerMethodField()

    class Meta:
        model  = Quote
        fields = [
            "id", "human_id", "status", "tipo_spedizione", "incoterm", "valuta",
            "declared_value", "data_ritiro", "mittente", "destinatario", "colli",
            "note", "accepted_option_id", "created_at", "options",
        ]

    def get_options(self, obj):
        visible = obj.options.filter(visible_to_client=True)
        return PublicOptionSerializer(visible, many=True).data


class QuoteStaffSerializer(serializers.ModelSerializer):
    options = StaffOptionSerializer(many=True, read_only=True)

    class Meta:
        model  = Quote
        fields = QuotePublicSerializer.Meta.fields + ["email_cliente", "public_token", "updated_at"]


class QuoteListSerializer(serializers.ModelSerializer):
    class Meta:
        model  = Quote
        fields = [
            "id", "human_id", "created_at", "email_cliente", "tipo_spedizione",
            "incoterm", "status", "mittente", "destinatario",
        ]
