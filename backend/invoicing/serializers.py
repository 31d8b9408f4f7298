from rest_framework import serializers
from backend.clients.models import Engagement
from .models import IssuedInvoice


class InvoiceLineSerializer(serializers.Serializer):
    source = serializers.ChoiceField(choices=['engagement', 'creative_boost', 'extra_work', 'one_off', 'manual'])
    engagement_id = serializers.IntegerField(required=False, allow_null=True)
    engagement_service_id = serializers.IntegerField(required=False, allow_null=True)
    extra_work_id = serializers.IntegerField(required=False, allow_null=True)
    description = serializers.CharField()
    source_amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    period_start = serializers.DateField(required=False, allow_null=True)
    period_end = serializers.DateField(required=False, allow_null=True)
    prorated_days = serializers.IntegerField(required=False, allow_null=True)
    total_days_in_month = serializers.IntegerField(required=False, allow_null=True)
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2)
    quantity = serializers.DecimalField(max_digits=8, decimal_places=2, default=1, min_value=0)
    adjustment_amount = serializers.DecimalField(max_digits=12, decimal_places=2, default=0)
    adjustment_reason = serializers.CharField(required=False, allow_blank=True, default='')
    hours = serializers.DecimalField(max_digits=8, decimal_places=2, required=False, allow_null=True)
    hourly_rate = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True)
    currency = serializers.CharField(max_length=3, required=False)

    def validate(self, data):
        data['final_amount'] = data['unit_price'] * data['quantity'] + data['adjustment_amount']
        return data


class IssueInvoiceSerializer(serializers.Serializer):
    engagement = serializers.PrimaryKeyRelatedField(queryset=Engagement.objects.select_related('client'))
    year = serializers.IntegerField(min_value=2000, max_value=2100)
    month = serializers.IntegerField(min_value=1, max_value=12)
    line_items = InvoiceLineSerializer(many=True, required=False)
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class IssuedInvoiceSerializer(serializers.ModelSerializer):
    client_name = serializers.StringRelatedField(source='client')
    engagement_name = serializers.CharField(source='engagement.name', read_only=True)
    issued_by_username = serializers.CharField(source='issued_by.username', read_only=True)
    period = serializers.SerializerMethodField()

    class Meta:
        model = IssuedInvoice
        fields = [
            'id', 'invoice_number', 'engagement', 'engagement_name', 'client', 'client_name',
            'year', 'month', 'period', 'line_items', 'subtotal', 'total_adjustments', 'total_amount',
            'currency', 'status', 'notes', 'issued_by', 'issued_by_username', 'issued_at'
        ]
        read_only_fields = [
            'invoice_number', 'engagement', 'client', 'year', 'month', 'line_items', 'subtotal',
            'total_adjustments', 'total_amount', 'currency', 'issued_by', 'issued_at'
        ]

    def get_period(self, obj):
        return f"{obj.year}-{obj.month:02d}"
