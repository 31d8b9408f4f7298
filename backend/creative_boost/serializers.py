from rest_framework import serializers
from backend.clients.models import Colleague
from .models import OutputType, CreativeBoostClient, ClientMonth, ClientMonthOutput, SettingsChange
from .credits import output_row_credits


class OutputTypeSerializer(serializers.ModelSerializer):
    category_group = serializers.CharField(read_only=True)

    class Meta:
        model = OutputType
        fields = [
            'id', 'name', 'category', 'category_group', 'base_credits', 'description',
            'is_active', 'sort_order', 'created_at', 'updated_at'
        ]


class CreativeBoostClientSerializer(serializers.ModelSerializer):
    client_name = serializers.CharField(source='client.name', read_only=True)
    client_brand = serializers.CharField(source='client.brand_name', read_only=True)

    class Meta:
        model = CreativeBoostClient
        fields = [
            'id', 'client', 'client_name', 'client_brand', 'is_active', 'default_min_credits',
            'default_max_credits', 'default_price_per_credit', 'created_at', 'updated_at'
        ]


class ClientMonthSerializer(serializers.ModelSerializer):
    client_name = serializers.CharField(source='client.name', read_only=True)
    colleague_name = serializers.CharField(source='colleague.full_name', read_only=True)

    class Meta:
        model = ClientMonth
        fields = [
            'id', 'client', 'client_name', 'year', 'month', 'min_credits', 'max_credits',
            'price_per_credit', 'colleague', 'colleague_name', 'status', 'engagement_service',
            'engagement', 'invoice_amount', 'invoice_note', 'created_at', 'updated_at'
        ]
        read_only_fields = ['client', 'year', 'month']


class ClientMonthCreateSerializer(serializers.Serializer):
    """Input for adding a client to a month"""
    client = serializers.IntegerField()
    year = serializers.IntegerField(min_value=2000, max_value=2100)
    month = serializers.IntegerField(min_value=1, max_value=12)
    min_credits = serializers.DecimalField(max_digits=8, decimal_places=2, required=False, min_value=0)
    max_credits = serializers.DecimalField(max_digits=8, decimal_places=2, required=False, min_value=0)
    price_per_credit = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, min_value=0)
    colleague = serializers.PrimaryKeyRelatedField(queryset=Colleague.objects.all(), required=False, allow_null=True)


class ClientMonthOutputSerializer(serializers.ModelSerializer):
    output_type_name = serializers.CharField(source='output_type.name', read_only=True)
    colleague_name = serializers.CharField(source='colleague.full_name', read_only=True)
    normal_credits = serializers.SerializerMethodField()
    express_credits = serializers.SerializerMethodField()
    total_credits = serializers.SerializerMethodField()

    class Meta:
        model = ClientMonthOutput
        fields = [
            'id', 'client', 'year', 'month', 'output_type', 'output_type_name', 'normal_count',
            'express_count', 'colleague', 'colleague_name', 'normal_credits', 'express_credits',
            'total_credits', 'created_at', 'updated_at'
        ]

    def get_normal_credits(self, obj):
        return str(output_row_credits(obj).normal_credits)

    def get_express_credits(self, obj):
        return str(output_row_credits(obj).express_credits)

    def get_total_credits(self, obj):
        return str(output_row_credits(obj).total_credits)


class OutputUpdateSerializer(serializers.Serializer):
    """Input for upserting output counts; negative counts are clamped to 0"""
    client = serializers.IntegerField()
    output_type = serializers.IntegerField()
    year = serializers.IntegerField(min_value=2000, max_value=2100)
    month = serializers.IntegerField(min_value=1, max_value=12)
    normal_count = serializers.IntegerField(required=False)
    express_count = serializers.IntegerField(required=False)
    colleague = serializers.PrimaryKeyRelatedField(queryset=Colleague.objects.all(), required=False, allow_null=True)


class SettingsChangeSerializer(serializers.ModelSerializer):
    class Meta:
        model = SettingsChange
        fields = [
            'id', 'client_month', 'client', 'year', 'month', 'change_type', 'field_name',
            'old_value', 'new_value', 'changed_by', 'changed_by_name', 'changed_at'
        ]
