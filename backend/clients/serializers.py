from rest_framework import serializers
from .models import (
    Client, ClientContact, Service, Colleague, Engagement, EngagementService,
    EngagementAssignment, ExtraWork, EngagementHistoryEntry, ActivityReward
)


class ColleagueSerializer(serializers.ModelSerializer):
    class Meta:
        model = Colleague
        fields = [
            'id', 'user', 'full_name', 'email', 'phone', 'position', 'seniority', 'is_freelancer',
            'internal_hourly_cost', 'monthly_fixed_cost', 'capacity_hours_per_month', 'status',
            'birthday', 'notes', 'created_at', 'updated_at'
        ]


class ClientContactSerializer(serializers.ModelSerializer):
    class Meta:
        model = ClientContact
        fields = [
            'id', 'client', 'name', 'position', 'email', 'phone', 'is_primary',
            'is_decision_maker', 'notes', 'created_at', 'updated_at'
        ]


class ClientSerializer(serializers.ModelSerializer):
    sales_representative_name = serializers.CharField(source='sales_representative.full_name', read_only=True)
    contacts = ClientContactSerializer(many=True, read_only=True)

    class Meta:
        model = Client
        fields = [
            'id', 'name', 'brand_name', 'ico', 'dic', 'website', 'country', 'industry', 'status', 'tier',
            'sales_representative', 'sales_representative_name', 'billing_street', 'billing_city',
            'billing_zip', 'billing_country', 'billing_email', 'acquisition_channel', 'start_date',
            'end_date', 'notes', 'pinned_notes', 'contacts', 'created_by', 'created_at', 'updated_at'
        ]
        read_only_fields = ['created_by']


class ServiceSerializer(serializers.ModelSerializer):
    is_creative_boost = serializers.BooleanField(read_only=True)

    class Meta:
        model = Service
        fields = [
            'id', 'code', 'name', 'service_type', 'category', 'description', 'external_url',
            'base_price', 'currency', 'tier_pricing', 'is_active', 'is_creative_boost',
            'created_at', 'updated_at'
        ]

    def validate_tier_pricing(self, value):
        tiers = {choice for choice, _ in Service.TIER_CHOICES}
        if not isinstance(value, list):
            raise serializers.ValidationError("Tier pricing must be a list")
        for entry in value:
            if not isinstance(entry, dict) or entry.get('tier') not in tiers:
                raise serializers.ValidationError(f"Invalid tier pricing entry: {entry}")
        return value


class EngagementServiceSerializer(serializers.ModelSerializer):
    service_code = serializers.CharField(source='service.code', read_only=True)
    invoice_number = serializers.CharField(source='invoice.invoice_number', read_only=True)
    upsold_by_name = serializers.CharField(source='upsold_by.full_name', read_only=True)

    class Meta:
        model = EngagementService
        fields = [
            'id', 'engagement', 'service', 'service_code', 'name', 'price', 'billing_type', 'currency',
            'is_active', 'notes', 'selected_tier', 'creative_boost_min_credits',
            'creative_boost_max_credits', 'creative_boost_price_per_credit', 'invoicing_status',
            'invoiced_at', 'invoiced_in_period', 'invoice', 'invoice_number', 'upsold_by',
            'upsold_by_name', 'upsell_commission_percent', 'commission_approved_at',
            'commission_approved_by', 'created_at', 'updated_at'
        ]
        read_only_fields = [
            'invoiced_at', 'invoiced_in_period', 'invoice', 'commission_approved_at', 'commission_approved_by'
        ]


class EngagementAssignmentSerializer(serializers.ModelSerializer):
    colleague_name = serializers.CharField(source='colleague.full_name', read_only=True)

    class Meta:
        model = EngagementAssignment
        fields = [
            'id', 'engagement', 'engagement_service', 'colleague', 'colleague_name',
            'role_on_engagement', 'cost_model', 'hourly_cost', 'monthly_cost',
            'percentage_of_revenue', 'creative_boost_reward_per_credit', 'start_date', 'end_date',
            'notes', 'created_at', 'updated_at'
        ]

    def validate(self, data):
        engagement = data.get('engagement') or getattr(self.instance, 'engagement', None)
        engagement_service = data.get('engagement_service')
        if engagement_service and engagement and engagement_service.engagement_id != engagement.pk:
            raise serializers.ValidationError("Engagement service belongs to a different engagement")
        return data


class EngagementSerializer(serializers.ModelSerializer):
    client_name = serializers.StringRelatedField(source='client')
    engagement_services = EngagementServiceSerializer(many=True, read_only=True)
    assignments = EngagementAssignmentSerializer(many=True, read_only=True)

    class Meta:
        model = Engagement
        fields = [
            'id', 'client', 'client_name', 'contact_person', 'name', 'type', 'billing_model',
            'currency', 'monthly_fee', 'one_off_fee', 'status', 'start_date', 'end_date',
            'notice_period_months', 'platforms', 'notes', 'offer_url', 'contract_url',
            'engagement_services', 'assignments', 'created_at', 'updated_at'
        ]

    def validate(self, data):
        start_date = data.get('start_date', getattr(self.instance, 'start_date', None))
        end_date = data.get('end_date', getattr(self.instance, 'end_date', None))
        if start_date and end_date and end_date < start_date:
            raise serializers.ValidationError({'end_date': "End date cannot be before start date"})
        client = data.get('client') or getattr(self.instance, 'client', None)
        contact = data.get('contact_person')
        if contact and client and contact.client_id != client.pk:
            raise serializers.ValidationError({'contact_person': "Contact belongs to a different client"})
        return data


class ExtraWorkSerializer(serializers.ModelSerializer):
    client_name = serializers.StringRelatedField(source='client')
    colleague_name = serializers.CharField(source='colleague.full_name', read_only=True)
    approved_by_username = serializers.CharField(source='approved_by.username', read_only=True)

    class Meta:
        model = ExtraWork
        fields = [
            'id', 'client', 'client_name', 'engagement', 'colleague', 'colleague_name', 'name',
            'description', 'amount', 'currency', 'hours_worked', 'hourly_rate', 'work_date',
            'billing_period', 'status', 'approval_date', 'approved_by', 'approved_by_username',
            'invoice', 'invoice_number', 'invoiced_at', 'upsold_by', 'upsell_commission_percent',
            'commission_approved_at', 'commission_approved_by',
            'notes', 'created_at', 'updated_at'
        ]
        # Status only moves through the advance endpoint
        read_only_fields = [
            'status', 'approval_date', 'approved_by', 'invoice', 'invoice_number', 'invoiced_at',
            'commission_approved_at', 'commission_approved_by',
        ]

    def validate_billing_period(self, value):
        parts = value.split('-')
        if len(parts) != 2 or len(parts[0]) != 4 or not all(p.isdigit() for p in parts) or not 1 <= int(parts[1]) <= 12:
            raise serializers.ValidationError("Billing period must be in YYYY-MM format")
        return f"{parts[0]}-{int(parts[1]):02d}"


class EngagementHistoryEntrySerializer(serializers.ModelSerializer):
    changed_by_username = serializers.CharField(source='changed_by.username', read_only=True)

    class Meta:
        model = EngagementHistoryEntry
        fields = [
            'id', 'engagement', 'change_type', 'field_name', 'old_value', 'new_value',
            'related_entity_id', 'related_entity_name', 'changed_by', 'changed_by_username', 'created_at'
        ]


class ActivityRewardSerializer(serializers.ModelSerializer):
    colleague_name = serializers.CharField(source='colleague.full_name', read_only=True)

    class Meta:
        model = ActivityReward
        fields = [
            'id', 'colleague', 'colleague_name', 'description', 'billing_type', 'amount', 'hours',
            'hourly_rate', 'activity_date', 'created_by', 'created_at'
        ]
        read_only_fields = ['colleague', 'created_by']

    def validate(self, data):
        billing_type = data.get('billing_type', getattr(self.instance, 'billing_type', 'fixed'))
        if billing_type == 'hourly':
            hours = data.get('hours', getattr(self.instance, 'hours', None))
            hourly_rate = data.get('hourly_rate', getattr(self.instance, 'hourly_rate', None))
            if hours is None or hourly_rate is None:
                raise serializers.ValidationError("Hourly rewards need hours and an hourly rate")
        elif data.get('amount', getattr(self.instance, 'amount', None)) is None:
            raise serializers.ValidationError({'amount': "Fixed rewards need an amount"})
        return data
