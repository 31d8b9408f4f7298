from rest_framework import serializers
from .models import Lead, LeadNote, LeadHistoryEntry, LeadStageTransition


class LeadNoteSerializer(serializers.ModelSerializer):
    author_username = serializers.CharField(source='author.username', read_only=True)

    class Meta:
        model = LeadNote
        fields = ['id', 'lead', 'text', 'author', 'author_username', 'created_at']
        read_only_fields = ['lead', 'author']


class LeadHistoryEntrySerializer(serializers.ModelSerializer):
    changed_by_username = serializers.CharField(source='changed_by.username', read_only=True)

    class Meta:
        model = LeadHistoryEntry
        fields = ['id', 'lead', 'change_type', 'field_name', 'old_value', 'new_value',
                  'changed_by', 'changed_by_username', 'created_at']


class LeadStageTransitionSerializer(serializers.ModelSerializer):
    class Meta:
        model = LeadStageTransition
        fields = ['id', 'lead', 'from_stage', 'to_stage', 'transition_value', 'confirmed_at', 'confirmed_by', 'created_at']


class PotentialServiceSerializer(serializers.Serializer):
    service_id = serializers.IntegerField()
    name = serializers.CharField(required=False, allow_blank=True)
    selected_tier = serializers.ChoiceField(choices=['growth', 'pro', 'elite'], required=False, allow_null=True)
    price = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    currency = serializers.CharField(max_length=3, required=False)
    billing_type = serializers.ChoiceField(choices=['monthly', 'one_off'], default='monthly')

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        # Stored as JSON
        if value.get('price') is not None:
            value['price'] = str(value['price'])
        return value


class LeadSerializer(serializers.ModelSerializer):
    owner_username = serializers.CharField(source='owner.username', read_only=True)
    stage_label = serializers.CharField(source='get_stage_display', read_only=True)
    potential_services = serializers.ListField(child=PotentialServiceSerializer(), required=False)
    is_converted = serializers.BooleanField(read_only=True)

    class Meta:
        model = Lead
        fields = [
            'id', 'company_name', 'ico', 'dic', 'website', 'industry', 'billing_street', 'billing_city',
            'billing_zip', 'billing_country', 'billing_email', 'contact_name', 'contact_position',
            'contact_email', 'contact_phone', 'stage', 'stage_label', 'owner', 'owner_username',
            'source', 'source_custom', 'client_message', 'ad_spend_monthly', 'summary',
            'potential_services', 'offer_type', 'estimated_price', 'currency', 'probability_percent',
            'offer_url', 'offer_created_at', 'offer_sent_at', 'offer_sent_by', 'access_request_sent_at',
            'access_request_platforms', 'access_received_at', 'onboarding_form_sent_at',
            'onboarding_form_url', 'onboarding_form_completed_at', 'contract_url', 'contract_created_at',
            'contract_sent_at', 'contract_signed_at', 'converted_to_client', 'converted_to_engagement',
            'converted_at', 'is_converted', 'created_by', 'created_at', 'updated_at'
        ]
        # Stage moves through the stage endpoint, conversion through convert
        read_only_fields = ['stage', 'offer_sent_by', 'converted_to_client', 'converted_to_engagement',
                            'converted_at', 'created_by']

    def validate_probability_percent(self, value):
        if value > 100:
            raise serializers.ValidationError("Probability cannot exceed 100%")
        return value


class StageChangeSerializer(serializers.Serializer):
    stage = serializers.ChoiceField(choices=Lead.STAGE_CHOICES)
    confirm = serializers.BooleanField(default=False)


class LeadConversionSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200, required=False)
    start_date = serializers.DateField(required=False)
    monthly_fee = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    status = serializers.ChoiceField(choices=['planned', 'active'], required=False)
