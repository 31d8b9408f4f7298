from rest_framework import serializers
from .models import Applicant, ApplicantNote


class ApplicantNoteSerializer(serializers.ModelSerializer):
    author_username = serializers.CharField(source='author.username', read_only=True)

    class Meta:
        model = ApplicantNote
        fields = ['id', 'applicant', 'text', 'author', 'author_username', 'created_at']
        read_only_fields = ['applicant', 'author']


class ApplicantSerializer(serializers.ModelSerializer):
    owner_username = serializers.CharField(source='owner.username', read_only=True)
    stage_label = serializers.CharField(source='get_stage_display', read_only=True)

    class Meta:
        model = Applicant
        fields = [
            'id', 'full_name', 'email', 'phone', 'position', 'cover_letter', 'cv_url', 'video_url',
            'stage', 'stage_label', 'owner', 'owner_username', 'source', 'source_custom', 'ico',
            'company_name', 'dic', 'hourly_rate', 'billing_street', 'billing_city', 'billing_zip',
            'bank_account', 'onboarding_sent_at', 'onboarding_completed_at', 'converted_to_colleague',
            'created_at', 'updated_at'
        ]
        read_only_fields = ['stage', 'converted_to_colleague']


class ApplicantStageSerializer(serializers.Serializer):
    stage = serializers.ChoiceField(choices=Applicant.STAGE_CHOICES)


class HireSerializer(serializers.Serializer):
    position = serializers.CharField(max_length=200, required=False)
    seniority = serializers.ChoiceField(choices=['junior', 'mid', 'senior', 'partner'], default='mid')
