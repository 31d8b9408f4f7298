from rest_framework import serializers
from .models import Meeting, MeetingParticipant, MeetingTask


class MeetingParticipantSerializer(serializers.ModelSerializer):
    display_name = serializers.CharField(read_only=True)

    class Meta:
        model = MeetingParticipant
        fields = ['id', 'meeting', 'colleague', 'external_name', 'external_email', 'display_name',
                  'role', 'attendance_status', 'created_at']
        read_only_fields = ['meeting']

    def validate(self, data):
        colleague = data.get('colleague', getattr(self.instance, 'colleague', None))
        external_name = data.get('external_name', getattr(self.instance, 'external_name', None))
        if not colleague and not external_name:
            raise serializers.ValidationError("Participant needs a colleague or an external name")
        return data


class MeetingTaskSerializer(serializers.ModelSerializer):
    assigned_to_name = serializers.CharField(source='assigned_to.full_name', read_only=True)

    class Meta:
        model = MeetingTask
        fields = ['id', 'meeting', 'title', 'description', 'assigned_to', 'assigned_to_name', 'due_date',
                  'status', 'priority', 'completed_at', 'created_at', 'updated_at']
        read_only_fields = ['meeting', 'completed_at']


class MeetingSerializer(serializers.ModelSerializer):
    client_name = serializers.StringRelatedField(source='client')
    participants = MeetingParticipantSerializer(many=True, read_only=True)
    tasks = MeetingTaskSerializer(many=True, read_only=True)

    class Meta:
        model = Meeting
        fields = [
            'id', 'title', 'description', 'type', 'client', 'client_name', 'engagement', 'scheduled_at',
            'duration_minutes', 'location', 'meeting_link', 'status', 'agenda', 'transcript', 'summary',
            'notes', 'calendar_invites_sent_at', 'participants', 'tasks', 'created_by', 'created_at', 'updated_at'
        ]
        read_only_fields = ['calendar_invites_sent_at', 'created_by']

    def validate(self, data):
        meeting_type = data.get('type', getattr(self.instance, 'type', 'internal'))
        client = data.get('client', getattr(self.instance, 'client', None))
        if meeting_type == 'client' and not client:
            raise serializers.ValidationError({'client': "Client meetings need a client"})
        engagement = data.get('engagement')
        if engagement and client and engagement.client_id != client.pk:
            raise serializers.ValidationError({'engagement': "Engagement belongs to a different client"})
        return data
