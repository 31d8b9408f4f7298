from django.contrib import admin
from .models import Meeting, MeetingParticipant, MeetingTask


class MeetingParticipantInline(admin.TabularInline):
    model = MeetingParticipant
    extra = 0


class MeetingTaskInline(admin.TabularInline):
    model = MeetingTask
    extra = 0
    readonly_fields = ['completed_at']


@admin.register(Meeting)
class MeetingAdmin(admin.ModelAdmin):
    list_display = ['title', 'type', 'client', 'scheduled_at', 'duration_minutes', 'status']
    list_filter = ['type', 'status']
    search_fields = ['title', 'client__name']
    inlines = [MeetingParticipantInline, MeetingTaskInline]


@admin.register(MeetingTask)
class MeetingTaskAdmin(admin.ModelAdmin):
    list_display = ['title', 'meeting', 'assigned_to', 'due_date', 'status', 'priority', 'completed_at']
    list_filter = ['status', 'priority']
