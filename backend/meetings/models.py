from django.db import models
from django.utils import timezone
from backend.core.models import User
from backend.clients.models import Client, Colleague, Engagement


class Meeting(models.Model):
    TYPE_CHOICES = [
        ('internal', 'Internal'),
        ('client', 'Client'),
    ]
    STATUS_CHOICES = [
        ('scheduled', 'Scheduled'),
        ('in_progress', 'In Progress'),
        ('completed', 'Completed'),
        ('cancelled', 'Cancelled'),
    ]

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='internal')
    client = models.ForeignKey(Client, on_delete=models.SET_NULL, null=True, blank=True, related_name='meetings')
    engagement = models.ForeignKey(Engagement, on_delete=models.SET_NULL, null=True, blank=True, related_name='meetings')
    scheduled_at = models.DateTimeField()
    duration_minutes = models.PositiveIntegerField(default=60)
    location = models.CharField(max_length=255, blank=True, null=True)
    meeting_link = models.URLField(blank=True, null=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='scheduled')
    agenda = models.TextField(blank=True, null=True)
    transcript = models.TextField(blank=True, null=True)
    summary = models.TextField(blank=True, null=True)
    notes = models.TextField(blank=True, null=True)
    calendar_invites_sent_at = models.DateTimeField(null=True, blank=True)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='created_meetings')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.title

    class Meta:
        db_table = 'meetings'
        ordering = ['scheduled_at']


class MeetingParticipant(models.Model):
    ROLE_CHOICES = [
        ('organizer', 'Organizer'),
        ('required', 'Required'),
        ('optional', 'Optional'),
    ]
    ATTENDANCE_CHOICES = [
        ('pending', 'Pending'),
        ('confirmed', 'Confirmed'),
        ('declined', 'Declined'),
        ('attended', 'Attended'),
    ]

    meeting = models.ForeignKey(Meeting, on_delete=models.CASCADE, related_name='participants')
    colleague = models.ForeignKey(Colleague, on_delete=models.CASCADE, null=True, blank=True, related_name='meeting_participations')
    external_name = models.CharField(max_length=200, blank=True, null=True)
    external_email = models.EmailField(blank=True, null=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default='required')
    attendance_status = models.CharField(max_length=20, choices=ATTENDANCE_CHOICES, default='pending')
    created_at = models.DateTimeField(auto_now_add=True)

    @property
    def display_name(self):
        return self.colleague.full_name if self.colleague_id else self.external_name

    class Meta:
        db_table = 'meeting_participants'
        ordering = ['id']


class MeetingTask(models.Model):
    STATUS_CHOICES = [
        ('todo', 'To Do'),
        ('in_progress', 'In Progress'),
        ('done', 'Done'),
    ]
    PRIORITY_CHOICES = [
        ('low', 'Low'),
        ('medium', 'Medium'),
        ('high', 'High'),
    ]

    meeting = models.ForeignKey(Meeting, on_delete=models.CASCADE, related_name='tasks')
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    assigned_to = models.ForeignKey(Colleague, on_delete=models.SET_NULL, null=True, blank=True, related_name='meeting_tasks')
    due_date = models.DateField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='todo')
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default='medium')
    completed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.title

    def save(self, *args, **kwargs):
        # completed_at follows the done status
        if self.status == 'done' and not self.completed_at:
            self.completed_at = timezone.now()
        elif self.status != 'done':
            self.completed_at = None
        super().save(*args, **kwargs)

    class Meta:
        db_table = 'meeting_tasks'
        ordering = ['due_date', 'id']
