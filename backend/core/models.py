from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """CRM user; identity itself comes from the hosted auth provider"""
    ROLE_CHOICES = [
        ('admin', 'Admin'),
        ('management', 'Management'),
        ('project_manager', 'Project Manager'),
        ('specialist', 'Specialist'),
        ('finance', 'Finance'),
    ]
    FINANCIAL_ROLES = ('admin', 'management', 'finance')

    phone = models.CharField(max_length=20, blank=True, null=True)
    role = models.CharField(max_length=30, choices=ROLE_CHOICES, default='specialist')
    can_see_financials = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def has_financial_access(self):
        return self.is_superuser or self.can_see_financials or self.role in self.FINANCIAL_ROLES

    @property
    def display_name(self):
        return self.get_full_name() or self.username

    class Meta:
        db_table = 'users'


class AuditLog(models.Model):
    """Audit log for critical operations"""
    ACTION_CHOICES = [
        ('create', 'Create'),
        ('update', 'Update'),
        ('delete', 'Delete'),
        ('stage_change', 'Stage Change'),
        ('lead_convert', 'Lead Converted'),
        ('applicant_hire', 'Applicant Hired'),
        ('extra_work_advance', 'Extra Work Advanced'),
        ('invoice_issue', 'Invoice Issued'),
        ('cb_settings_change', 'Creative Boost Settings Changed'),
        ('cb_output_update', 'Creative Boost Output Updated'),
        ('cb_month_sync', 'Creative Boost Months Synced'),
    ]

    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='audit_logs')
    action = models.CharField(max_length=50, choices=ACTION_CHOICES)
    model_name = models.CharField(max_length=100)
    object_id = models.CharField(max_length=100)
    object_name = models.CharField(max_length=255, blank=True, null=True, help_text="Human-readable name of the object (e.g., client name, lead company)")
    object_reference = models.CharField(max_length=255, blank=True, null=True, help_text="Reference identifier (e.g., invoice number, billing period)")
    changes = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['-created_at'], name='audit_logs_created_4b1f0e_idx'),
            models.Index(fields=['action'], name='audit_logs_action_7c2d9a_idx'),
            models.Index(fields=['model_name'], name='audit_logs_model_n_3e8b1c_idx'),
            models.Index(fields=['object_reference'], name='audit_logs_object__9d4a2f_idx'),
        ]
