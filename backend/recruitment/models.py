from django.db import models
from backend.core.models import User
from backend.clients.models import Colleague


class Applicant(models.Model):
    """Job applicant in the recruitment pipeline"""
    STAGE_CHOICES = [
        ('new_applicant', 'New applicant'),
        ('invited_interview', 'Invited to interview'),
        ('interview_done', 'Interview done'),
        ('offer_sent', 'Offer sent'),
        ('hired', 'Hired'),
        ('rejected', 'Rejected'),
        ('withdrawn', 'Withdrawn'),
    ]
    SOURCE_CHOICES = [
        ('website', 'Website'),
        ('linkedin', 'LinkedIn'),
        ('referral', 'Referral'),
        ('job_portal', 'Job portal'),
        ('other', 'Other'),
    ]

    full_name = models.CharField(max_length=200)
    email = models.EmailField()
    phone = models.CharField(max_length=20, blank=True, null=True)
    position = models.CharField(max_length=200)
    cover_letter = models.TextField(blank=True, null=True)
    cv_url = models.URLField(blank=True, null=True)
    video_url = models.URLField(blank=True, null=True)
    stage = models.CharField(max_length=20, choices=STAGE_CHOICES, default='new_applicant')
    owner = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='owned_applicants')
    source = models.CharField(max_length=20, choices=SOURCE_CHOICES, default='website')
    source_custom = models.CharField(max_length=200, blank=True, null=True)

    # Freelancer billing data, filled during onboarding
    ico = models.CharField(max_length=20, blank=True, null=True)
    company_name = models.CharField(max_length=200, blank=True, null=True)
    dic = models.CharField(max_length=20, blank=True, null=True)
    hourly_rate = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    billing_street = models.CharField(max_length=255, blank=True, null=True)
    billing_city = models.CharField(max_length=100, blank=True, null=True)
    billing_zip = models.CharField(max_length=20, blank=True, null=True)
    bank_account = models.CharField(max_length=50, blank=True, null=True)

    onboarding_sent_at = models.DateTimeField(null=True, blank=True)
    onboarding_completed_at = models.DateTimeField(null=True, blank=True)
    converted_to_colleague = models.OneToOneField(Colleague, on_delete=models.SET_NULL, null=True, blank=True, related_name='source_applicant')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.full_name} ({self.position})"

    class Meta:
        db_table = 'applicants'
        ordering = ['-created_at']


class ApplicantNote(models.Model):
    applicant = models.ForeignKey(Applicant, on_delete=models.CASCADE, related_name='notes')
    text = models.TextField()
    author = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='applicant_notes')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'applicant_notes'
        ordering = ['-created_at', '-id']
