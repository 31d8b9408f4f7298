from django.db import models
from decimal import Decimal
from backend.core.models import User
from backend.clients.models import Client, Engagement


class Lead(models.Model):
    """Sales lead moving through the pipeline"""
    STAGE_CHOICES = [
        ('new_lead', 'New lead'),
        ('meeting_done', 'Meeting done'),
        ('waiting_access', 'Waiting for access'),
        ('access_received', 'Access received'),
        ('preparing_offer', 'Preparing offer'),
        ('offer_sent', 'Offer sent'),
        ('won', 'Won'),
        ('lost', 'Lost'),
        ('postponed', 'Postponed'),
    ]
    SOURCE_CHOICES = [
        ('referral', 'Referral'),
        ('inbound', 'Inbound'),
        ('cold_outreach', 'Cold outreach'),
        ('event', 'Event'),
        ('linkedin', 'LinkedIn'),
        ('website', 'Website'),
        ('other', 'Other'),
    ]
    OFFER_TYPE_CHOICES = [
        ('retainer', 'Retainer'),
        ('one_off', 'One-off'),
    ]

    # Company
    company_name = models.CharField(max_length=200)
    ico = models.CharField(max_length=20, blank=True)
    dic = models.CharField(max_length=20, blank=True, null=True)
    website = models.CharField(max_length=255, blank=True, null=True)
    industry = models.CharField(max_length=100, blank=True, null=True)
    billing_street = models.CharField(max_length=255, blank=True, null=True)
    billing_city = models.CharField(max_length=100, blank=True, null=True)
    billing_zip = models.CharField(max_length=20, blank=True, null=True)
    billing_country = models.CharField(max_length=100, blank=True, null=True)
    billing_email = models.EmailField(blank=True, null=True)

    # Contact
    contact_name = models.CharField(max_length=200, blank=True)
    contact_position = models.CharField(max_length=200, blank=True, null=True)
    contact_email = models.EmailField(blank=True, null=True)
    contact_phone = models.CharField(max_length=20, blank=True, null=True)

    # Sales
    stage = models.CharField(max_length=20, choices=STAGE_CHOICES, default='new_lead')
    owner = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='owned_leads')
    source = models.CharField(max_length=20, choices=SOURCE_CHOICES, default='other')
    source_custom = models.CharField(max_length=200, blank=True, null=True)
    client_message = models.TextField(blank=True, null=True)
    ad_spend_monthly = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    summary = models.TextField(blank=True)

    # Offer
    potential_services = models.JSONField(default=list, blank=True)
    offer_type = models.CharField(max_length=20, choices=OFFER_TYPE_CHOICES, default='retainer')
    estimated_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    currency = models.CharField(max_length=3, default='CZK')
    probability_percent = models.PositiveSmallIntegerField(default=0)
    offer_url = models.URLField(blank=True, null=True)
    offer_created_at = models.DateTimeField(null=True, blank=True)
    offer_sent_at = models.DateTimeField(null=True, blank=True)
    offer_sent_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='sent_offers')

    # Access / onboarding / contract tracking
    access_request_sent_at = models.DateTimeField(null=True, blank=True)
    access_request_platforms = models.JSONField(default=list, blank=True)
    access_received_at = models.DateTimeField(null=True, blank=True)
    onboarding_form_sent_at = models.DateTimeField(null=True, blank=True)
    onboarding_form_url = models.URLField(blank=True, null=True)
    onboarding_form_completed_at = models.DateTimeField(null=True, blank=True)
    contract_url = models.URLField(blank=True, null=True)
    contract_created_at = models.DateTimeField(null=True, blank=True)
    contract_sent_at = models.DateTimeField(null=True, blank=True)
    contract_signed_at = models.DateTimeField(null=True, blank=True)

    # Conversion
    converted_to_client = models.ForeignKey(Client, on_delete=models.SET_NULL, null=True, blank=True, related_name='source_leads')
    converted_to_engagement = models.ForeignKey(Engagement, on_delete=models.SET_NULL, null=True, blank=True, related_name='source_leads')
    converted_at = models.DateTimeField(null=True, blank=True)

    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='created_leads')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.company_name

    @property
    def is_converted(self):
        return self.converted_to_client_id is not None

    class Meta:
        db_table = 'leads'
        ordering = ['-created_at']


class LeadNote(models.Model):
    lead = models.ForeignKey(Lead, on_delete=models.CASCADE, related_name='notes')
    text = models.TextField()
    author = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='lead_notes')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'lead_notes'
        ordering = ['-created_at', '-id']


class LeadHistoryEntry(models.Model):
    CHANGE_TYPE_CHOICES = [
        ('created', 'Created'),
        ('stage_change', 'Stage Change'),
        ('field_update', 'Field Update'),
        ('owner_change', 'Owner Change'),
        ('note_added', 'Note Added'),
        ('converted', 'Converted'),
    ]

    lead = models.ForeignKey(Lead, on_delete=models.CASCADE, related_name='history')
    change_type = models.CharField(max_length=20, choices=CHANGE_TYPE_CHOICES)
    field_name = models.CharField(max_length=100, blank=True, null=True)
    old_value = models.TextField(blank=True, null=True)
    new_value = models.TextField(blank=True, null=True)
    changed_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='lead_changes')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'lead_history'
        ordering = ['-created_at', '-id']


class LeadStageTransition(models.Model):
    """Confirmed move between pipeline stages, used for funnel analytics"""
    lead = models.ForeignKey(Lead, on_delete=models.CASCADE, related_name='stage_transitions')
    from_stage = models.CharField(max_length=20, choices=Lead.STAGE_CHOICES)
    to_stage = models.CharField(max_length=20, choices=Lead.STAGE_CHOICES)
    transition_value = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    confirmed_at = models.DateTimeField()
    confirmed_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='confirmed_lead_transitions')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'lead_stage_transitions'
        ordering = ['-confirmed_at']
        indexes = [
            models.Index(fields=['from_stage', 'to_stage'], name='lead_trans_stages_idx'),
        ]
