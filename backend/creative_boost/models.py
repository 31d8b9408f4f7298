from django.db import models
from django.core.validators import MinValueValidator, MaxValueValidator
from decimal import Decimal
from backend.core.models import User
from backend.clients.models import Client, Colleague, Engagement, EngagementService


class OutputType(models.Model):
    """Kind of creative output and its credit price"""
    CATEGORY_CHOICES = [
        ('banner', 'Banner'),
        ('banner_translation', 'Banner Translation'),
        ('banner_revision', 'Banner Revision'),
        ('ai_photo', 'AI Photo'),
        ('video', 'Video'),
        ('video_translation', 'Video Translation'),
        ('video_revision', 'Video Revision'),
    ]
    BANNER_CATEGORIES = ('banner', 'banner_translation', 'banner_revision', 'ai_photo')
    VIDEO_CATEGORIES = ('video', 'video_translation', 'video_revision')

    name = models.CharField(max_length=200, unique=True)
    category = models.CharField(max_length=30, choices=CATEGORY_CHOICES)
    base_credits = models.DecimalField(max_digits=8, decimal_places=2, validators=[MinValueValidator(Decimal('0'))])
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    sort_order = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    @property
    def category_group(self):
        return 'video' if self.category in self.VIDEO_CATEGORIES else 'banner'

    class Meta:
        db_table = 'cb_output_types'
        ordering = ['sort_order', 'name']


class CreativeBoostClient(models.Model):
    """Client registered for Creative Boost with its default allowance"""
    client = models.OneToOneField(Client, on_delete=models.CASCADE, related_name='creative_boost')
    is_active = models.BooleanField(default=True)
    default_min_credits = models.DecimalField(max_digits=8, decimal_places=2, default=Decimal('30'))
    default_max_credits = models.DecimalField(max_digits=8, decimal_places=2, default=Decimal('50'))
    default_price_per_credit = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('1500'))
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return str(self.client)

    class Meta:
        db_table = 'cb_clients'


class ClientMonth(models.Model):
    """Credit allowance of one client for one month"""
    STATUS_CHOICES = [
        ('active', 'Active'),
        ('inactive', 'Inactive'),
    ]

    client = models.ForeignKey(Client, on_delete=models.CASCADE, related_name='creative_boost_months')
    year = models.PositiveIntegerField()
    month = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(12)])
    min_credits = models.DecimalField(max_digits=8, decimal_places=2, default=Decimal('0'))
    max_credits = models.DecimalField(max_digits=8, decimal_places=2, default=Decimal('0'))
    price_per_credit = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0'))
    colleague = models.ForeignKey(Colleague, on_delete=models.SET_NULL, null=True, blank=True, related_name='creative_boost_months')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='active')
    engagement_service = models.ForeignKey(EngagementService, on_delete=models.SET_NULL, null=True, blank=True, related_name='creative_boost_months')
    engagement = models.ForeignKey(Engagement, on_delete=models.SET_NULL, null=True, blank=True, related_name='creative_boost_months')
    invoice_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    invoice_note = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.client} {self.year}-{self.month:02d}"

    class Meta:
        db_table = 'cb_client_months'
        ordering = ['-year', '-month', 'client__name']
        constraints = [
            models.UniqueConstraint(fields=['client', 'year', 'month'], name='unique_cb_client_month'),
        ]


class ClientMonthOutput(models.Model):
    """Produced pieces of one output type for a client month"""
    client = models.ForeignKey(Client, on_delete=models.CASCADE, related_name='creative_boost_outputs')
    year = models.PositiveIntegerField()
    month = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(12)])
    output_type = models.ForeignKey(OutputType, on_delete=models.PROTECT, related_name='client_outputs')
    normal_count = models.PositiveIntegerField(default=0)
    express_count = models.PositiveIntegerField(default=0)
    colleague = models.ForeignKey(Colleague, on_delete=models.SET_NULL, null=True, blank=True, related_name='creative_boost_outputs')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.client} {self.year}-{self.month:02d} {self.output_type}"

    class Meta:
        db_table = 'cb_client_month_outputs'
        ordering = ['output_type__sort_order', 'output_type__name']
        constraints = [
            models.UniqueConstraint(fields=['client', 'output_type', 'year', 'month'], name='unique_cb_client_output'),
        ]
        indexes = [
            models.Index(fields=['year', 'month'], name='cb_outputs_period_idx'),
        ]


class SettingsChange(models.Model):
    """Audit trail of Creative Boost month settings"""
    CHANGE_TYPE_CHOICES = [
        ('max_credits', 'Max Credits'),
        ('price_per_credit', 'Price per Credit'),
        ('status', 'Status'),
        ('colleague', 'Colleague'),
    ]

    client_month = models.ForeignKey(ClientMonth, on_delete=models.SET_NULL, null=True, blank=True, related_name='settings_changes')
    client = models.ForeignKey(Client, on_delete=models.CASCADE, related_name='creative_boost_settings_changes')
    year = models.PositiveIntegerField()
    month = models.PositiveSmallIntegerField()
    change_type = models.CharField(max_length=30, choices=CHANGE_TYPE_CHOICES)
    field_name = models.CharField(max_length=100)
    old_value = models.TextField(blank=True, null=True)
    new_value = models.TextField(blank=True, null=True)
    changed_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='creative_boost_settings_changes')
    changed_by_name = models.CharField(max_length=200, blank=True, null=True)
    changed_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'cb_settings_history'
        ordering = ['-changed_at', '-id']
