from django.conf import settings
from django.db import models
from decimal import Decimal
from backend.core.models import User


class Colleague(models.Model):
    """Agency team member (employee or freelancer)"""
    SENIORITY_CHOICES = [
        ('junior', 'Junior'),
        ('mid', 'Mid'),
        ('senior', 'Senior'),
        ('partner', 'Partner'),
    ]
    STATUS_CHOICES = [
        ('active', 'Active'),
        ('on_hold', 'On Hold'),
        ('left', 'Left'),
    ]

    user = models.OneToOneField(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='colleague')
    full_name = models.CharField(max_length=200)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=20, blank=True, null=True)
    position = models.CharField(max_length=200, blank=True)
    seniority = models.CharField(max_length=20, choices=SENIORITY_CHOICES, default='mid')
    is_freelancer = models.BooleanField(default=False)
    internal_hourly_cost = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    monthly_fixed_cost = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    capacity_hours_per_month = models.PositiveIntegerField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='active')
    birthday = models.DateField(null=True, blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.full_name

    class Meta:
        db_table = 'colleagues'
        ordering = ['full_name']


class Client(models.Model):
    """Agency clients"""
    STATUS_CHOICES = [
        ('lead', 'Lead'),
        ('active', 'Active'),
        ('paused', 'Paused'),
        ('lost', 'Lost'),
        ('potential', 'Potential'),
    ]
    TIER_CHOICES = [
        ('standard', 'Standard'),
        ('gold', 'Gold'),
        ('platinum', 'Platinum'),
        ('diamond', 'Diamond'),
    ]

    name = models.CharField(max_length=200)
    brand_name = models.CharField(max_length=200, blank=True)
    ico = models.CharField(max_length=20, blank=True, help_text="Company registration number")
    dic = models.CharField(max_length=20, blank=True, null=True, help_text="VAT number")
    website = models.CharField(max_length=255, blank=True)
    country = models.CharField(max_length=100, blank=True, default='CZ')
    industry = models.CharField(max_length=100, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='active')
    tier = models.CharField(max_length=20, choices=TIER_CHOICES, default='standard')
    sales_representative = models.ForeignKey(Colleague, on_delete=models.SET_NULL, null=True, blank=True, related_name='acquired_clients')
    billing_street = models.CharField(max_length=255, blank=True, null=True)
    billing_city = models.CharField(max_length=100, blank=True, null=True)
    billing_zip = models.CharField(max_length=20, blank=True, null=True)
    billing_country = models.CharField(max_length=100, blank=True, null=True)
    billing_email = models.EmailField(blank=True, null=True)
    acquisition_channel = models.CharField(max_length=100, blank=True)
    start_date = models.DateField(null=True, blank=True)
    end_date = models.DateField(null=True, blank=True)
    notes = models.TextField(blank=True)
    pinned_notes = models.TextField(blank=True)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='created_clients')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.brand_name or self.name

    class Meta:
        db_table = 'clients'
        ordering = ['name']


class ClientContact(models.Model):
    """Contact persons of a client"""
    client = models.ForeignKey(Client, on_delete=models.CASCADE, related_name='contacts')
    name = models.CharField(max_length=200)
    position = models.CharField(max_length=200, blank=True, null=True)
    email = models.EmailField(blank=True, null=True)
    phone = models.CharField(max_length=20, blank=True, null=True)
    is_primary = models.BooleanField(default=False)
    is_decision_maker = models.BooleanField(default=False)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        super().save(*args, **kwargs)
        # Only one primary contact per client
        if self.is_primary:
            ClientContact.objects.filter(client_id=self.client_id, is_primary=True).exclude(pk=self.pk).update(is_primary=False)

    class Meta:
        db_table = 'client_contacts'
        ordering = ['-is_primary', 'name']


class Service(models.Model):
    """Service catalogue; core services carry tier pricing"""
    SERVICE_TYPE_CHOICES = [
        ('core', 'Core'),
        ('addon', 'Add-on'),
    ]
    CATEGORY_CHOICES = [
        ('performance', 'Performance'),
        ('creative', 'Creative'),
        ('lead_gen', 'Lead Generation'),
        ('analytics', 'Analytics'),
        ('consulting', 'Consulting'),
    ]
    TIER_CHOICES = [
        ('growth', 'Growth'),
        ('pro', 'Pro'),
        ('elite', 'Elite'),
    ]

    code = models.CharField(max_length=50, unique=True)
    name = models.CharField(max_length=200)
    service_type = models.CharField(max_length=20, choices=SERVICE_TYPE_CHOICES, default='addon')
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES, default='performance')
    description = models.TextField(blank=True)
    external_url = models.URLField(blank=True, null=True)
    base_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    currency = models.CharField(max_length=3, default='CZK')
    tier_pricing = models.JSONField(default=list, blank=True)  # [{"tier": "growth", "price": 15000}, ...]; price null = individual quote
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    @property
    def is_creative_boost(self):
        return self.code == settings.CREATIVE_BOOST_SERVICE_CODE

    def price_for_tier(self, tier=None):
        """Tier price; base price when no (known) tier, None for individually quoted tiers"""
        if not tier:
            return self.base_price
        for entry in self.tier_pricing or []:
            if entry.get('tier') == tier:
                price = entry.get('price')
                return Decimal(str(price)) if price is not None else None
        return self.base_price

    class Meta:
        db_table = 'services'
        ordering = ['name']


class Engagement(models.Model):
    """Contract with a client"""
    TYPE_CHOICES = [
        ('retainer', 'Retainer'),
        ('one_off', 'One-off'),
        ('internal', 'Internal'),
    ]
    BILLING_MODEL_CHOICES = [
        ('fixed_fee', 'Fixed Fee'),
        ('spend_based', 'Spend Based'),
        ('hybrid', 'Hybrid'),
    ]
    STATUS_CHOICES = [
        ('planned', 'Planned'),
        ('active', 'Active'),
        ('paused', 'Paused'),
        ('completed', 'Completed'),
        ('cancelled', 'Cancelled'),
    ]

    client = models.ForeignKey(Client, on_delete=models.CASCADE, related_name='engagements')
    contact_person = models.ForeignKey(ClientContact, on_delete=models.SET_NULL, null=True, blank=True, related_name='engagements')
    name = models.CharField(max_length=200)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='retainer')
    billing_model = models.CharField(max_length=20, choices=BILLING_MODEL_CHOICES, default='fixed_fee')
    currency = models.CharField(max_length=3, default='CZK')
    monthly_fee = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    one_off_fee = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='planned')
    start_date = models.DateField()
    end_date = models.DateField(null=True, blank=True)
    notice_period_months = models.PositiveIntegerField(null=True, blank=True)
    platforms = models.JSONField(default=list, blank=True)
    notes = models.TextField(blank=True)
    offer_url = models.URLField(blank=True, null=True)
    contract_url = models.URLField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'engagements'
        ordering = ['-start_date', 'name']


class EngagementService(models.Model):
    """Service sold within an engagement, with its own price"""
    BILLING_TYPE_CHOICES = [
        ('monthly', 'Monthly'),
        ('one_off', 'One-off'),
    ]
    INVOICING_STATUS_CHOICES = [
        ('not_applicable', 'Not Applicable'),
        ('pending', 'Pending'),
        ('invoiced', 'Invoiced'),
    ]

    engagement = models.ForeignKey(Engagement, on_delete=models.CASCADE, related_name='engagement_services')
    service = models.ForeignKey(Service, on_delete=models.PROTECT, related_name='engagement_services')
    name = models.CharField(max_length=200)
    price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    billing_type = models.CharField(max_length=20, choices=BILLING_TYPE_CHOICES, default='monthly')
    currency = models.CharField(max_length=3, default='CZK')
    is_active = models.BooleanField(default=True)
    notes = models.TextField(blank=True)
    selected_tier = models.CharField(max_length=20, choices=Service.TIER_CHOICES, null=True, blank=True)
    creative_boost_min_credits = models.DecimalField(max_digits=8, decimal_places=2, null=True, blank=True)
    creative_boost_max_credits = models.DecimalField(max_digits=8, decimal_places=2, null=True, blank=True)
    creative_boost_price_per_credit = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    invoicing_status = models.CharField(max_length=20, choices=INVOICING_STATUS_CHOICES, default='not_applicable')
    invoiced_at = models.DateTimeField(null=True, blank=True)
    invoiced_in_period = models.CharField(max_length=7, blank=True, null=True)  # YYYY-MM
    invoice = models.ForeignKey('invoicing.IssuedInvoice', on_delete=models.SET_NULL, null=True, blank=True, related_name='one_off_services')
    upsold_by = models.ForeignKey(Colleague, on_delete=models.SET_NULL, null=True, blank=True, related_name='upsold_services')
    upsell_commission_percent = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    commission_approved_at = models.DateTimeField(null=True, blank=True)
    commission_approved_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='approved_service_commissions')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.engagement} - {self.name}"

    def save(self, *args, **kwargs):
        if self._state.adding and self.billing_type == 'one_off' and self.invoicing_status == 'not_applicable':
            self.invoicing_status = 'pending'
        super().save(*args, **kwargs)

    class Meta:
        db_table = 'engagement_services'
        ordering = ['id']


class EngagementAssignment(models.Model):
    """Colleague working on an engagement and what it costs"""
    COST_MODEL_CHOICES = [
        ('hourly', 'Hourly'),
        ('fixed_monthly', 'Fixed Monthly'),
        ('percentage', 'Percentage of Revenue'),
    ]

    engagement = models.ForeignKey(Engagement, on_delete=models.CASCADE, related_name='assignments')
    engagement_service = models.ForeignKey(EngagementService, on_delete=models.SET_NULL, null=True, blank=True, related_name='assignments')
    colleague = models.ForeignKey(Colleague, on_delete=models.CASCADE, related_name='assignments')
    role_on_engagement = models.CharField(max_length=100, blank=True)
    cost_model = models.CharField(max_length=20, choices=COST_MODEL_CHOICES, default='fixed_monthly')
    hourly_cost = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    monthly_cost = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    percentage_of_revenue = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    # Colleague reward per Creative Boost credit; CREATIVE_BOOST_REWARD_PER_CREDIT when empty
    creative_boost_reward_per_credit = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    start_date = models.DateField(null=True, blank=True)
    end_date = models.DateField(null=True, blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.colleague} @ {self.engagement}"

    class Meta:
        db_table = 'engagement_assignments'


class ExtraWork(models.Model):
    """Work billed on top of the engagement fee"""
    STATUS_CHOICES = [
        ('pending_approval', 'Pending Approval'),
        ('in_progress', 'In Progress'),
        ('ready_to_invoice', 'Ready to Invoice'),
        ('invoiced', 'Invoiced'),
    ]
    STATUS_FLOW = ['pending_approval', 'in_progress', 'ready_to_invoice', 'invoiced']

    client = models.ForeignKey(Client, on_delete=models.CASCADE, related_name='extra_works')
    engagement = models.ForeignKey(Engagement, on_delete=models.SET_NULL, null=True, blank=True, related_name='extra_works')
    colleague = models.ForeignKey(Colleague, on_delete=models.SET_NULL, null=True, blank=True, related_name='extra_works')
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3, default='CZK')
    hours_worked = models.DecimalField(max_digits=8, decimal_places=2, null=True, blank=True)
    hourly_rate = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    work_date = models.DateField()
    billing_period = models.CharField(max_length=7)  # YYYY-MM
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending_approval')
    approval_date = models.DateTimeField(null=True, blank=True)
    approved_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='approved_extra_works')
    invoice = models.ForeignKey('invoicing.IssuedInvoice', on_delete=models.SET_NULL, null=True, blank=True, related_name='extra_works')
    invoice_number = models.CharField(max_length=50, blank=True, null=True)
    invoiced_at = models.DateTimeField(null=True, blank=True)
    upsold_by = models.ForeignKey(Colleague, on_delete=models.SET_NULL, null=True, blank=True, related_name='upsold_extra_works')
    upsell_commission_percent = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    commission_approved_at = models.DateTimeField(null=True, blank=True)
    commission_approved_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='approved_extra_work_commissions')
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'extra_works'
        ordering = ['-work_date']


class EngagementHistoryEntry(models.Model):
    """Change history of an engagement"""
    CHANGE_TYPE_CHOICES = [
        ('created', 'Created'),
        ('status_change', 'Status Change'),
        ('field_update', 'Field Update'),
        ('service_added', 'Service Added'),
        ('service_removed', 'Service Removed'),
        ('service_updated', 'Service Updated'),
        ('colleague_assigned', 'Colleague Assigned'),
        ('colleague_removed', 'Colleague Removed'),
        ('end_date_set', 'End Date Set'),
    ]

    engagement = models.ForeignKey(Engagement, on_delete=models.CASCADE, related_name='history')
    change_type = models.CharField(max_length=30, choices=CHANGE_TYPE_CHOICES)
    field_name = models.CharField(max_length=100, blank=True, null=True)
    old_value = models.TextField(blank=True, null=True)
    new_value = models.TextField(blank=True, null=True)
    related_entity_id = models.CharField(max_length=100, blank=True, null=True)
    related_entity_name = models.CharField(max_length=255, blank=True, null=True)
    changed_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='engagement_changes')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'engagement_history'
        ordering = ['-created_at', '-id']


class ActivityReward(models.Model):
    """One-time reward of a colleague for an activity outside engagements"""
    BILLING_TYPE_CHOICES = [
        ('fixed', 'Fixed'),
        ('hourly', 'Hourly'),
    ]

    colleague = models.ForeignKey(Colleague, on_delete=models.CASCADE, related_name='activity_rewards')
    description = models.CharField(max_length=255)
    billing_type = models.CharField(max_length=10, choices=BILLING_TYPE_CHOICES, default='fixed')
    amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    hours = models.DecimalField(max_digits=8, decimal_places=2, null=True, blank=True)
    hourly_rate = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    activity_date = models.DateField()
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='created_activity_rewards')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.colleague} - {self.description}"

    def save(self, *args, **kwargs):
        if self.billing_type == 'hourly' and self.hours is not None and self.hourly_rate is not None:
            self.amount = (Decimal(str(self.hours)) * Decimal(str(self.hourly_rate))).quantize(Decimal('0.01'))
        super().save(*args, **kwargs)

    class Meta:
        db_table = 'activity_rewards'
        ordering = ['-activity_date', '-id']
