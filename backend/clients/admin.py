from django.contrib import admin
from .models import (
    Client, ClientContact, Service, Colleague, Engagement, EngagementService,
    EngagementAssignment, ExtraWork, EngagementHistoryEntry, ActivityReward
)


class ClientContactInline(admin.TabularInline):
    model = ClientContact
    extra = 0


class EngagementServiceInline(admin.TabularInline):
    model = EngagementService
    extra = 0
    fields = ['service', 'name', 'price', 'billing_type', 'is_active', 'invoicing_status']


class EngagementAssignmentInline(admin.TabularInline):
    model = EngagementAssignment
    extra = 0
    fields = ['colleague', 'role_on_engagement', 'cost_model', 'monthly_cost', 'hourly_cost']


@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ['name', 'brand_name', 'ico', 'status', 'tier', 'sales_representative', 'created_at']
    list_filter = ['status', 'tier', 'country']
    search_fields = ['name', 'brand_name', 'ico', 'dic']
    inlines = [ClientContactInline]


@admin.register(ClientContact)
class ClientContactAdmin(admin.ModelAdmin):
    list_display = ['name', 'client', 'email', 'phone', 'is_primary', 'is_decision_maker']
    list_filter = ['is_primary', 'is_decision_maker']
    search_fields = ['name', 'email', 'client__name']


@admin.register(Service)
class ServiceAdmin(admin.ModelAdmin):
    list_display = ['code', 'name', 'service_type', 'category', 'base_price', 'currency', 'is_active']
    list_filter = ['service_type', 'category', 'is_active']
    search_fields = ['code', 'name']


@admin.register(Colleague)
class ColleagueAdmin(admin.ModelAdmin):
    list_display = ['full_name', 'position', 'seniority', 'is_freelancer', 'status']
    list_filter = ['seniority', 'is_freelancer', 'status']
    search_fields = ['full_name', 'email']


@admin.register(Engagement)
class EngagementAdmin(admin.ModelAdmin):
    list_display = ['name', 'client', 'type', 'status', 'monthly_fee', 'start_date', 'end_date']
    list_filter = ['type', 'status', 'billing_model']
    search_fields = ['name', 'client__name', 'client__brand_name']
    inlines = [EngagementServiceInline, EngagementAssignmentInline]


@admin.register(ExtraWork)
class ExtraWorkAdmin(admin.ModelAdmin):
    list_display = ['name', 'client', 'amount', 'billing_period', 'status', 'invoice_number']
    list_filter = ['status', 'billing_period']
    search_fields = ['name', 'client__name', 'invoice_number']


@admin.register(EngagementHistoryEntry)
class EngagementHistoryEntryAdmin(admin.ModelAdmin):
    list_display = ['engagement', 'change_type', 'field_name', 'old_value', 'new_value', 'changed_by', 'created_at']
    list_filter = ['change_type']
    readonly_fields = ['engagement', 'change_type', 'field_name', 'old_value', 'new_value',
                       'related_entity_id', 'related_entity_name', 'changed_by', 'created_at']


@admin.register(ActivityReward)
class ActivityRewardAdmin(admin.ModelAdmin):
    list_display = ['colleague', 'description', 'billing_type', 'amount', 'activity_date']
    list_filter = ['billing_type']
    search_fields = ['colleague__full_name', 'description']
    date_hierarchy = 'activity_date'
