from django.contrib import admin
from .models import Lead, LeadNote, LeadHistoryEntry, LeadStageTransition


class LeadNoteInline(admin.TabularInline):
    model = LeadNote
    extra = 0


@admin.register(Lead)
class LeadAdmin(admin.ModelAdmin):
    list_display = ['company_name', 'contact_name', 'stage', 'owner', 'source', 'estimated_price', 'probability_percent', 'created_at']
    list_filter = ['stage', 'source', 'offer_type']
    search_fields = ['company_name', 'contact_name', 'ico']
    inlines = [LeadNoteInline]


@admin.register(LeadHistoryEntry)
class LeadHistoryEntryAdmin(admin.ModelAdmin):
    list_display = ['lead', 'change_type', 'field_name', 'old_value', 'new_value', 'changed_by', 'created_at']
    list_filter = ['change_type']


@admin.register(LeadStageTransition)
class LeadStageTransitionAdmin(admin.ModelAdmin):
    list_display = ['lead', 'from_stage', 'to_stage', 'transition_value', 'confirmed_at', 'confirmed_by']
    list_filter = ['from_stage', 'to_stage']
