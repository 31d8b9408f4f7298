from django.contrib import admin
from .models import Applicant, ApplicantNote


class ApplicantNoteInline(admin.TabularInline):
    model = ApplicantNote
    extra = 0


@admin.register(Applicant)
class ApplicantAdmin(admin.ModelAdmin):
    list_display = ['full_name', 'email', 'position', 'stage', 'source', 'owner', 'created_at']
    list_filter = ['stage', 'source']
    search_fields = ['full_name', 'email', 'position']
    inlines = [ApplicantNoteInline]
