from django.contrib import admin
from .models import IssuedInvoice


@admin.register(IssuedInvoice)
class IssuedInvoiceAdmin(admin.ModelAdmin):
    list_display = ['invoice_number', 'client', 'engagement', 'year', 'month', 'total_amount', 'currency', 'status', 'issued_at']
    list_filter = ['status', 'year', 'month', 'currency']
    search_fields = ['invoice_number', 'client__name']
    readonly_fields = ['line_items', 'subtotal', 'total_adjustments', 'total_amount', 'issued_by', 'issued_at']
