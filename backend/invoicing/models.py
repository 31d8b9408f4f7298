from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
from decimal import Decimal
from backend.core.models import User
from backend.clients.models import Client, Engagement


class IssuedInvoice(models.Model):
    """Monthly engagement invoice as it was issued (line items are a snapshot)"""
    STATUS_CHOICES = [
        ('issued', 'Issued'),
        ('cancelled', 'Cancelled'),
    ]

    invoice_number = models.CharField(max_length=50, unique=True)
    engagement = models.ForeignKey(Engagement, on_delete=models.SET_NULL, null=True, blank=True, related_name='issued_invoices')
    client = models.ForeignKey(Client, on_delete=models.PROTECT, related_name='issued_invoices')
    year = models.PositiveIntegerField()
    month = models.PositiveSmallIntegerField()
    line_items = models.JSONField(default=list, encoder=DjangoJSONEncoder)
    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total_adjustments = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    currency = models.CharField(max_length=3, default='CZK')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='issued')
    notes = models.TextField(blank=True)
    issued_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='issued_invoices')
    issued_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.invoice_number

    class Meta:
        db_table = 'issued_invoices'
        ordering = ['-issued_at', '-id']
        constraints = [
            models.UniqueConstraint(fields=['engagement', 'year', 'month'], name='unique_engagement_invoice_period'),
        ]
