from django.urls import path
from . import views

urlpatterns = [
    path('invoicing/drafts/', views.invoice_drafts, name='invoice-drafts'),
    path('invoicing/issue/', views.invoice_issue, name='invoice-issue'),
    path('invoicing/invoices/', views.issued_invoice_list, name='issued-invoice-list'),
    path('invoicing/invoices/<int:pk>/', views.issued_invoice_detail, name='issued-invoice-detail'),
]
