from django.urls import path
from . import views

urlpatterns = [
    path('integrations/company/<str:ico>/', views.company_lookup, name='company-lookup'),
    path('integrations/vat-reliability/', views.vat_reliability, name='vat-reliability'),
]
