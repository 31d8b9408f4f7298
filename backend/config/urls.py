"""
URL configuration for the agency CRM backend.

All JSON endpoints live under /api/v1/; each app contributes its own urlpatterns.
"""
from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "Agency CRM Admin Panel"
admin.site.site_title = "Agency CRM Admin Portal"
admin.site.index_title = "Agency CRM administration"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('backend.core.urls')),
    path('api/v1/', include('backend.clients.urls')),
    path('api/v1/', include('backend.creative_boost.urls')),
    path('api/v1/', include('backend.leads.urls')),
    path('api/v1/', include('backend.recruitment.urls')),
    path('api/v1/', include('backend.meetings.urls')),
    path('api/v1/', include('backend.invoicing.urls')),
    path('api/v1/', include('backend.reports.urls')),
    path('api/v1/', include('backend.integrations.urls')),
]
