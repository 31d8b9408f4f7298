from django.urls import path
from .views import user_me, user_list, user_detail, audit_log_list, audit_log_detail

urlpatterns = [
    # Current user (identity is issued by the hosted auth provider)
    path('auth/me/', user_me, name='user-me'),

    # User endpoints
    path('users/', user_list, name='user-list'),
    path('users/<int:pk>/', user_detail, name='user-detail'),

    # AuditLog endpoints
    path('audit-logs/', audit_log_list, name='audit-log-list'),
    path('audit-logs/<int:pk>/', audit_log_detail, name='audit-log-detail'),
]
