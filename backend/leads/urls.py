from django.urls import path
from . import views

urlpatterns = [
    path('leads/', views.lead_list_create, name='lead-list-create'),
    path('leads/funnel/', views.lead_funnel, name='lead-funnel'),
    path('leads/<int:pk>/', views.lead_detail, name='lead-detail'),
    path('leads/<int:pk>/stage/', views.lead_change_stage, name='lead-change-stage'),
    path('leads/<int:pk>/notes/', views.lead_notes, name='lead-notes'),
    path('leads/<int:pk>/history/', views.lead_history, name='lead-history'),
    path('leads/<int:pk>/convert/', views.lead_convert, name='lead-convert'),
]
