from django.urls import path
from . import views

urlpatterns = [
    path('creative-boost/output-types/', views.output_type_list_create, name='cb-output-type-list-create'),
    path('creative-boost/output-types/<int:pk>/', views.output_type_detail, name='cb-output-type-detail'),
    path('creative-boost/clients/', views.cb_client_list_create, name='cb-client-list-create'),
    path('creative-boost/clients/<int:pk>/', views.cb_client_detail, name='cb-client-detail'),
    path('creative-boost/months/', views.client_month_list_create, name='cb-month-list-create'),
    path('creative-boost/months/available-clients/', views.available_clients, name='cb-available-clients'),
    path('creative-boost/months/<int:pk>/', views.client_month_detail, name='cb-month-detail'),
    path('creative-boost/months/<int:pk>/summary/', views.client_month_summary, name='cb-month-summary'),
    path('creative-boost/outputs/', views.output_list_upsert, name='cb-output-list-upsert'),
    path('creative-boost/summaries/', views.month_summaries, name='cb-summaries'),
    path('creative-boost/engagement-services/<int:pk>/summary/', views.engagement_service_summary, name='cb-engagement-service-summary'),
    path('creative-boost/colleagues/<int:pk>/credits/', views.colleague_credits, name='cb-colleague-credits'),
    path('creative-boost/settings-history/', views.settings_history, name='cb-settings-history'),
    path('creative-boost/sync/', views.sync_months, name='cb-sync'),
]
