from django.urls import path
from . import views

urlpatterns = [
    # Client endpoints
    path('clients/', views.client_list_create, name='client-list-create'),
    path('clients/<int:pk>/', views.client_detail, name='client-detail'),
    path('clients/<int:pk>/contacts-summary/', views.client_contacts_summary, name='client-contacts-summary'),

    # Contact endpoints
    path('contacts/', views.contact_list_create, name='contact-list-create'),
    path('contacts/<int:pk>/', views.contact_detail, name='contact-detail'),

    # Service catalogue
    path('services/', views.service_list_create, name='service-list-create'),
    path('services/<int:pk>/', views.service_detail, name='service-detail'),

    # Colleague endpoints
    path('colleagues/', views.colleague_list_create, name='colleague-list-create'),
    path('colleagues/<int:pk>/', views.colleague_detail, name='colleague-detail'),
    path('colleagues/<int:pk>/activity-rewards/', views.colleague_activity_rewards, name='colleague-activity-rewards'),
    path('activity-rewards/<int:pk>/', views.activity_reward_detail, name='activity-reward-detail'),

    # Engagement endpoints
    path('engagements/', views.engagement_list_create, name='engagement-list-create'),
    path('engagements/<int:pk>/', views.engagement_detail, name='engagement-detail'),
    path('engagements/<int:pk>/history/', views.engagement_history, name='engagement-history'),
    path('engagements/<int:pk>/margin/', views.engagement_margin, name='engagement-margin'),
    path('engagement-services/', views.engagement_service_list_create, name='engagement-service-list-create'),
    path('engagement-services/<int:pk>/', views.engagement_service_detail, name='engagement-service-detail'),
    path('engagement-services/<int:pk>/commission/', views.engagement_service_commission, name='engagement-service-commission'),
    path('assignments/', views.assignment_list_create, name='assignment-list-create'),
    path('assignments/<int:pk>/', views.assignment_detail, name='assignment-detail'),

    # Extra work endpoints
    path('extra-work/', views.extra_work_list_create, name='extra-work-list-create'),
    path('extra-work/<int:pk>/', views.extra_work_detail, name='extra-work-detail'),
    path('extra-work/<int:pk>/advance/', views.extra_work_advance, name='extra-work-advance'),
    path('extra-work/<int:pk>/commission/', views.extra_work_commission, name='extra-work-commission'),
]
