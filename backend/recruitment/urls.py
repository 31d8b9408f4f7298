from django.urls import path
from . import views

urlpatterns = [
    path('applicants/', views.applicant_list_create, name='applicant-list-create'),
    path('applicants/board/', views.applicant_board, name='applicant-board'),
    path('applicants/<int:pk>/', views.applicant_detail, name='applicant-detail'),
    path('applicants/<int:pk>/stage/', views.applicant_change_stage, name='applicant-change-stage'),
    path('applicants/<int:pk>/notes/', views.applicant_notes, name='applicant-notes'),
    path('applicants/<int:pk>/hire/', views.applicant_hire, name='applicant-hire'),
]
