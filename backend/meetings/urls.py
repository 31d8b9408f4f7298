from django.urls import path
from . import views

urlpatterns = [
    path('meetings/', views.meeting_list_create, name='meeting-list-create'),
    path('meetings/upcoming/', views.upcoming, name='meeting-upcoming'),
    path('meetings/today/', views.today, name='meeting-today'),
    path('meetings/<int:pk>/', views.meeting_detail, name='meeting-detail'),
    path('meetings/<int:pk>/participants/', views.meeting_participants, name='meeting-participants'),
    path('meetings/<int:pk>/tasks/', views.meeting_tasks, name='meeting-tasks'),
    path('meetings/<int:pk>/send-invites/', views.send_invites, name='meeting-send-invites'),
    path('meeting-participants/<int:pk>/', views.participant_detail, name='meeting-participant-detail'),
    path('meeting-tasks/<int:pk>/', views.task_detail, name='meeting-task-detail'),
]
