from django.urls import path
from . import views

urlpatterns = [
    path('reports/dashboard/', views.dashboard_kpis, name='dashboard-kpis'),
    path('reports/engagement-margins/', views.engagement_margins, name='engagement-margins'),
    path('reports/client-margins/', views.client_margins, name='client-margins'),
    path('reports/team-costs/', views.team_costs, name='team-costs'),
    path('reports/funnel/', views.funnel_report, name='funnel-report'),
    path('reports/team-earnings/', views.team_earnings, name='team-earnings'),
    path('reports/colleagues/<int:pk>/earnings/', views.colleague_earnings, name='colleague-earnings'),
    path('reports/colleagues/<int:pk>/earnings-history/', views.colleague_earnings_history, name='colleague-earnings-history'),
    path('reports/upsell-commissions/', views.upsell_commissions, name='upsell-commissions'),
]
