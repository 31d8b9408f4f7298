import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from django.utils import timezone

from backend.clients.models import Colleague
from backend.core.utils import parse_period
from backend.leads.services import funnel_summary
from . import earnings, services

logger = logging.getLogger('backend.reports')


def _forbidden():
    return Response({'error': 'Financial access required'}, status=status.HTTP_403_FORBIDDEN)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard_kpis(request):
    """Executive dashboard KPIs"""
    data = services.dashboard_kpis(timezone.localdate())
    if not request.user.has_financial_access:
        data = services.strip_financials(data)
    return Response(data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def engagement_margins(request):
    """Margin of every engagement with the low-margin flag"""
    if not request.user.has_financial_access:
        return _forbidden()
    engagement_status = request.query_params.get('status', 'active')
    report = services.engagement_margin_report(status=engagement_status)
    if request.query_params.get('low_margin') == 'true':
        report = dict(report, engagements=[r for r in report['engagements'] if r['is_low_margin']])
    return Response(report)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def client_margins(request):
    """Engagement margins rolled up per client"""
    if not request.user.has_financial_access:
        return _forbidden()
    return Response(services.client_margin_report(status=request.query_params.get('status', 'active')))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def team_costs(request):
    """Monthly team cost by cost model and colleague"""
    if not request.user.has_financial_access:
        return _forbidden()
    return Response(services.team_cost_breakdown())


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def funnel_report(request):
    """Lead funnel passthrough"""
    try:
        months = int(request.query_params.get('months', 6))
    except ValueError:
        return Response({'error': 'months must be a number'}, status=status.HTTP_400_BAD_REQUEST)
    if not 1 <= months <= 24:
        return Response({'error': 'months must be between 1 and 24'}, status=status.HTTP_400_BAD_REQUEST)
    data = funnel_summary(months=months)
    logger.debug(f"Funnel report for {months} months: {data['total_transitions']} transitions")
    return Response(data)


def _period_or_error(request):
    try:
        return parse_period(request.query_params, default=timezone.localdate()), None
    except ValueError as e:
        return (None, None), Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)


def _can_see_earnings(user, colleague):
    return user.has_financial_access or (colleague.user_id is not None and colleague.user_id == user.pk)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def team_earnings(request):
    """Earnings of every active colleague in a month"""
    if not request.user.has_financial_access:
        return _forbidden()
    (year, month), error = _period_or_error(request)
    if error:
        return error
    return Response(earnings.team_earnings(year, month))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def colleague_earnings(request, pk):
    """Earnings of one colleague in a month, by part"""
    colleague = get_object_or_404(Colleague, pk=pk)
    if not _can_see_earnings(request.user, colleague):
        return _forbidden()
    (year, month), error = _period_or_error(request)
    if error:
        return error
    data = earnings.colleague_earnings(colleague, year, month)
    return Response(dict(data, colleague_id=colleague.pk, full_name=colleague.full_name))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def colleague_earnings_history(request, pk):
    """Monthly earnings of a colleague, current month first"""
    colleague = get_object_or_404(Colleague, pk=pk)
    if not _can_see_earnings(request.user, colleague):
        return _forbidden()
    try:
        months = int(request.query_params.get('months', earnings.HISTORY_MONTHS))
    except ValueError:
        return Response({'error': 'months must be a number'}, status=status.HTTP_400_BAD_REQUEST)
    if not 1 <= months <= 24:
        return Response({'error': 'months must be between 1 and 24'}, status=status.HTTP_400_BAD_REQUEST)

    history = earnings.colleague_earnings_history(colleague, months=months, today=timezone.localdate())
    return Response({
        'colleague_id': colleague.pk,
        'full_name': colleague.full_name,
        'months': [
            {key: value for key, value in month.items() if key not in ('fixed', 'creative_boost', 'commissions')}
            for month in history
        ],
        'total_earnings': sum((month['total_earnings'] for month in history), services.ZERO),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def upsell_commissions(request):
    """Upsell commissions of a month, approved or not"""
    if not request.user.has_financial_access:
        return _forbidden()
    (year, month), error = _period_or_error(request)
    if error:
        return error
    colleague = None
    colleague_id = request.query_params.get('colleague')
    if colleague_id:
        if not colleague_id.isdigit():
            return Response({'error': 'colleague must be a number'}, status=status.HTTP_400_BAD_REQUEST)
        colleague = get_object_or_404(Colleague, pk=colleague_id)
    approved_only = request.query_params.get('approved') == 'true'
    return Response(earnings.upsells_for_month(year, month, colleague=colleague, approved_only=approved_only))
