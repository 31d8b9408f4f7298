from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import ProtectedError
from django.shortcuts import get_object_or_404
from backend.clients.models import Client, Colleague, EngagementService
from backend.core.utils import create_audit_log, parse_period, period_label
from .models import OutputType, CreativeBoostClient, ClientMonth
from .serializers import (
    OutputTypeSerializer, CreativeBoostClientSerializer, ClientMonthSerializer,
    ClientMonthCreateSerializer, ClientMonthOutputSerializer, OutputUpdateSerializer,
    SettingsChangeSerializer
)
from . import services

# Money figures hidden from users without financial access
FINANCIAL_SUMMARY_FIELDS = ('price_per_credit', 'estimated_invoice', 'package_amount', 'invoice_amount')


def _visible_summary(summary, user):
    if user.has_financial_access:
        return summary
    return {key: value for key, value in summary.items() if key not in FINANCIAL_SUMMARY_FIELDS}


def _period_or_error(request):
    try:
        return parse_period(request.query_params), None
    except ValueError as e:
        return (None, None), Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)


# OutputType views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def output_type_list_create(request):
    """List output types or create a new one"""
    if request.method == 'GET':
        output_types = OutputType.objects.all()
        if request.query_params.get('active') == 'true':
            output_types = output_types.filter(is_active=True)
        category = request.query_params.get('category', None)
        if category:
            output_types = output_types.filter(category=category)
        return Response(OutputTypeSerializer(output_types, many=True).data)

    serializer = OutputTypeSerializer(data=request.data)
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def output_type_detail(request, pk):
    """Retrieve, update or delete an output type"""
    output_type = get_object_or_404(OutputType, pk=pk)

    if request.method == 'GET':
        return Response(OutputTypeSerializer(output_type).data)
    elif request.method == 'PATCH':
        serializer = OutputTypeSerializer(output_type, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        try:
            output_type.delete()
        except ProtectedError:
            return Response(
                {'error': 'Output type has recorded outputs; deactivate it instead'},
                status=status.HTTP_400_BAD_REQUEST
            )
        return Response(status=status.HTTP_204_NO_CONTENT)


# Creative Boost client registrations
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def cb_client_list_create(request):
    """List registered Creative Boost clients or register a client"""
    if request.method == 'GET':
        cb_clients = CreativeBoostClient.objects.select_related('client').order_by('client__name')
        if request.query_params.get('active') == 'true':
            cb_clients = cb_clients.filter(is_active=True)
        return Response(CreativeBoostClientSerializer(cb_clients, many=True).data)

    serializer = CreativeBoostClientSerializer(data=request.data)
    if serializer.is_valid():
        data = serializer.validated_data
        cb_client = services.add_creative_boost_client(
            data['client'],
            default_min_credits=data.get('default_min_credits'),
            default_max_credits=data.get('default_max_credits'),
            default_price_per_credit=data.get('default_price_per_credit'),
        )
        return Response(CreativeBoostClientSerializer(cb_client).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def cb_client_detail(request, pk):
    """Retrieve, update or remove a Creative Boost registration"""
    cb_client = get_object_or_404(CreativeBoostClient, pk=pk)

    if request.method == 'GET':
        return Response(CreativeBoostClientSerializer(cb_client).data)
    elif request.method == 'PATCH':
        serializer = CreativeBoostClientSerializer(cb_client, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        cb_client.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Client months
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def client_month_list_create(request):
    """List the client months of a period or add a client to a month"""
    if request.method == 'GET':
        (year, month), error = _period_or_error(request)
        if error:
            return error
        client_months = ClientMonth.objects.filter(year=year, month=month).select_related('client', 'colleague')
        return Response(ClientMonthSerializer(client_months, many=True).data)

    serializer = ClientMonthCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    client = get_object_or_404(Client, pk=data['client'])
    existed = ClientMonth.objects.filter(client=client, year=data['year'], month=data['month']).exists()
    client_month = services.add_client_to_month(
        client, data['year'], data['month'],
        min_credits=data.get('min_credits'),
        max_credits=data.get('max_credits'),
        price_per_credit=data.get('price_per_credit'),
        colleague=data.get('colleague'),
    )
    return Response(
        ClientMonthSerializer(client_month).data,
        status=status.HTTP_200_OK if existed else status.HTTP_201_CREATED
    )


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def available_clients(request):
    """Registered clients that can still be added to the period"""
    (year, month), error = _period_or_error(request)
    if error:
        return error
    cb_clients = services.available_clients_for_month(year, month)
    return Response(CreativeBoostClientSerializer(cb_clients, many=True).data)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def client_month_detail(request, pk):
    """Retrieve or update a client month (settings changes are recorded), or remove it"""
    client_month = get_object_or_404(ClientMonth.objects.select_related('client', 'colleague'), pk=pk)

    if request.method == 'GET':
        return Response(ClientMonthSerializer(client_month).data)
    elif request.method == 'PATCH':
        serializer = ClientMonthSerializer(client_month, data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        changes = services.update_client_month(client_month, serializer.validated_data, user=request.user)
        if changes:
            create_audit_log(
                request=request,
                action='cb_settings_change',
                model_name='ClientMonth',
                object_id=client_month.pk,
                object_name=str(client_month.client),
                object_reference=period_label(client_month.year, client_month.month),
                changes={c.change_type: {'old': c.old_value, 'new': c.new_value} for c in changes},
            )
        return Response(ClientMonthSerializer(client_month).data)
    else:  # DELETE
        services.remove_client_from_month(client_month.client, client_month.year, client_month.month)
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def client_month_summary(request, pk):
    """Credit summary of one client month"""
    client_month = get_object_or_404(ClientMonth.objects.select_related('client'), pk=pk)
    summary = services.summarize_client_month(client_month).as_dict()
    return Response(_visible_summary(summary, request.user))


# Outputs
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def output_list_upsert(request):
    """List the outputs of a client month or set the counts of one output type"""
    if request.method == 'GET':
        client_id = request.query_params.get('client', None)
        if not client_id:
            return Response({'error': 'client is required'}, status=status.HTTP_400_BAD_REQUEST)
        (year, month), error = _period_or_error(request)
        if error:
            return error
        client = get_object_or_404(Client, pk=client_id)
        outputs = services.client_outputs(client, year, month)
        return Response(ClientMonthOutputSerializer(outputs, many=True).data)

    serializer = OutputUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = dict(serializer.validated_data)
    client = get_object_or_404(Client, pk=data.pop('client'))
    output_type = get_object_or_404(OutputType, pk=data.pop('output_type'))
    year, month = data.pop('year'), data.pop('month')

    output = services.update_client_output(client, output_type, year, month, data)
    if output is None:
        return Response(status=status.HTTP_204_NO_CONTENT)
    return Response(ClientMonthOutputSerializer(output).data)


# Read models
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def month_summaries(request):
    """Credit summaries of every client in the period"""
    (year, month), error = _period_or_error(request)
    if error:
        return error
    summaries = services.client_month_summaries(year, month)
    return Response([_visible_summary(summary, request.user) for summary in summaries])


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def engagement_service_summary(request, pk):
    """Creative Boost summary for an engagement service in the period"""
    engagement_service = get_object_or_404(EngagementService.objects.select_related('engagement'), pk=pk)
    (year, month), error = _period_or_error(request)
    if error:
        return error
    summary = services.summary_for_engagement_service(engagement_service, year, month)
    if summary is None:
        return Response({'error': 'No Creative Boost month for this service'}, status=status.HTTP_404_NOT_FOUND)
    return Response(_visible_summary(summary.as_dict(), request.user))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def colleague_credits(request, pk):
    """Credits produced by a colleague in a month and year, with per-output detail"""
    colleague = get_object_or_404(Colleague, pk=pk)
    (year, month), error = _period_or_error(request)
    if error:
        return error
    by_client = services.colleague_credits_by_client(colleague, year, month)
    if not request.user.has_financial_access:
        by_client = [
            {key: value for key, value in row.items() if key not in ('reward_per_credit', 'total_reward')}
            for row in by_client
        ]
    return Response({
        'colleague_id': colleague.pk,
        'colleague_name': colleague.full_name,
        'year': year,
        'month': month,
        'month_credits': services.colleague_credits(colleague, year, month),
        'year_credits': services.colleague_credits_year(colleague, year),
        'by_client': by_client,
        'detail': services.colleague_credits_detail(colleague, year, month),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def settings_history(request):
    """Settings changes of a client, newest first"""
    client_id = request.query_params.get('client', None)
    if not client_id:
        return Response({'error': 'client is required'}, status=status.HTTP_400_BAD_REQUEST)
    try:
        client_id = int(client_id)
        year = request.query_params.get('year', None)
        month = request.query_params.get('month', None)
        year = int(year) if year else None
        month = int(month) if month else None
    except ValueError:
        return Response({'error': 'client, year and month must be numbers'}, status=status.HTTP_400_BAD_REQUEST)
    client = get_object_or_404(Client, pk=client_id)
    history = services.settings_history(client, year=year, month=month)
    return Response(SettingsChangeSerializer(history, many=True).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def sync_months(request):
    """Create missing month rows for engagements selling Creative Boost"""
    try:
        year, month = parse_period(request.data)
    except (TypeError, ValueError) as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    created = services.ensure_client_months_for_active_engagements(year, month)
    if created:
        create_audit_log(
            request=request,
            action='cb_month_sync',
            model_name='ClientMonth',
            object_id=period_label(year, month),
            object_reference=period_label(year, month),
            changes={'created': [cm.pk for cm in created]},
        )
    return Response({
        'year': year,
        'month': month,
        'created': ClientMonthSerializer(created, many=True).data,
    })
