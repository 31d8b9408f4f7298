from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.core.exceptions import ValidationError
from django.shortcuts import get_object_or_404
from backend.core.utils import create_audit_log, parse_period, period_label
from .models import IssuedInvoice
from .serializers import IssueInvoiceSerializer, IssuedInvoiceSerializer
from . import services


def _forbidden():
    return Response({'error': 'Financial access required'}, status=status.HTTP_403_FORBIDDEN)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def invoice_drafts(request):
    """Invoice drafts of all active retainer engagements for a period"""
    if not request.user.has_financial_access:
        return _forbidden()
    try:
        year, month = parse_period(request.query_params)
    except ValueError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    drafts = services.build_engagement_invoices(year, month)
    return Response({
        'year': year,
        'month': month,
        'count': len(drafts),
        'total_amount': sum((d['total_amount'] for d in drafts), services.ZERO),
        'drafts': drafts,
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def invoice_issue(request):
    """Issue the invoice of one engagement for a period"""
    if not request.user.has_financial_access:
        return _forbidden()
    serializer = IssueInvoiceSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    line_items = data.get('line_items')
    if line_items is not None:
        line_items = [dict(item) for item in line_items]

    try:
        invoice = services.issue_invoice(
            data['engagement'], data['year'], data['month'],
            user=request.user,
            line_items=line_items,
            notes=data.get('notes', ''),
        )
    except ValidationError as e:
        return Response({'error': e.messages[0]}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(
        request=request,
        action='invoice_issue',
        model_name='IssuedInvoice',
        object_id=invoice.pk,
        object_name=str(invoice.client),
        object_reference=invoice.invoice_number,
        changes={
            'period': period_label(invoice.year, invoice.month),
            'total_amount': str(invoice.total_amount),
            'line_count': len(invoice.line_items),
        },
    )
    return Response(IssuedInvoiceSerializer(invoice).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def issued_invoice_list(request):
    """Issued invoices, optionally of one year and month"""
    if not request.user.has_financial_access:
        return _forbidden()
    invoices = IssuedInvoice.objects.select_related('client', 'engagement', 'issued_by')
    year = request.query_params.get('year', None)
    month = request.query_params.get('month', None)
    client_id = request.query_params.get('client', None)
    try:
        if year:
            invoices = invoices.filter(year=int(year))
        if month:
            invoices = invoices.filter(month=int(month))
    except ValueError:
        return Response({'error': 'year and month must be numbers'}, status=status.HTTP_400_BAD_REQUEST)
    if client_id:
        invoices = invoices.filter(client_id=client_id)
    return Response(IssuedInvoiceSerializer(invoices, many=True).data)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def issued_invoice_detail(request, pk):
    """Retrieve an issued invoice or update its notes and status"""
    if not request.user.has_financial_access:
        return _forbidden()
    invoice = get_object_or_404(IssuedInvoice.objects.select_related('client', 'engagement', 'issued_by'), pk=pk)

    if request.method == 'GET':
        return Response(IssuedInvoiceSerializer(invoice).data)

    serializer = IssuedInvoiceSerializer(invoice, data=request.data, partial=True)
    if serializer.is_valid():
        old_status = invoice.status
        serializer.save()
        create_audit_log(
            request=request,
            action='update',
            model_name='IssuedInvoice',
            object_id=invoice.pk,
            object_name=str(invoice.client),
            object_reference=invoice.invoice_number,
            changes={'status': {'old': old_status, 'new': invoice.status}} if old_status != invoice.status else {},
        )
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
