from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Q
from django.shortcuts import get_object_or_404
from backend.core.utils import create_audit_log
from .models import Lead
from .serializers import (
    LeadSerializer, LeadNoteSerializer, LeadHistoryEntrySerializer, LeadStageTransitionSerializer,
    StageChangeSerializer, LeadConversionSerializer
)
from . import services


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def lead_list_create(request):
    """List leads or create a new lead"""
    if request.method == 'GET':
        queryset = Lead.objects.select_related('owner')
        stage = request.query_params.get('stage', None)
        if stage:
            queryset = queryset.filter(stage__in=stage.split(','))
        owner = request.query_params.get('owner', None)
        if owner:
            queryset = queryset.filter(owner_id=owner)
        source = request.query_params.get('source', None)
        if source:
            queryset = queryset.filter(source=source)
        search = request.query_params.get('search', None)
        if search:
            queryset = queryset.filter(
                Q(company_name__icontains=search) | Q(contact_name__icontains=search) | Q(ico__icontains=search)
            )
        serializer = LeadSerializer(queryset, many=True)
        return Response(serializer.data)

    serializer = LeadSerializer(data=request.data)
    if serializer.is_valid():
        with transaction.atomic():
            lead = serializer.save(created_by=request.user, owner=serializer.validated_data.get('owner') or request.user)
            services.record_lead_created(lead, user=request.user)
        create_audit_log(
            request=request,
            action='create',
            model_name='Lead',
            object_id=lead.pk,
            object_name=lead.company_name,
        )
        return Response(LeadSerializer(lead).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def lead_detail(request, pk):
    """Retrieve, update (with history) or delete a lead"""
    lead = get_object_or_404(Lead, pk=pk)

    if request.method == 'GET':
        return Response(LeadSerializer(lead).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = LeadSerializer(lead, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            entries = services.update_lead(lead, serializer.validated_data, user=request.user)
            if entries:
                create_audit_log(
                    request=request,
                    action='update',
                    model_name='Lead',
                    object_id=lead.pk,
                    object_name=lead.company_name,
                    changes={e.field_name: {'old': e.old_value, 'new': e.new_value} for e in entries},
                )
            return Response(LeadSerializer(lead).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        object_id, object_name = lead.pk, lead.company_name
        lead.delete()
        create_audit_log(request=request, action='delete', model_name='Lead', object_id=object_id, object_name=object_name)
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def lead_change_stage(request, pk):
    """Move a lead to another stage; confirmed moves count for the funnel"""
    lead = get_object_or_404(Lead, pk=pk)
    serializer = StageChangeSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    previous_stage = lead.stage
    transition = services.change_stage(
        lead, serializer.validated_data['stage'], user=request.user,
        confirm=serializer.validated_data['confirm']
    )
    if previous_stage != lead.stage:
        create_audit_log(
            request=request,
            action='stage_change',
            model_name='Lead',
            object_id=lead.pk,
            object_name=lead.company_name,
            changes={'stage': {'old': previous_stage, 'new': lead.stage}},
        )
    return Response({
        'lead': LeadSerializer(lead).data,
        'transition': LeadStageTransitionSerializer(transition).data if transition else None,
    })


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def lead_notes(request, pk):
    """List or add notes of a lead"""
    lead = get_object_or_404(Lead, pk=pk)
    if request.method == 'GET':
        return Response(LeadNoteSerializer(lead.notes.select_related('author'), many=True).data)

    serializer = LeadNoteSerializer(data=request.data)
    if serializer.is_valid():
        note = services.add_note(lead, serializer.validated_data['text'], user=request.user)
        return Response(LeadNoteSerializer(note).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def lead_history(request, pk):
    """Change history of a lead, newest first"""
    lead = get_object_or_404(Lead, pk=pk)
    return Response(LeadHistoryEntrySerializer(lead.history.select_related('changed_by'), many=True).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def lead_convert(request, pk):
    """Convert a lead into client, contact, engagement and engagement services"""
    lead = get_object_or_404(Lead, pk=pk)
    serializer = LeadConversionSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        client, engagement = services.convert_lead(lead, user=request.user, engagement_data=serializer.validated_data)
    except ValidationError as e:
        return Response({'error': e.messages[0]}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(
        request=request,
        action='lead_convert',
        model_name='Lead',
        object_id=lead.pk,
        object_name=lead.company_name,
        object_reference=f"client:{client.pk}",
        changes={'client_id': client.pk, 'engagement_id': engagement.pk},
    )
    return Response({
        'lead': LeadSerializer(lead).data,
        'client_id': client.pk,
        'engagement_id': engagement.pk,
    }, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def lead_funnel(request):
    """Funnel passthrough analytics over confirmed stage transitions"""
    try:
        months = int(request.query_params.get('months', 6))
    except ValueError:
        return Response({'error': 'months must be a number'}, status=status.HTTP_400_BAD_REQUEST)
    if not 1 <= months <= 24:
        return Response({'error': 'months must be between 1 and 24'}, status=status.HTTP_400_BAD_REQUEST)
    return Response(services.funnel_summary(months=months))
