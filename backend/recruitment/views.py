from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.core.exceptions import ValidationError
from django.db.models import Q
from django.shortcuts import get_object_or_404
from backend.core.utils import create_audit_log
from .models import Applicant
from .serializers import ApplicantSerializer, ApplicantNoteSerializer, ApplicantStageSerializer, HireSerializer
from . import services


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def applicant_list_create(request):
    """List applicants or register a new application"""
    if request.method == 'GET':
        queryset = Applicant.objects.select_related('owner')
        stage = request.query_params.get('stage', None)
        if stage:
            queryset = queryset.filter(stage=stage)
        position = request.query_params.get('position', None)
        if position:
            queryset = queryset.filter(position__icontains=position)
        search = request.query_params.get('search', None)
        if search:
            queryset = queryset.filter(Q(full_name__icontains=search) | Q(email__icontains=search))
        return Response(ApplicantSerializer(queryset, many=True).data)

    serializer = ApplicantSerializer(data=request.data)
    if serializer.is_valid():
        applicant = serializer.save()
        create_audit_log(request=request, action='create', model_name='Applicant',
                         object_id=applicant.pk, object_name=applicant.full_name)
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def applicant_detail(request, pk):
    """Retrieve, update or delete an applicant"""
    applicant = get_object_or_404(Applicant, pk=pk)

    if request.method == 'GET':
        return Response(ApplicantSerializer(applicant).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = ApplicantSerializer(applicant, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        applicant.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def applicant_change_stage(request, pk):
    """Move an applicant to another stage"""
    applicant = get_object_or_404(Applicant, pk=pk)
    serializer = ApplicantStageSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        services.change_stage(applicant, serializer.validated_data['stage'])
    except ValidationError as e:
        return Response({'error': e.messages[0]}, status=status.HTTP_400_BAD_REQUEST)
    return Response(ApplicantSerializer(applicant).data)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def applicant_notes(request, pk):
    """List or add notes of an applicant"""
    applicant = get_object_or_404(Applicant, pk=pk)
    if request.method == 'GET':
        return Response(ApplicantNoteSerializer(applicant.notes.select_related('author'), many=True).data)

    serializer = ApplicantNoteSerializer(data=request.data)
    if serializer.is_valid():
        note = services.add_note(applicant, serializer.validated_data['text'], user=request.user)
        return Response(ApplicantNoteSerializer(note).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def applicant_hire(request, pk):
    """Hire an applicant: creates and links a colleague"""
    applicant = get_object_or_404(Applicant, pk=pk)
    serializer = HireSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        colleague = services.hire_applicant(applicant, **serializer.validated_data)
    except ValidationError as e:
        return Response({'error': e.messages[0]}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(
        request=request,
        action='applicant_hire',
        model_name='Applicant',
        object_id=applicant.pk,
        object_name=applicant.full_name,
        object_reference=f"colleague:{colleague.pk}",
    )
    return Response({
        'applicant': ApplicantSerializer(applicant).data,
        'colleague_id': colleague.pk,
    }, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def applicant_board(request):
    """Kanban board: applicants grouped by stage"""
    queryset = Applicant.objects.select_related('owner')
    position = request.query_params.get('position', None)
    if position:
        queryset = queryset.filter(position__icontains=position)
    board = [
        {
            'stage': stage,
            'label': label,
            'count': len(applicants),
            'applicants': ApplicantSerializer(applicants, many=True).data,
        }
        for stage, label, applicants in services.kanban_board(queryset)
    ]
    return Response(board)
