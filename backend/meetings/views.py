from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.core.exceptions import ValidationError
from django.shortcuts import get_object_or_404
from backend.core.utils import create_audit_log
from .models import Meeting, MeetingParticipant, MeetingTask
from .serializers import MeetingSerializer, MeetingParticipantSerializer, MeetingTaskSerializer
from . import services


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def meeting_list_create(request):
    """List meetings or schedule a new meeting"""
    if request.method == 'GET':
        queryset = Meeting.objects.select_related('client').prefetch_related('participants__colleague', 'tasks')
        for param in ('status', 'type'):
            value = request.query_params.get(param, None)
            if value:
                queryset = queryset.filter(**{param: value})
        client = request.query_params.get('client', None)
        if client:
            queryset = queryset.filter(client_id=client)
        date_from = request.query_params.get('date_from', None)
        date_to = request.query_params.get('date_to', None)
        if date_from:
            queryset = queryset.filter(scheduled_at__date__gte=date_from)
        if date_to:
            queryset = queryset.filter(scheduled_at__date__lte=date_to)
        return Response(MeetingSerializer(queryset, many=True).data)

    serializer = MeetingSerializer(data=request.data)
    if serializer.is_valid():
        meeting = serializer.save(created_by=request.user)
        create_audit_log(request=request, action='create', model_name='Meeting',
                         object_id=meeting.pk, object_name=meeting.title)
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def meeting_detail(request, pk):
    """Retrieve, update or delete a meeting"""
    meeting = get_object_or_404(Meeting, pk=pk)

    if request.method == 'GET':
        return Response(MeetingSerializer(meeting).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = MeetingSerializer(meeting, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        meeting.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def meeting_participants(request, pk):
    """List or add participants of a meeting"""
    meeting = get_object_or_404(Meeting, pk=pk)
    if request.method == 'GET':
        return Response(MeetingParticipantSerializer(meeting.participants.select_related('colleague'), many=True).data)

    serializer = MeetingParticipantSerializer(data=request.data)
    if serializer.is_valid():
        serializer.save(meeting=meeting)
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def participant_detail(request, pk):
    """Update attendance / role of a participant or remove them"""
    participant = get_object_or_404(MeetingParticipant, pk=pk)
    if request.method == 'PATCH':
        serializer = MeetingParticipantSerializer(participant, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    participant.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def meeting_tasks(request, pk):
    """List or add follow-up tasks of a meeting"""
    meeting = get_object_or_404(Meeting, pk=pk)
    if request.method == 'GET':
        return Response(MeetingTaskSerializer(meeting.tasks.select_related('assigned_to'), many=True).data)

    serializer = MeetingTaskSerializer(data=request.data)
    if serializer.is_valid():
        serializer.save(meeting=meeting)
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def task_detail(request, pk):
    """Retrieve, update or delete a meeting task"""
    task = get_object_or_404(MeetingTask, pk=pk)
    if request.method == 'GET':
        return Response(MeetingTaskSerializer(task).data)
    elif request.method == 'PATCH':
        serializer = MeetingTaskSerializer(task, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    task.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def upcoming(request):
    """Meetings in the next ``days`` days (default 7)"""
    try:
        days = int(request.query_params.get('days', 7))
    except ValueError:
        return Response({'error': 'days must be a number'}, status=status.HTTP_400_BAD_REQUEST)
    return Response(MeetingSerializer(services.upcoming_meetings(days=days), many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def today(request):
    """Today's meetings"""
    return Response(MeetingSerializer(services.todays_meetings(), many=True).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def send_invites(request, pk):
    """Send calendar invites to the colleague participants"""
    meeting = get_object_or_404(Meeting, pk=pk)
    try:
        recipients = services.send_calendar_invites(meeting)
    except ValidationError as e:
        return Response({'error': e.messages[0]}, status=status.HTTP_400_BAD_REQUEST)
    return Response({
        'recipients': recipients,
        'calendar_invites_sent_at': meeting.calendar_invites_sent_at,
    })
