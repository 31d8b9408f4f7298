from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.core.exceptions import ValidationError
from django.db import transaction
from django.shortcuts import get_object_or_404
from backend.core.utils import create_audit_log
from .models import (
    Client, ClientContact, Service, Colleague, Engagement, EngagementService,
    EngagementAssignment, ExtraWork, ActivityReward
)
from .serializers import (
    ClientSerializer, ClientContactSerializer, ServiceSerializer, ColleagueSerializer,
    EngagementSerializer, EngagementServiceSerializer, EngagementAssignmentSerializer,
    ExtraWorkSerializer, EngagementHistoryEntrySerializer, ActivityRewardSerializer
)
from .filters import (
    ClientFilter, ClientContactFilter, ServiceFilter, ColleagueFilter, EngagementFilter,
    EngagementServiceFilter, EngagementAssignmentFilter, ExtraWorkFilter, ActivityRewardFilter
)
from . import services


def _list_create(request, queryset, filter_class, serializer_class, model_name, save_kwargs=None):
    """Shared GET/POST handling for the simple list endpoints"""
    if request.method == 'GET':
        filterset = filter_class(request.query_params, queryset=queryset)
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
        serializer = serializer_class(filterset.qs, many=True)
        return Response(serializer.data)

    serializer = serializer_class(data=request.data)
    if serializer.is_valid():
        instance = serializer.save(**(save_kwargs or {}))
        create_audit_log(
            request=request,
            action='create',
            model_name=model_name,
            object_id=instance.pk,
            object_name=str(instance),
        )
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


def _detail(request, instance, serializer_class, model_name):
    """Shared GET/PUT/PATCH/DELETE handling for the simple detail endpoints"""
    if request.method == 'GET':
        return Response(serializer_class(instance).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = serializer_class(instance, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            create_audit_log(
                request=request,
                action='update',
                model_name=model_name,
                object_id=instance.pk,
                object_name=str(instance),
                changes={key: str(value) for key, value in serializer.validated_data.items()},
            )
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        object_id, object_name = instance.pk, str(instance)
        instance.delete()
        create_audit_log(
            request=request,
            action='delete',
            model_name=model_name,
            object_id=object_id,
            object_name=object_name,
        )
        return Response(status=status.HTTP_204_NO_CONTENT)


# Client views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def client_list_create(request):
    """List clients or create a new client"""
    queryset = Client.objects.select_related('sales_representative').prefetch_related('contacts')
    return _list_create(request, queryset, ClientFilter, ClientSerializer, 'Client',
                        save_kwargs={'created_by': request.user})


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def client_detail(request, pk):
    """Retrieve, update or delete a client"""
    client = get_object_or_404(Client, pk=pk)
    return _detail(request, client, ClientSerializer, 'Client')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def client_contacts_summary(request, pk):
    """Primary contact and decision makers of a client"""
    client = get_object_or_404(Client, pk=pk)
    primary = services.primary_contact(client)
    return Response({
        'primary_contact': ClientContactSerializer(primary).data if primary else None,
        'decision_makers': ClientContactSerializer(services.decision_makers(client), many=True).data,
    })


# ClientContact views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def contact_list_create(request):
    """List client contacts or create a new contact"""
    return _list_create(request, ClientContact.objects.all(), ClientContactFilter, ClientContactSerializer, 'ClientContact')


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def contact_detail(request, pk):
    """Retrieve, update or delete a client contact"""
    contact = get_object_or_404(ClientContact, pk=pk)
    return _detail(request, contact, ClientContactSerializer, 'ClientContact')


# Service views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def service_list_create(request):
    """List the service catalogue or add a service"""
    return _list_create(request, Service.objects.all(), ServiceFilter, ServiceSerializer, 'Service')


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def service_detail(request, pk):
    """Retrieve, update or delete a service"""
    service = get_object_or_404(Service, pk=pk)
    if request.method == 'DELETE' and service.engagement_services.exists():
        return Response(
            {'error': 'Service is used by engagements; deactivate it instead'},
            status=status.HTTP_400_BAD_REQUEST
        )
    return _detail(request, service, ServiceSerializer, 'Service')


# Colleague views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def colleague_list_create(request):
    """List colleagues or create a new colleague"""
    return _list_create(request, Colleague.objects.all(), ColleagueFilter, ColleagueSerializer, 'Colleague')


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def colleague_detail(request, pk):
    """Retrieve, update or delete a colleague"""
    colleague = get_object_or_404(Colleague, pk=pk)
    return _detail(request, colleague, ColleagueSerializer, 'Colleague')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def colleague_activity_rewards(request, pk):
    """List or add one-time activity rewards of a colleague"""
    if not request.user.has_financial_access:
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)
    colleague = get_object_or_404(Colleague, pk=pk)
    return _list_create(
        request, colleague.activity_rewards.all(), ActivityRewardFilter, ActivityRewardSerializer, 'ActivityReward',
        save_kwargs={'colleague': colleague, 'created_by': request.user},
    )


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def activity_reward_detail(request, pk):
    """Retrieve, update or delete an activity reward"""
    if not request.user.has_financial_access:
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)
    reward = get_object_or_404(ActivityReward.objects.select_related('colleague'), pk=pk)
    return _detail(request, reward, ActivityRewardSerializer, 'ActivityReward')


# Engagement views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def engagement_list_create(request):
    """List engagements or create a new engagement"""
    if request.method == 'GET':
        queryset = Engagement.objects.select_related('client').prefetch_related(
            'engagement_services__service', 'assignments__colleague'
        )
        filterset = EngagementFilter(request.query_params, queryset=queryset)
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
        serializer = EngagementSerializer(filterset.qs, many=True)
        return Response(serializer.data)

    serializer = EngagementSerializer(data=request.data)
    if serializer.is_valid():
        with transaction.atomic():
            engagement = serializer.save()
            services.record_engagement_created(engagement, user=request.user)
        create_audit_log(
            request=request,
            action='create',
            model_name='Engagement',
            object_id=engagement.pk,
            object_name=engagement.name,
            object_reference=str(engagement.client),
        )
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def engagement_detail(request, pk):
    """Retrieve, update or delete an engagement; updates are written to the history"""
    engagement = get_object_or_404(Engagement, pk=pk)

    if request.method in ('PUT', 'PATCH'):
        serializer = EngagementSerializer(engagement, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            with transaction.atomic():
                entries = services.record_engagement_changes(engagement, serializer.validated_data, user=request.user)
                serializer.save()
            if entries:
                create_audit_log(
                    request=request,
                    action='update',
                    model_name='Engagement',
                    object_id=engagement.pk,
                    object_name=engagement.name,
                    changes={e.field_name: {'old': e.old_value, 'new': e.new_value} for e in entries},
                )
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    return _detail(request, engagement, EngagementSerializer, 'Engagement')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def engagement_history(request, pk):
    """Change history of an engagement, newest first"""
    engagement = get_object_or_404(Engagement, pk=pk)
    entries = engagement.history.select_related('changed_by')
    serializer = EngagementHistoryEntrySerializer(entries, many=True)
    return Response(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def engagement_margin(request, pk):
    """Revenue, team cost and margin of an engagement"""
    if not request.user.has_financial_access:
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)
    engagement = get_object_or_404(Engagement.objects.select_related('client'), pk=pk)
    return Response(services.engagement_margin(engagement))


# EngagementService views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def engagement_service_list_create(request):
    """List engagement services or add a service to an engagement"""
    if request.method == 'GET':
        return _list_create(
            request, EngagementService.objects.select_related('service', 'upsold_by', 'invoice'),
            EngagementServiceFilter, EngagementServiceSerializer, 'EngagementService'
        )

    serializer = EngagementServiceSerializer(data=request.data)
    if serializer.is_valid():
        with transaction.atomic():
            engagement_service = serializer.save()
            services.record_service_change(
                engagement_service, 'service_added', user=request.user, new_value=engagement_service.price
            )
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def engagement_service_detail(request, pk):
    """Retrieve, update or remove a service of an engagement"""
    engagement_service = get_object_or_404(EngagementService, pk=pk)

    if request.method == 'GET':
        return Response(EngagementServiceSerializer(engagement_service).data)
    elif request.method in ('PUT', 'PATCH'):
        old_price = engagement_service.price
        serializer = EngagementServiceSerializer(
            engagement_service, data=request.data, partial=request.method == 'PATCH'
        )
        if serializer.is_valid():
            with transaction.atomic():
                engagement_service = serializer.save()
                if engagement_service.price != old_price:
                    services.record_service_change(
                        engagement_service, 'service_updated', user=request.user,
                        old_value=old_price, new_value=engagement_service.price
                    )
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        with transaction.atomic():
            services.record_service_change(
                engagement_service, 'service_removed', user=request.user, old_value=engagement_service.price
            )
            engagement_service.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# EngagementAssignment views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def assignment_list_create(request):
    """List assignments or assign a colleague to an engagement"""
    if request.method == 'GET':
        return _list_create(
            request, EngagementAssignment.objects.select_related('colleague'),
            EngagementAssignmentFilter, EngagementAssignmentSerializer, 'EngagementAssignment'
        )

    serializer = EngagementAssignmentSerializer(data=request.data)
    if serializer.is_valid():
        with transaction.atomic():
            assignment = serializer.save()
            services.record_assignment_change(assignment, 'colleague_assigned', user=request.user)
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def assignment_detail(request, pk):
    """Retrieve, update or remove an assignment"""
    assignment = get_object_or_404(EngagementAssignment.objects.select_related('colleague'), pk=pk)
    if request.method == 'DELETE':
        with transaction.atomic():
            services.record_assignment_change(assignment, 'colleague_removed', user=request.user)
            assignment.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
    return _detail(request, assignment, EngagementAssignmentSerializer, 'EngagementAssignment')


# ExtraWork views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def extra_work_list_create(request):
    """List extra work or log new extra work"""
    queryset = ExtraWork.objects.select_related('client', 'colleague', 'approved_by')
    return _list_create(request, queryset, ExtraWorkFilter, ExtraWorkSerializer, 'ExtraWork')


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def extra_work_detail(request, pk):
    """Retrieve, update or delete extra work"""
    extra_work = get_object_or_404(ExtraWork, pk=pk)
    return _detail(request, extra_work, ExtraWorkSerializer, 'ExtraWork')


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def extra_work_advance(request, pk):
    """Move extra work to the next workflow status"""
    extra_work = get_object_or_404(ExtraWork, pk=pk)
    previous_status = extra_work.status
    try:
        extra_work = services.advance_extra_work(extra_work, user=request.user)
    except ValidationError as e:
        return Response({'error': e.messages[0]}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(
        request=request,
        action='extra_work_advance',
        model_name='ExtraWork',
        object_id=extra_work.pk,
        object_name=extra_work.name,
        changes={'status': {'old': previous_status, 'new': extra_work.status}},
    )
    return Response(ExtraWorkSerializer(extra_work).data)


def _commission_approval(request, item, serializer_class):
    """POST approves the upsell commission of ``item``, DELETE revokes it"""
    if not request.user.has_financial_access:
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)
    try:
        if request.method == 'POST':
            item = services.approve_upsell_commission(item, user=request.user)
        else:
            item = services.revoke_upsell_commission(item)
    except ValidationError as e:
        return Response({'error': e.messages[0]}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(
        request=request,
        action='commission_approve' if request.method == 'POST' else 'commission_revoke',
        model_name=item.__class__.__name__,
        object_id=item.pk,
        object_name=item.name,
        changes={'upsold_by': item.upsold_by_id, 'commission_percent': str(item.upsell_commission_percent)},
    )
    return Response(serializer_class(item).data)


@api_view(['POST', 'DELETE'])
@permission_classes([IsAuthenticated])
def extra_work_commission(request, pk):
    """Approve or revoke the upsell commission of extra work"""
    return _commission_approval(request, get_object_or_404(ExtraWork, pk=pk), ExtraWorkSerializer)


@api_view(['POST', 'DELETE'])
@permission_classes([IsAuthenticated])
def engagement_service_commission(request, pk):
    """Approve or revoke the upsell commission of an engagement service"""
    return _commission_approval(
        request, get_object_or_404(EngagementService.objects.select_related('service'), pk=pk),
        EngagementServiceSerializer
    )
