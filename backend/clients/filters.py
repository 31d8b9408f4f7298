import django_filters
from django.db.models import Q

from .models import (
    ActivityReward, Client, ClientContact, Colleague, Engagement, EngagementService, EngagementAssignment,
    ExtraWork, Service
)


class ClientFilter(django_filters.FilterSet):
    """Filter clients by status, tier and a free-text search"""

    search = django_filters.CharFilter(method='filter_search', label='Search')
    status = django_filters.CharFilter(field_name='status', lookup_expr='exact')
    tier = django_filters.CharFilter(field_name='tier', lookup_expr='exact')
    sales_representative = django_filters.NumberFilter(field_name='sales_representative_id', lookup_expr='exact')

    class Meta:
        model = Client
        fields = ['search', 'status', 'tier', 'sales_representative']

    def filter_search(self, queryset, name, value):
        value = (value or '').strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(name__icontains=value) |
            Q(brand_name__icontains=value) |
            Q(ico__icontains=value) |
            Q(industry__icontains=value)
        )


class ClientContactFilter(django_filters.FilterSet):
    client = django_filters.NumberFilter(field_name='client_id', lookup_expr='exact')
    is_primary = django_filters.BooleanFilter(field_name='is_primary')
    is_decision_maker = django_filters.BooleanFilter(field_name='is_decision_maker')

    class Meta:
        model = ClientContact
        fields = ['client', 'is_primary', 'is_decision_maker']


class ServiceFilter(django_filters.FilterSet):
    search = django_filters.CharFilter(method='filter_search', label='Search')
    service_type = django_filters.CharFilter(field_name='service_type', lookup_expr='exact')
    category = django_filters.CharFilter(field_name='category', lookup_expr='exact')
    is_active = django_filters.BooleanFilter(field_name='is_active')

    class Meta:
        model = Service
        fields = ['search', 'service_type', 'category', 'is_active']

    def filter_search(self, queryset, name, value):
        if not value:
            return queryset
        return queryset.filter(Q(name__icontains=value) | Q(code__icontains=value))


class ColleagueFilter(django_filters.FilterSet):
    search = django_filters.CharFilter(method='filter_search', label='Search')
    status = django_filters.CharFilter(field_name='status', lookup_expr='exact')
    seniority = django_filters.CharFilter(field_name='seniority', lookup_expr='exact')
    is_freelancer = django_filters.BooleanFilter(field_name='is_freelancer')

    class Meta:
        model = Colleague
        fields = ['search', 'status', 'seniority', 'is_freelancer']

    def filter_search(self, queryset, name, value):
        if not value:
            return queryset
        return queryset.filter(
            Q(full_name__icontains=value) | Q(email__icontains=value) | Q(position__icontains=value)
        )


class EngagementFilter(django_filters.FilterSet):
    search = django_filters.CharFilter(method='filter_search', label='Search')
    client = django_filters.NumberFilter(field_name='client_id', lookup_expr='exact')
    status = django_filters.CharFilter(field_name='status', lookup_expr='exact')
    type = django_filters.CharFilter(field_name='type', lookup_expr='exact')
    colleague = django_filters.NumberFilter(method='filter_colleague', label='Colleague ID')

    class Meta:
        model = Engagement
        fields = ['search', 'client', 'status', 'type', 'colleague']

    def filter_search(self, queryset, name, value):
        if not value:
            return queryset
        return queryset.filter(
            Q(name__icontains=value) | Q(client__name__icontains=value) | Q(client__brand_name__icontains=value)
        )

    def filter_colleague(self, queryset, name, value):
        return queryset.filter(assignments__colleague_id=value).distinct()


class EngagementServiceFilter(django_filters.FilterSet):
    engagement = django_filters.NumberFilter(field_name='engagement_id', lookup_expr='exact')
    service = django_filters.NumberFilter(field_name='service_id', lookup_expr='exact')
    billing_type = django_filters.CharFilter(field_name='billing_type', lookup_expr='exact')
    invoicing_status = django_filters.CharFilter(field_name='invoicing_status', lookup_expr='exact')
    is_active = django_filters.BooleanFilter(field_name='is_active')

    class Meta:
        model = EngagementService
        fields = ['engagement', 'service', 'billing_type', 'invoicing_status', 'is_active']


class EngagementAssignmentFilter(django_filters.FilterSet):
    engagement = django_filters.NumberFilter(field_name='engagement_id', lookup_expr='exact')
    colleague = django_filters.NumberFilter(field_name='colleague_id', lookup_expr='exact')

    class Meta:
        model = EngagementAssignment
        fields = ['engagement', 'colleague']


class ExtraWorkFilter(django_filters.FilterSet):
    client = django_filters.NumberFilter(field_name='client_id', lookup_expr='exact')
    engagement = django_filters.NumberFilter(field_name='engagement_id', lookup_expr='exact')
    colleague = django_filters.NumberFilter(field_name='colleague_id', lookup_expr='exact')
    status = django_filters.CharFilter(field_name='status', lookup_expr='exact')
    billing_period = django_filters.CharFilter(field_name='billing_period', lookup_expr='exact')

    class Meta:
        model = ExtraWork
        fields = ['client', 'engagement', 'colleague', 'status', 'billing_period']


class ActivityRewardFilter(django_filters.FilterSet):
    year = django_filters.NumberFilter(field_name='activity_date', lookup_expr='year')
    month = django_filters.NumberFilter(field_name='activity_date', lookup_expr='month')
    billing_type = django_filters.CharFilter(field_name='billing_type', lookup_expr='exact')

    class Meta:
        model = ActivityReward
        fields = ['year', 'month', 'billing_type']
