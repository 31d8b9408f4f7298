"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from backend.clients.models import (
    Colleague, Client, ClientContact, Service, Engagement, EngagementService,
    EngagementAssignment, ExtraWork, ActivityReward
)
from backend.creative_boost.models import OutputType, CreativeBoostClient, ClientMonth, ClientMonthOutput
from backend.leads.models import Lead
from backend.recruitment.models import Applicant
from backend.meetings.models import Meeting, MeetingParticipant, MeetingTask
from datetime import date, timedelta
from decimal import Decimal
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', role='specialist',
                    can_see_financials=False, is_staff=False, is_superuser=False):
        """Create a test user"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        return User.objects.create_user(
            username=username,
            email=email,
            password=password,
            role=role,
            can_see_financials=can_see_financials,
            is_staff=is_staff,
            is_superuser=is_superuser
        )

    @staticmethod
    def create_finance_user(**kwargs):
        """User allowed to see money figures"""
        kwargs.setdefault('role', 'finance')
        return TestDataFactory.create_user(**kwargs)

    @staticmethod
    def create_colleague(full_name=None, email=None, monthly_fixed_cost=None, is_freelancer=False,
                         birthday=None, status='active', user=None):
        if not full_name:
            full_name = f'Colleague {TestDataFactory.random_string(6)}'
        return Colleague.objects.create(
            user=user,
            full_name=full_name,
            email=email if email is not None else f'{full_name.replace(" ", ".").lower()}@agency.test',
            monthly_fixed_cost=monthly_fixed_cost,
            is_freelancer=is_freelancer,
            birthday=birthday,
            status=status
        )

    @staticmethod
    def create_client(name=None, brand_name='', status='active', ico='', dic=None):
        """Create a test client"""
        if not name:
            name = f'Client {TestDataFactory.random_string(6)}'
        return Client.objects.create(name=name, brand_name=brand_name, status=status, ico=ico, dic=dic)

    @staticmethod
    def create_contact(client, name=None, is_primary=False, is_decision_maker=False):
        return ClientContact.objects.create(
            client=client,
            name=name or f'Contact {TestDataFactory.random_string(6)}',
            email=f'{TestDataFactory.random_string(6).lower()}@client.test',
            is_primary=is_primary,
            is_decision_maker=is_decision_maker
        )

    @staticmethod
    def create_service(code=None, name=None, base_price=Decimal('10000.00'), tier_pricing=None):
        if not code:
            code = f'SVC_{TestDataFactory.random_string(6).upper()}'
        return Service.objects.create(
            code=code,
            name=name or code.title(),
            base_price=base_price,
            tier_pricing=tier_pricing or []
        )

    @staticmethod
    def create_creative_boost_service():
        service, _ = Service.objects.get_or_create(
            code='CREATIVE_BOOST',
            defaults={'name': 'Creative Boost', 'base_price': Decimal('0.00'), 'category': 'creative'}
        )
        return service

    @staticmethod
    def create_engagement(client=None, name=None, monthly_fee=Decimal('20000.00'), status='active',
                          type='retainer', start_date=None, end_date=None):
        """Create a test engagement"""
        client = client or TestDataFactory.create_client()
        return Engagement.objects.create(
            client=client,
            name=name or f'Engagement {TestDataFactory.random_string(6)}',
            type=type,
            monthly_fee=monthly_fee,
            status=status,
            start_date=start_date or date(2024, 1, 1),
            end_date=end_date
        )

    @staticmethod
    def create_engagement_service(engagement, service=None, price=Decimal('10000.00'), billing_type='monthly',
                                  name=None, **kwargs):
        service = service or TestDataFactory.create_service()
        return EngagementService.objects.create(
            engagement=engagement,
            service=service,
            name=name or service.name,
            price=price,
            billing_type=billing_type,
            currency=engagement.currency,
            **kwargs
        )

    @staticmethod
    def create_assignment(engagement, colleague=None, monthly_cost=Decimal('5000.00'), cost_model='fixed_monthly', **kwargs):
        return EngagementAssignment.objects.create(
            engagement=engagement,
            colleague=colleague or TestDataFactory.create_colleague(),
            cost_model=cost_model,
            monthly_cost=monthly_cost,
            **kwargs
        )

    @staticmethod
    def create_extra_work(client, engagement=None, amount=Decimal('3000.00'), billing_period='2025-03',
                          status='pending_approval', name=None, **kwargs):
        return ExtraWork.objects.create(
            client=client,
            engagement=engagement,
            name=name or f'Extra {TestDataFactory.random_string(6)}',
            amount=amount,
            work_date=date(int(billing_period[:4]), int(billing_period[5:]), 10),
            billing_period=billing_period,
            status=status,
            **kwargs
        )

    @staticmethod
    def create_activity_reward(colleague, amount=Decimal('2000.00'), activity_date=None, description='Workshop', **kwargs):
        return ActivityReward.objects.create(
            colleague=colleague,
            description=description,
            amount=amount,
            activity_date=activity_date or date(2025, 3, 15),
            **kwargs
        )

    @staticmethod
    def create_output_type(name=None, category='banner', base_credits=Decimal('1.00'), sort_order=0):
        if not name:
            name = f'Output {TestDataFactory.random_string(6)}'
        return OutputType.objects.create(name=name, category=category, base_credits=base_credits, sort_order=sort_order)

    @staticmethod
    def create_cb_client(client=None, **kwargs):
        client = client or TestDataFactory.create_client()
        return CreativeBoostClient.objects.create(client=client, **kwargs)

    @staticmethod
    def create_client_month(client=None, year=2025, month=3, max_credits=Decimal('50'),
                            price_per_credit=Decimal('1500'), min_credits=Decimal('30'), **kwargs):
        client = client or TestDataFactory.create_client()
        return ClientMonth.objects.create(
            client=client,
            year=year,
            month=month,
            min_credits=min_credits,
            max_credits=max_credits,
            price_per_credit=price_per_credit,
            **kwargs
        )

    @staticmethod
    def create_output(client, output_type, year=2025, month=3, normal_count=0, express_count=0, colleague=None):
        return ClientMonthOutput.objects.create(
            client=client,
            output_type=output_type,
            year=year,
            month=month,
            normal_count=normal_count,
            express_count=express_count,
            colleague=colleague
        )

    @staticmethod
    def create_lead(company_name=None, stage='new_lead', owner=None, estimated_price=Decimal('25000.00'), **kwargs):
        """Create a test lead"""
        return Lead.objects.create(
            company_name=company_name or f'Lead {TestDataFactory.random_string(6)}',
            stage=stage,
            owner=owner,
            estimated_price=estimated_price,
            **kwargs
        )

    @staticmethod
    def create_applicant(full_name=None, position='Designer', stage='new_applicant', **kwargs):
        full_name = full_name or f'Applicant {TestDataFactory.random_string(6)}'
        return Applicant.objects.create(
            full_name=full_name,
            email=f'{TestDataFactory.random_string(8).lower()}@applicant.test',
            position=position,
            stage=stage,
            **kwargs
        )

    @staticmethod
    def create_meeting(title=None, scheduled_at=None, type='internal', client=None, status='scheduled'):
        return Meeting.objects.create(
            title=title or f'Meeting {TestDataFactory.random_string(6)}',
            type=type,
            client=client,
            scheduled_at=scheduled_at or timezone.now() + timedelta(days=1),
            status=status
        )

    @staticmethod
    def create_participant(meeting, colleague=None, external_name=None):
        return MeetingParticipant.objects.create(meeting=meeting, colleague=colleague, external_name=external_name)

    @staticmethod
    def create_meeting_task(meeting, title=None, status='todo'):
        return MeetingTask.objects.create(meeting=meeting, title=title or 'Follow up', status=status)

    @staticmethod
    def clear_cache():
        """Read models are cached across tests in the local memory cache"""
        cache.clear()


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
