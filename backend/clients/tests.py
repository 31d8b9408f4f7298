"""
Test suite for Clients module
Tests: clients, contacts, services, engagements and their history, margins, extra work,
upsell commissions, activity rewards
"""
from datetime import date
from decimal import Decimal
from django.core.exceptions import ValidationError
from django.test import TestCase
from rest_framework import status
from backend.clients.models import ClientContact, EngagementHistoryEntry, ExtraWork
from backend.clients import services
from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient


class ClientModelTests(TestCase):
    """Test client model rules"""

    def test_only_one_primary_contact(self):
        client = TestDataFactory.create_client()
        first = TestDataFactory.create_contact(client, is_primary=True)
        second = TestDataFactory.create_contact(client, is_primary=True)
        first.refresh_from_db()
        self.assertFalse(first.is_primary)
        self.assertTrue(second.is_primary)
        self.assertEqual(services.primary_contact(client), second)

    def test_service_tier_price(self):
        service = TestDataFactory.create_service(
            base_price=Decimal('9000.00'),
            tier_pricing=[{'tier': 'growth', 'price': 15000}, {'tier': 'elite', 'price': None}]
        )
        self.assertEqual(service.price_for_tier('growth'), Decimal('15000'))
        self.assertIsNone(service.price_for_tier('elite'))
        self.assertEqual(service.price_for_tier(None), Decimal('9000.00'))

    def test_new_one_off_service_is_pending_invoicing(self):
        engagement = TestDataFactory.create_engagement()
        one_off = TestDataFactory.create_engagement_service(engagement, billing_type='one_off')
        monthly = TestDataFactory.create_engagement_service(engagement)
        self.assertEqual(one_off.invoicing_status, 'pending')
        self.assertEqual(monthly.invoicing_status, 'not_applicable')


class EngagementServiceTests(TestCase):
    """Test engagement business rules"""

    def test_active_in_month(self):
        engagement = TestDataFactory.create_engagement(start_date=date(2025, 3, 20), end_date=date(2025, 5, 10))
        self.assertFalse(services.engagement_is_active_in_month(engagement, 2025, 2))
        self.assertTrue(services.engagement_is_active_in_month(engagement, 2025, 3))
        self.assertTrue(services.engagement_is_active_in_month(engagement, 2025, 5))
        self.assertFalse(services.engagement_is_active_in_month(engagement, 2025, 6))
        self.assertEqual(list(services.engagements_active_in_month(2025, 4)), [engagement])

    def test_paused_engagement_is_not_active(self):
        engagement = TestDataFactory.create_engagement(status='paused')
        self.assertFalse(services.engagement_is_active_in_month(engagement, 2025, 3))
        self.assertEqual(services.engagements_active_in_month(2025, 3).count(), 0)

    def test_margin(self):
        engagement = TestDataFactory.create_engagement(monthly_fee=Decimal('50000.00'))
        TestDataFactory.create_assignment(engagement, monthly_cost=Decimal('20000.00'))
        TestDataFactory.create_assignment(engagement, monthly_cost=Decimal('10000.00'))
        margin = services.engagement_margin(engagement)
        self.assertEqual(margin['cost'], Decimal('30000.00'))
        self.assertEqual(margin['margin'], Decimal('20000.00'))
        self.assertEqual(margin['margin_percent'], Decimal('40.00'))
        self.assertFalse(margin['is_low_margin'])
        self.assertEqual(margin['assignment_count'], 2)

    def test_low_margin_flag(self):
        engagement = TestDataFactory.create_engagement(monthly_fee=Decimal('10000.00'))
        TestDataFactory.create_assignment(engagement, monthly_cost=Decimal('8000.00'))
        self.assertTrue(services.engagement_margin(engagement)['is_low_margin'])

    def test_zero_revenue_margin(self):
        engagement = TestDataFactory.create_engagement(monthly_fee=Decimal('0'))
        margin = services.engagement_margin(engagement)
        self.assertEqual(margin['margin_percent'], Decimal('0'))
        self.assertFalse(margin['is_low_margin'])

    def test_record_changes_only_for_changed_fields(self):
        engagement = TestDataFactory.create_engagement(monthly_fee=Decimal('20000.00'))
        entries = services.record_engagement_changes(engagement, {
            'monthly_fee': Decimal('20000'),
            'status': 'paused',
            'end_date': date(2025, 12, 31),
            'name': engagement.name,
        })
        self.assertEqual(
            sorted(e.change_type for e in entries), ['end_date_set', 'status_change']
        )
        status_entry = [e for e in entries if e.change_type == 'status_change'][0]
        self.assertEqual(status_entry.old_value, 'active')
        self.assertEqual(status_entry.new_value, 'paused')


class ExtraWorkTests(TestCase):
    """Test extra work workflow"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client_obj = TestDataFactory.create_client()

    def test_advance_through_workflow(self):
        extra_work = TestDataFactory.create_extra_work(self.client_obj)
        services.advance_extra_work(extra_work, user=self.user)
        self.assertEqual(extra_work.status, 'in_progress')
        self.assertEqual(extra_work.approved_by, self.user)
        self.assertIsNotNone(extra_work.approval_date)

        services.advance_extra_work(extra_work, user=self.user)
        self.assertEqual(extra_work.status, 'ready_to_invoice')
        services.advance_extra_work(extra_work, user=self.user)
        self.assertEqual(extra_work.status, 'invoiced')
        self.assertIsNotNone(extra_work.invoiced_at)

    def test_invoiced_work_cannot_advance(self):
        extra_work = TestDataFactory.create_extra_work(self.client_obj, status='invoiced')
        with self.assertRaises(ValidationError):
            services.advance_extra_work(extra_work)

    def test_ready_to_invoice_for_period(self):
        ready = TestDataFactory.create_extra_work(self.client_obj, status='ready_to_invoice', billing_period='2025-03')
        TestDataFactory.create_extra_work(self.client_obj, status='ready_to_invoice', billing_period='2025-04')
        TestDataFactory.create_extra_work(self.client_obj, status='in_progress', billing_period='2025-03')
        self.assertEqual(list(services.extra_work_ready_to_invoice(2025, 3)), [ready])

    def test_approve_and_revoke_upsell_commission(self):
        seller = TestDataFactory.create_colleague()
        extra_work = TestDataFactory.create_extra_work(
            self.client_obj, upsold_by=seller, upsell_commission_percent=Decimal('10')
        )
        services.approve_upsell_commission(extra_work, user=self.user)
        extra_work.refresh_from_db()
        self.assertIsNotNone(extra_work.commission_approved_at)
        self.assertEqual(extra_work.commission_approved_by, self.user)
        with self.assertRaises(ValidationError):
            services.approve_upsell_commission(extra_work, user=self.user)

        services.revoke_upsell_commission(extra_work)
        extra_work.refresh_from_db()
        self.assertIsNone(extra_work.commission_approved_at)
        with self.assertRaises(ValidationError):
            services.revoke_upsell_commission(extra_work)

    def test_commission_needs_seller_and_percent(self):
        extra_work = TestDataFactory.create_extra_work(self.client_obj, upsell_commission_percent=Decimal('10'))
        with self.assertRaises(ValidationError):
            services.approve_upsell_commission(extra_work)


class ClientAPITests(TestCase):
    """Test client, contact and service endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_client(self):
        response = self.client.post('/api/v1/clients/', {'name': 'Acme s.r.o.', 'ico': '12345678'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['created_by'], self.user.pk)
        self.assertTrue(AuditLog.objects.filter(action='create', model_name='Client').exists())

    def test_search_clients(self):
        TestDataFactory.create_client(name='Alpha Foods')
        TestDataFactory.create_client(name='Beta Cars', brand_name='BetaDrive')
        response = self.client.get('/api/v1/clients/?search=betadrive')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([c['name'] for c in response.data], ['Beta Cars'])

    def test_contacts_summary(self):
        client = TestDataFactory.create_client()
        TestDataFactory.create_contact(client, name='Boss', is_primary=True, is_decision_maker=True)
        TestDataFactory.create_contact(client, name='Assistant')
        response = self.client.get(f'/api/v1/clients/{client.pk}/contacts-summary/')
        self.assertEqual(response.data['primary_contact']['name'], 'Boss')
        self.assertEqual(len(response.data['decision_makers']), 1)

    def test_contact_primary_switch_via_api(self):
        client = TestDataFactory.create_client()
        old = TestDataFactory.create_contact(client, is_primary=True)
        response = self.client.post('/api/v1/contacts/', {
            'client': client.pk, 'name': 'New Primary', 'is_primary': True
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertFalse(ClientContact.objects.get(pk=old.pk).is_primary)

    def test_invalid_tier_pricing(self):
        response = self.client.post('/api/v1/services/', {
            'code': 'SEO', 'name': 'SEO', 'tier_pricing': [{'tier': 'platinum', 'price': 1}]
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_used_service_cannot_be_deleted(self):
        service = TestDataFactory.create_service()
        TestDataFactory.create_engagement_service(TestDataFactory.create_engagement(), service=service)
        response = self.client.delete(f'/api/v1/services/{service.pk}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class EngagementAPITests(TestCase):
    """Test engagement endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.client_obj = TestDataFactory.create_client()

    def test_create_engagement_records_history(self):
        response = self.client.post('/api/v1/engagements/', {
            'client': self.client_obj.pk,
            'name': 'Performance retainer',
            'monthly_fee': '30000.00',
            'start_date': '2025-01-01',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        history = EngagementHistoryEntry.objects.filter(engagement_id=response.data['id'])
        self.assertEqual(list(history.values_list('change_type', flat=True)), ['created'])

    def test_end_before_start_is_rejected(self):
        response = self.client.post('/api/v1/engagements/', {
            'client': self.client_obj.pk,
            'name': 'Broken',
            'start_date': '2025-05-01',
            'end_date': '2025-04-01',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('end_date', response.data)

    def test_contact_of_other_client_is_rejected(self):
        other_contact = TestDataFactory.create_contact(TestDataFactory.create_client())
        response = self.client.post('/api/v1/engagements/', {
            'client': self.client_obj.pk,
            'name': 'Wrong contact',
            'start_date': '2025-01-01',
            'contact_person': other_contact.pk,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_writes_history(self):
        engagement = TestDataFactory.create_engagement(client=self.client_obj)
        response = self.client.patch(f'/api/v1/engagements/{engagement.pk}/', {'status': 'paused'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        response = self.client.get(f'/api/v1/engagements/{engagement.pk}/history/')
        self.assertEqual(response.data[0]['change_type'], 'status_change')
        self.assertEqual(response.data[0]['new_value'], 'paused')

    def test_service_and_assignment_history(self):
        engagement = TestDataFactory.create_engagement(client=self.client_obj)
        service = TestDataFactory.create_service()
        response = self.client.post('/api/v1/engagement-services/', {
            'engagement': engagement.pk, 'service': service.pk, 'name': 'PPC', 'price': '12000.00'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        es_id = response.data['id']
        self.client.patch(f'/api/v1/engagement-services/{es_id}/', {'price': '14000.00'}, format='json')

        colleague = TestDataFactory.create_colleague()
        response = self.client.post('/api/v1/assignments/', {
            'engagement': engagement.pk, 'colleague': colleague.pk, 'monthly_cost': '5000.00'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.client.delete(f"/api/v1/assignments/{response.data['id']}/")
        self.client.delete(f'/api/v1/engagement-services/{es_id}/')

        change_types = set(engagement.history.values_list('change_type', flat=True))
        self.assertEqual(change_types, {
            'service_added', 'service_updated', 'service_removed', 'colleague_assigned', 'colleague_removed'
        })
        updated = engagement.history.get(change_type='service_updated')
        self.assertEqual(updated.old_value, '12000.00')
        self.assertEqual(updated.new_value, '14000.00')

    def test_filter_by_colleague(self):
        engagement = TestDataFactory.create_engagement(client=self.client_obj)
        TestDataFactory.create_engagement(client=self.client_obj)
        assignment = TestDataFactory.create_assignment(engagement)
        response = self.client.get(f'/api/v1/engagements/?colleague={assignment.colleague_id}')
        self.assertEqual([e['id'] for e in response.data], [engagement.pk])

    def test_margin_requires_financial_access(self):
        engagement = TestDataFactory.create_engagement(client=self.client_obj)
        response = self.client.get(f'/api/v1/engagements/{engagement.pk}/margin/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.authenticate_user(TestDataFactory.create_finance_user())
        response = self.client.get(f'/api/v1/engagements/{engagement.pk}/margin/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['engagement_id'], engagement.pk)


class ExtraWorkAPITests(TestCase):
    """Test extra work endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.client_obj = TestDataFactory.create_client()

    def test_create_ignores_status_and_normalizes_period(self):
        response = self.client.post('/api/v1/extra-work/', {
            'client': self.client_obj.pk,
            'name': 'Landing page',
            'amount': '8000.00',
            'work_date': '2025-03-12',
            'billing_period': '2025-3',
            'status': 'invoiced',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'pending_approval')
        self.assertEqual(response.data['billing_period'], '2025-03')

    def test_bad_billing_period(self):
        response = self.client.post('/api/v1/extra-work/', {
            'client': self.client_obj.pk,
            'name': 'Landing page',
            'amount': '8000.00',
            'work_date': '2025-03-12',
            'billing_period': 'March',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_advance(self):
        extra_work = TestDataFactory.create_extra_work(self.client_obj)
        response = self.client.post(f'/api/v1/extra-work/{extra_work.pk}/advance/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'in_progress')
        self.assertEqual(response.data['approved_by'], self.user.pk)
        self.assertTrue(AuditLog.objects.filter(action='extra_work_advance', object_id=str(extra_work.pk)).exists())

    def test_advance_invoiced_is_rejected(self):
        extra_work = TestDataFactory.create_extra_work(self.client_obj, status='invoiced')
        response = self.client.post(f'/api/v1/extra-work/{extra_work.pk}/advance/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(ExtraWork.objects.get(pk=extra_work.pk).status, 'invoiced')

    def test_commission_endpoint(self):
        finance = TestDataFactory.create_finance_user()
        seller = TestDataFactory.create_colleague()
        extra_work = TestDataFactory.create_extra_work(
            self.client_obj, upsold_by=seller, upsell_commission_percent=Decimal('10')
        )
        url = f'/api/v1/extra-work/{extra_work.pk}/commission/'
        self.assertEqual(self.client.post(url).status_code, status.HTTP_403_FORBIDDEN)

        self.client.authenticate_user(finance)
        response = self.client.post(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['commission_approved_by'], finance.pk)
        self.assertTrue(AuditLog.objects.filter(action='commission_approve', object_id=str(extra_work.pk)).exists())
        self.assertEqual(self.client.post(url).status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.delete(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data['commission_approved_at'])

    def test_service_commission_endpoint(self):
        self.client.authenticate_user(TestDataFactory.create_finance_user())
        engagement = TestDataFactory.create_engagement(client=self.client_obj)
        plain = TestDataFactory.create_engagement_service(engagement)
        response = self.client.post(f'/api/v1/engagement-services/{plain.pk}/commission/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        upsold = TestDataFactory.create_engagement_service(
            engagement, upsold_by=TestDataFactory.create_colleague(), upsell_commission_percent=Decimal('5')
        )
        response = self.client.post(f'/api/v1/engagement-services/{upsold.pk}/commission/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNotNone(response.data['commission_approved_at'])


class ActivityRewardAPITests(TestCase):
    """Test colleague activity reward endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_finance_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.colleague = TestDataFactory.create_colleague()
        self.url = f'/api/v1/colleagues/{self.colleague.pk}/activity-rewards/'

    def test_hourly_reward_amount(self):
        response = self.client.post(self.url, {
            'description': 'Workshop for the sales team',
            'billing_type': 'hourly',
            'hours': '3',
            'hourly_rate': '700',
            'activity_date': '2025-03-14',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Decimal(response.data['amount']), Decimal('2100.00'))
        self.assertEqual(response.data['colleague'], self.colleague.pk)
        self.assertEqual(response.data['created_by'], self.user.pk)

    def test_hourly_reward_needs_rate(self):
        response = self.client.post(self.url, {
            'description': 'Workshop', 'billing_type': 'hourly', 'hours': '3', 'activity_date': '2025-03-14',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_by_month(self):
        TestDataFactory.create_activity_reward(self.colleague, activity_date=date(2025, 3, 2))
        TestDataFactory.create_activity_reward(self.colleague, activity_date=date(2025, 4, 2))
        TestDataFactory.create_activity_reward(TestDataFactory.create_colleague())
        self.assertEqual(len(self.client.get(self.url).data), 2)
        self.assertEqual(len(self.client.get(f'{self.url}?year=2025&month=3').data), 1)

    def test_detail_and_access(self):
        reward = TestDataFactory.create_activity_reward(self.colleague)
        response = self.client.patch(f'/api/v1/activity-rewards/{reward.pk}/', {'amount': '2500.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data['amount']), Decimal('2500.00'))

        self.client.authenticate_user(TestDataFactory.create_user())
        self.assertEqual(self.client.get(self.url).status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(
            self.client.delete(f'/api/v1/activity-rewards/{reward.pk}/').status_code, status.HTTP_403_FORBIDDEN
        )
