"""
Test suite for Leads module
Tests: history tracking, stage changes, notes, conversion, funnel analytics
"""
from datetime import date, datetime
from decimal import Decimal
from django.core.exceptions import ValidationError
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from backend.clients.models import Client, ClientContact, EngagementService
from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.leads.models import Lead, LeadHistoryEntry, LeadStageTransition
from backend.leads import services


def transition(lead, from_stage, to_stage, when=None):
    return LeadStageTransition.objects.create(
        lead=lead, from_stage=from_stage, to_stage=to_stage,
        confirmed_at=when or timezone.now()
    )


class LeadServiceTests(TestCase):
    """Test lead pipeline operations"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.lead = TestDataFactory.create_lead(company_name='Prospect s.r.o.', contact_name='Jana Nova')

    def test_update_writes_history_per_changed_field(self):
        entries = services.update_lead(self.lead, {
            'company_name': 'Prospect s.r.o.',
            'estimated_price': '30000',
            'summary': 'Wants PPC',
        }, user=self.user)

        self.assertEqual(sorted(e.field_name for e in entries), ['estimated_price', 'summary'])
        price_entry = LeadHistoryEntry.objects.get(field_name='estimated_price')
        self.assertEqual(price_entry.old_value, '25000.00')
        self.assertEqual(price_entry.new_value, '30000')
        self.assertEqual(price_entry.change_type, 'field_update')

    def test_owner_change_has_own_type(self):
        owner = TestDataFactory.create_user(username='owner')
        services.update_lead(self.lead, {'owner': owner}, user=self.user)
        entry = LeadHistoryEntry.objects.get(change_type='owner_change')
        self.assertEqual(entry.new_value, 'owner')
        self.assertIsNone(entry.old_value)

    def test_unchanged_update_writes_nothing(self):
        self.assertEqual(services.update_lead(self.lead, {'summary': ''}), [])
        self.assertFalse(LeadHistoryEntry.objects.exists())

    def test_change_stage_records_history(self):
        self.assertIsNone(services.change_stage(self.lead, 'meeting_done', user=self.user))
        entry = LeadHistoryEntry.objects.get(change_type='stage_change')
        self.assertEqual((entry.old_value, entry.new_value), ('New lead', 'Meeting done'))
        self.assertFalse(LeadStageTransition.objects.exists())

    def test_confirmed_stage_change_creates_transition(self):
        result = services.change_stage(self.lead, 'offer_sent', user=self.user, confirm=True)
        self.assertEqual(result.from_stage, 'new_lead')
        self.assertEqual(result.transition_value, Decimal('25000.00'))
        self.lead.refresh_from_db()
        self.assertIsNotNone(self.lead.offer_sent_at)
        self.assertEqual(self.lead.offer_sent_by, self.user)

    def test_same_stage_is_noop(self):
        self.assertIsNone(services.change_stage(self.lead, 'new_lead', confirm=True))
        self.assertFalse(LeadHistoryEntry.objects.exists())

    def test_unknown_stage_rejected(self):
        with self.assertRaises(ValidationError):
            services.change_stage(self.lead, 'dreaming')

    def test_note_preview_is_truncated(self):
        services.add_note(self.lead, 'x' * 150, user=self.user)
        entry = LeadHistoryEntry.objects.get(change_type='note_added')
        self.assertEqual(len(entry.new_value), 103)
        self.assertTrue(entry.new_value.endswith('...'))


class LeadConversionTests(TestCase):
    """Test converting a won lead into a client"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.ppc = TestDataFactory.create_service(code='PPC', base_price=Decimal('15000.00'))
        self.web = TestDataFactory.create_service(code='WEB', base_price=Decimal('40000.00'))
        self.lead = TestDataFactory.create_lead(
            company_name='Prospect s.r.o.',
            stage='offer_sent',
            ico='27074358',
            contact_name='Jana Nova',
            contact_email='jana@prospect.test',
            source='referral',
            potential_services=[
                {'service_id': self.ppc.pk, 'billing_type': 'monthly'},
                {'service_id': self.web.pk, 'billing_type': 'one_off', 'price': '35000'},
                {'service_id': 999999, 'billing_type': 'monthly'},
            ],
        )

    def test_convert_creates_client_engagement_and_services(self):
        client, engagement = services.convert_lead(self.lead, user=self.user, engagement_data={'start_date': date(2025, 4, 1)})

        self.assertEqual(client.name, 'Prospect s.r.o.')
        self.assertEqual(client.ico, '27074358')
        self.assertEqual(client.acquisition_channel, 'Referral')
        contact = ClientContact.objects.get(client=client)
        self.assertTrue(contact.is_primary)
        self.assertEqual(engagement.monthly_fee, Decimal('15000.00'))
        self.assertEqual(engagement.one_off_fee, Decimal('35000'))
        self.assertEqual(engagement.start_date, date(2025, 4, 1))
        self.assertEqual(EngagementService.objects.filter(engagement=engagement).count(), 2)

        self.lead.refresh_from_db()
        self.assertEqual(self.lead.stage, 'won')
        self.assertEqual(self.lead.converted_to_client, client)
        self.assertTrue(LeadHistoryEntry.objects.filter(lead=self.lead, change_type='converted').exists())

    def test_convert_twice_is_rejected(self):
        services.convert_lead(self.lead)
        with self.assertRaises(ValidationError):
            services.convert_lead(self.lead)
        self.assertEqual(Client.objects.count(), 1)

    def test_convert_without_contact(self):
        self.lead.contact_name = ''
        self.lead.save()
        client, engagement = services.convert_lead(self.lead)
        self.assertFalse(ClientContact.objects.filter(client=client).exists())
        self.assertIsNone(engagement.contact_person)


class FunnelTests(TestCase):
    """Test funnel analytics over confirmed transitions"""

    def test_conversion_rates(self):
        leads = [TestDataFactory.create_lead() for _ in range(4)]
        for lead in leads:
            transition(lead, 'new_lead', 'new_lead')
        transition(leads[0], 'new_lead', 'meeting_done')
        transition(leads[1], 'new_lead', 'meeting_done')

        rates = {(r['from_stage'], r['to_stage']): r for r in services.conversion_rates()}
        first = rates[('new_lead', 'meeting_done')]
        self.assertEqual((first['count'], first['total']), (2, 4))
        self.assertEqual(first['rate'], 50.0)
        self.assertEqual(rates[('offer_sent', 'won')]['rate'], 0)
        self.assertEqual(len(rates), 6)

    def test_rate_is_zero_without_stage_entries(self):
        lead = TestDataFactory.create_lead()
        transition(lead, 'new_lead', 'meeting_done')
        rates = services.conversion_rates()
        self.assertEqual((rates[0]['count'], rates[0]['total']), (1, 0))
        self.assertEqual(rates[0]['rate'], 0)

    def test_rate_never_exceeds_hundred(self):
        transition(TestDataFactory.create_lead(), 'new_lead', 'new_lead')
        for _ in range(2):
            transition(TestDataFactory.create_lead(), 'new_lead', 'meeting_done')
        rates = services.conversion_rates()
        self.assertEqual(rates[0]['rate'], 100.0)

    def test_overall_conversion(self):
        for _ in range(4):
            transition(TestDataFactory.create_lead(), 'new_lead', 'new_lead')
        transition(TestDataFactory.create_lead(), 'offer_sent', 'won')
        self.assertEqual(services.overall_conversion(), 25.0)
        self.assertEqual(services.overall_conversion([]), 0)

    def test_monthly_trend_wraps_year(self):
        lead = TestDataFactory.create_lead()
        transition(lead, 'offer_sent', 'won', when=timezone.make_aware(datetime(2024, 12, 15, 12, 0)))
        trend = services.monthly_trend(months=3, today=date(2025, 2, 10))
        self.assertEqual([t['month'] for t in trend], ['2024-12', '2025-01', '2025-02'])
        self.assertEqual(trend[0]['count'], 1)


class LeadAPITests(TestCase):
    """Test lead endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_lead(self):
        payload = {
            'company_name': 'New Prospect',
            'contact_name': 'Petr',
            'estimated_price': '20000.00',
            'potential_services': [{'service_id': 1, 'billing_type': 'monthly', 'price': '12000'}],
        }
        response = self.client.post('/api/v1/leads/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        lead = Lead.objects.get(pk=response.data['id'])
        self.assertEqual(lead.owner, self.user)
        self.assertEqual(lead.potential_services[0]['price'], '12000.00')
        self.assertTrue(LeadHistoryEntry.objects.filter(lead=lead, change_type='created').exists())

    def test_probability_limit(self):
        response = self.client.post('/api/v1/leads/', {'company_name': 'X', 'probability_percent': 120}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_filters(self):
        TestDataFactory.create_lead(company_name='Alpha', stage='won')
        TestDataFactory.create_lead(company_name='Beta', stage='lost')
        TestDataFactory.create_lead(company_name='Gamma')
        response = self.client.get('/api/v1/leads/?stage=won,lost')
        self.assertEqual(len(response.data), 2)
        response = self.client.get('/api/v1/leads/?search=alp')
        self.assertEqual(response.data[0]['company_name'], 'Alpha')

    def test_patch_ignores_stage(self):
        lead = TestDataFactory.create_lead()
        response = self.client.patch(f'/api/v1/leads/{lead.pk}/', {'stage': 'won', 'summary': 'Hot'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        lead.refresh_from_db()
        self.assertEqual(lead.stage, 'new_lead')
        self.assertEqual(lead.summary, 'Hot')

    def test_stage_endpoint(self):
        lead = TestDataFactory.create_lead()
        response = self.client.post(f'/api/v1/leads/{lead.pk}/stage/', {'stage': 'meeting_done', 'confirm': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['lead']['stage'], 'meeting_done')
        self.assertIsNotNone(response.data['transition'])
        self.assertTrue(AuditLog.objects.filter(action='stage_change').exists())

    def test_notes_and_history(self):
        lead = TestDataFactory.create_lead()
        response = self.client.post(f'/api/v1/leads/{lead.pk}/notes/', {'text': 'Called them'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(len(self.client.get(f'/api/v1/leads/{lead.pk}/notes/').data), 1)
        history = self.client.get(f'/api/v1/leads/{lead.pk}/history/').data
        self.assertEqual(history[0]['change_type'], 'note_added')

    def test_convert_endpoint(self):
        lead = TestDataFactory.create_lead(contact_name='Jana')
        response = self.client.post(f'/api/v1/leads/{lead.pk}/convert/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(Client.objects.filter(pk=response.data['client_id']).exists())
        self.assertTrue(AuditLog.objects.filter(action='lead_convert').exists())

        response = self.client.post(f'/api/v1/leads/{lead.pk}/convert/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_funnel_endpoint(self):
        response = self.client.get('/api/v1/leads/funnel/?months=2')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['monthly_trend']), 2)
        self.assertEqual(response.data['total_transitions'], 0)
        self.assertEqual(self.client.get('/api/v1/leads/funnel/?months=abc').status_code, status.HTTP_400_BAD_REQUEST)
