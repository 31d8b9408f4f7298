"""
Test suite for Creative Boost module
Tests: credit arithmetic, month rows, outputs, settings history, month sync, endpoints
"""
from datetime import date
from decimal import Decimal
from io import StringIO
from django.core.management import call_command
from django.test import TestCase
from rest_framework import status
from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.creative_boost.credits import calculate_output_credits, build_summary
from backend.creative_boost.models import OutputType, ClientMonth, ClientMonthOutput, SettingsChange
from backend.creative_boost import services


class CreditTests(TestCase):
    """Test credit arithmetic"""

    def test_express_uses_multiplier(self):
        video = TestDataFactory.create_output_type(category='video', base_credits=Decimal('3'))
        credits = calculate_output_credits(video, 2, 1)
        self.assertEqual(credits.normal_credits, Decimal('6'))
        self.assertEqual(credits.express_credits, Decimal('4.5'))
        self.assertEqual(credits.total_credits, Decimal('10.5'))

    def test_missing_output_type_is_worth_nothing(self):
        self.assertEqual(calculate_output_credits(None, 5, 5).total_credits, Decimal('0'))

    def test_summary_with_overage(self):
        client = TestDataFactory.create_client(name='Acme', brand_name='ACME')
        month = TestDataFactory.create_client_month(client=client, max_credits=Decimal('50'), price_per_credit=Decimal('1500'))
        banner = TestDataFactory.create_output_type(base_credits=Decimal('2'))
        output = TestDataFactory.create_output(client, banner, normal_count=30)

        summary = build_summary(month, [output])
        self.assertEqual(summary.used_credits, Decimal('60'))
        self.assertEqual(summary.remaining_credits, Decimal('-10'))
        self.assertEqual(summary.overage_credits, Decimal('10'))
        self.assertEqual(summary.usage_percent, Decimal('120.00'))
        self.assertEqual(summary.estimated_invoice, Decimal('90000'))
        self.assertEqual(summary.package_amount, Decimal('75000'))
        self.assertEqual(summary.invoice_amount, Decimal('75000'))
        self.assertEqual(summary.client_brand, 'ACME')

    def test_summary_invoice_override_and_zero_allowance(self):
        month = TestDataFactory.create_client_month(max_credits=Decimal('0'), invoice_amount=Decimal('12000'))
        summary = build_summary(month, [])
        self.assertEqual(summary.usage_percent, Decimal('0'))
        self.assertEqual(summary.invoice_amount, Decimal('12000'))


class MonthServiceTests(TestCase):
    """Test month rows, outputs and settings history"""

    def setUp(self):
        TestDataFactory.clear_cache()
        self.user = TestDataFactory.create_user()
        self.client_obj = TestDataFactory.create_client()
        self.output_type = TestDataFactory.create_output_type(base_credits=Decimal('1'))

    def test_add_client_uses_client_defaults(self):
        TestDataFactory.create_cb_client(
            client=self.client_obj, default_min_credits=Decimal('10'),
            default_max_credits=Decimal('20'), default_price_per_credit=Decimal('1000')
        )
        month = services.add_client_to_month(self.client_obj, 2025, 3)
        self.assertEqual(month.max_credits, Decimal('20'))
        self.assertEqual(month.price_per_credit, Decimal('1000'))

    def test_add_client_twice_returns_existing_row(self):
        first = services.add_client_to_month(self.client_obj, 2025, 3, max_credits=40)
        second = services.add_client_to_month(self.client_obj, 2025, 3, max_credits=99)
        self.assertEqual(first.pk, second.pk)
        self.assertEqual(ClientMonth.objects.filter(client=self.client_obj).count(), 1)
        self.assertEqual(second.max_credits, Decimal('40'))

    def test_remove_client_deletes_outputs(self):
        services.add_client_to_month(self.client_obj, 2025, 3)
        TestDataFactory.create_output(self.client_obj, self.output_type, normal_count=2)
        self.assertTrue(services.remove_client_from_month(self.client_obj, 2025, 3))
        self.assertFalse(ClientMonthOutput.objects.filter(client=self.client_obj).exists())

    def test_output_upsert_clamps_and_deletes(self):
        output = services.update_client_output(self.client_obj, self.output_type, 2025, 3, {'normal_count': 3, 'express_count': -2})
        self.assertEqual((output.normal_count, output.express_count), (3, 0))

        output = services.update_client_output(self.client_obj, self.output_type, 2025, 3, {'express_count': 1})
        self.assertEqual((output.normal_count, output.express_count), (3, 1))

        self.assertIsNone(services.update_client_output(self.client_obj, self.output_type, 2025, 3, {'normal_count': 0, 'express_count': 0}))
        self.assertFalse(ClientMonthOutput.objects.exists())

    def test_empty_output_is_not_created(self):
        self.assertIsNone(services.update_client_output(self.client_obj, self.output_type, 2025, 3, {'normal_count': 0}))
        self.assertFalse(ClientMonthOutput.objects.exists())

    def test_settings_history_only_for_real_changes(self):
        month = TestDataFactory.create_client_month(client=self.client_obj, max_credits=Decimal('50'))
        colleague = TestDataFactory.create_colleague(full_name='Designer One')
        changes = services.update_client_month(month, {
            'max_credits': Decimal('50.00'),
            'price_per_credit': Decimal('1600'),
            'colleague': colleague,
            'status': 'active',
        }, user=self.user)

        self.assertEqual(sorted(c.field_name for c in changes), ['Colleague', 'Price per credit'])
        colleague_change = SettingsChange.objects.get(change_type='colleague')
        self.assertIsNone(colleague_change.old_value)
        self.assertEqual(colleague_change.new_value, 'Designer One')
        self.assertEqual(colleague_change.changed_by, self.user)
        month.refresh_from_db()
        self.assertEqual(month.price_per_credit, Decimal('1600'))

    def test_status_change_uses_labels(self):
        month = TestDataFactory.create_client_month(client=self.client_obj)
        services.update_client_month(month, {'status': 'inactive'})
        change = SettingsChange.objects.get()
        self.assertEqual((change.old_value, change.new_value), ('Active', 'Inactive'))
        self.assertIsNone(change.changed_by)

    def test_colleague_credits(self):
        colleague = TestDataFactory.create_colleague()
        video = TestDataFactory.create_output_type(category='video', base_credits=Decimal('3'))
        TestDataFactory.create_output(self.client_obj, video, month=3, normal_count=1, express_count=2, colleague=colleague)
        TestDataFactory.create_output(self.client_obj, self.output_type, month=4, normal_count=2, colleague=colleague)
        self.assertEqual(services.colleague_credits(colleague, 2025, 3), Decimal('12'))
        self.assertEqual(services.colleague_credits_year(colleague, 2025), Decimal('14'))
        detail = services.colleague_credits_detail(colleague, 2025, 3)
        self.assertEqual(len(detail), 1)
        self.assertEqual(detail[0]['express_credits'], Decimal('9'))

    def test_colleague_credits_by_client_with_rewards(self):
        colleague = TestDataFactory.create_colleague()
        engagement = TestDataFactory.create_engagement(client=self.client_obj)
        TestDataFactory.create_assignment(engagement, colleague=colleague, creative_boost_reward_per_credit=Decimal('100'))
        TestDataFactory.create_client_month(client=self.client_obj, engagement=engagement)
        other = TestDataFactory.create_client(brand_name='Other brand')
        TestDataFactory.create_output(self.client_obj, self.output_type, normal_count=4, colleague=colleague)
        TestDataFactory.create_output(other, self.output_type, normal_count=1, express_count=2, colleague=colleague)

        rows = services.colleague_credits_by_client(colleague, 2025, 3)
        self.assertEqual([r['client_id'] for r in rows], [self.client_obj.pk, other.pk])
        self.assertEqual(rows[0]['reward_per_credit'], Decimal('100'))
        self.assertEqual(rows[0]['total_reward'], Decimal('400.00'))
        self.assertEqual(rows[1]['client_brand'], 'Other brand')
        self.assertEqual(rows[1]['output_count'], 3)
        self.assertEqual(rows[1]['total_credits'], Decimal('4'))
        self.assertEqual(rows[1]['reward_per_credit'], Decimal('80'))
        self.assertEqual(rows[1]['total_reward'], Decimal('320.00'))

    def test_month_summaries(self):
        TestDataFactory.create_client_month(client=self.client_obj)
        TestDataFactory.create_output(self.client_obj, self.output_type, normal_count=5)
        summaries = services.client_month_summaries.uncached(2025, 3)
        self.assertEqual(len(summaries), 1)
        self.assertEqual(summaries[0]['used_credits'], Decimal('5'))
        self.assertEqual(summaries[0]['item_count'], 1)


class MonthSyncTests(TestCase):
    """Test creating month rows for engagements selling Creative Boost"""

    def setUp(self):
        TestDataFactory.clear_cache()
        self.client_obj = TestDataFactory.create_client()
        self.engagement = TestDataFactory.create_engagement(client=self.client_obj, start_date=date(2024, 1, 1))
        self.cb_service = TestDataFactory.create_engagement_service(
            self.engagement,
            service=TestDataFactory.create_creative_boost_service(),
            creative_boost_min_credits=Decimal('20'),
            creative_boost_max_credits=Decimal('40'),
            creative_boost_price_per_credit=Decimal('1400'),
        )

    def test_sync_copies_service_settings(self):
        created = services.ensure_client_months_for_active_engagements(2025, 3)
        self.assertEqual(len(created), 1)
        month = created[0]
        self.assertEqual(month.max_credits, Decimal('40'))
        self.assertEqual(month.price_per_credit, Decimal('1400'))
        self.assertEqual(month.engagement_service, self.cb_service)
        self.assertTrue(hasattr(self.client_obj, 'creative_boost'))

    def test_sync_prefers_previous_month(self):
        colleague = TestDataFactory.create_colleague()
        TestDataFactory.create_client_month(
            client=self.client_obj, year=2025, month=2, max_credits=Decimal('70'),
            price_per_credit=Decimal('1300'), colleague=colleague
        )
        month = services.ensure_client_months_for_active_engagements(2025, 3)[0]
        self.assertEqual(month.max_credits, Decimal('70'))
        self.assertEqual(month.colleague, colleague)

    def test_sync_previous_month_across_year(self):
        TestDataFactory.create_client_month(client=self.client_obj, year=2024, month=12, max_credits=Decimal('65'))
        month = services.ensure_client_months_for_active_engagements(2025, 1)[0]
        self.assertEqual(month.max_credits, Decimal('65'))

    def test_sync_never_overwrites(self):
        existing = TestDataFactory.create_client_month(client=self.client_obj, year=2025, month=3, max_credits=Decimal('10'))
        self.assertEqual(services.ensure_client_months_for_active_engagements(2025, 3), [])
        existing.refresh_from_db()
        self.assertEqual(existing.max_credits, Decimal('10'))

    def test_sync_skips_inactive_engagements(self):
        self.engagement.status = 'paused'
        self.engagement.save()
        self.assertEqual(services.ensure_client_months_for_active_engagements(2025, 3), [])

    def test_sync_command(self):
        out = StringIO()
        call_command('ensure_creative_boost_months', year=2025, month=3, stdout=out)
        self.assertIn('Months created for 2025-03: 1', out.getvalue())


class SeedCommandTests(TestCase):

    def test_seed_is_idempotent(self):
        call_command('seed_output_types', stdout=StringIO())
        count = OutputType.objects.count()
        call_command('seed_output_types', stdout=StringIO())
        self.assertEqual(OutputType.objects.count(), count)
        self.assertEqual(count, len(services.DEFAULT_OUTPUT_TYPES))


class CreativeBoostAPITests(TestCase):
    """Test Creative Boost endpoints"""

    def setUp(self):
        TestDataFactory.clear_cache()
        self.user = TestDataFactory.create_finance_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.client_obj = TestDataFactory.create_client()
        self.output_type = TestDataFactory.create_output_type(base_credits=Decimal('2'))

    def test_add_client_to_month(self):
        payload = {'client': self.client_obj.pk, 'year': 2025, 'month': 3, 'max_credits': '45'}
        response = self.client.post('/api/v1/creative-boost/months/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.client.post('/api/v1/creative-boost/months/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.client.get('/api/v1/creative-boost/months/?year=2025&month=3')
        self.assertEqual(len(response.data), 1)

    def test_available_clients(self):
        TestDataFactory.create_cb_client(client=self.client_obj)
        other = TestDataFactory.create_cb_client()
        TestDataFactory.create_client_month(client=self.client_obj)
        response = self.client.get('/api/v1/creative-boost/months/available-clients/?year=2025&month=3')
        self.assertEqual([row['id'] for row in response.data], [other.pk])

    def test_patch_month_records_history(self):
        month = TestDataFactory.create_client_month(client=self.client_obj)
        response = self.client.patch(f'/api/v1/creative-boost/months/{month.pk}/', {'max_credits': '60'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(AuditLog.objects.filter(action='cb_settings_change', object_id=str(month.pk)).exists())

        response = self.client.get(f'/api/v1/creative-boost/settings-history/?client={self.client_obj.pk}')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['field_name'], 'Max. credits')

    def test_settings_history_invalid_period(self):
        url = f'/api/v1/creative-boost/settings-history/?client={self.client_obj.pk}'
        self.assertEqual(self.client.get(f'{url}&year=abc').status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(self.client.get(f'{url}&year=2025&month=x').status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(
            self.client.get('/api/v1/creative-boost/settings-history/?client=abc').status_code,
            status.HTTP_400_BAD_REQUEST
        )
        self.assertEqual(self.client.get(f'{url}&year=2025&month=3').status_code, status.HTTP_200_OK)

    def test_outputs_upsert_and_list(self):
        payload = {'client': self.client_obj.pk, 'output_type': self.output_type.pk, 'year': 2025, 'month': 3, 'normal_count': 2}
        response = self.client.post('/api/v1/creative-boost/outputs/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data['total_credits']), Decimal('4'))

        response = self.client.get(f'/api/v1/creative-boost/outputs/?client={self.client_obj.pk}&year=2025&month=3')
        self.assertEqual(len(response.data), 1)

        payload['normal_count'] = 0
        response = self.client.post('/api/v1/creative-boost/outputs/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

    def test_outputs_list_requires_client(self):
        response = self.client.get('/api/v1/creative-boost/outputs/?year=2025&month=3')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_summaries_hide_money_without_financial_access(self):
        TestDataFactory.create_client_month(client=self.client_obj)
        response = self.client.get('/api/v1/creative-boost/summaries/?year=2025&month=3')
        self.assertIn('estimated_invoice', response.data[0])

        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.get('/api/v1/creative-boost/summaries/?year=2025&month=3')
        self.assertNotIn('estimated_invoice', response.data[0])
        self.assertNotIn('price_per_credit', response.data[0])
        self.assertIn('used_credits', response.data[0])

    def test_invalid_period(self):
        response = self.client.get('/api/v1/creative-boost/summaries/?year=2025&month=0')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_used_output_type_cannot_be_deleted(self):
        TestDataFactory.create_output(self.client_obj, self.output_type, normal_count=1)
        response = self.client.delete(f'/api/v1/creative-boost/output-types/{self.output_type.pk}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_engagement_service_summary(self):
        engagement = TestDataFactory.create_engagement(client=self.client_obj)
        cb_service = TestDataFactory.create_engagement_service(engagement, service=TestDataFactory.create_creative_boost_service())
        url = f'/api/v1/creative-boost/engagement-services/{cb_service.pk}/summary/?year=2025&month=3'
        self.assertEqual(self.client.get(url).status_code, status.HTTP_404_NOT_FOUND)

        TestDataFactory.create_client_month(client=self.client_obj)
        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['client_id'], self.client_obj.pk)

    def test_colleague_credits_endpoint(self):
        colleague = TestDataFactory.create_colleague()
        TestDataFactory.create_output(self.client_obj, self.output_type, normal_count=3, colleague=colleague)
        response = self.client.get(f'/api/v1/creative-boost/colleagues/{colleague.pk}/credits/?year=2025&month=3')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['month_credits'], Decimal('6'))
        self.assertEqual(response.data['by_client'][0]['total_reward'], Decimal('480.00'))

        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.get(f'/api/v1/creative-boost/colleagues/{colleague.pk}/credits/?year=2025&month=3')
        self.assertNotIn('total_reward', response.data['by_client'][0])
        self.assertEqual(response.data['by_client'][0]['total_credits'], Decimal('6'))

        response = self.client.get(f'/api/v1/creative-boost/colleagues/{colleague.pk}/credits/?year=2025&month=13')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_sync_endpoint(self):
        engagement = TestDataFactory.create_engagement(client=self.client_obj)
        TestDataFactory.create_engagement_service(engagement, service=TestDataFactory.create_creative_boost_service())
        response = self.client.post('/api/v1/creative-boost/sync/', {'year': 2025, 'month': 3}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['created']), 1)
        self.assertTrue(AuditLog.objects.filter(action='cb_month_sync').exists())
