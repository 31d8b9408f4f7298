"""
Test suite for Invoicing module
Tests: proration, invoice drafts, invoice numbering, issuing
"""
from datetime import date
from decimal import Decimal
from unittest import mock
from django.core.exceptions import ValidationError
from django.test import TestCase
from rest_framework import status
from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.invoicing.models import IssuedInvoice
from backend.invoicing.proration import prorate_monthly_amount, calculate_prorated_reward
from backend.invoicing import services


class ProrationTests(TestCase):
    """Test monthly proration rules"""

    def test_whole_month_is_not_prorated(self):
        result = prorate_monthly_amount(Decimal('10000'), date(2024, 1, 1), None, 2025, 3)
        self.assertFalse(result['is_prorated'])
        self.assertEqual(result['amount'], Decimal('10000'))
        self.assertEqual(result['active_days'], 31)

    def test_start_in_first_days_bills_full_month(self):
        result = prorate_monthly_amount(Decimal('10000'), date(2025, 3, 5), None, 2025, 3)
        self.assertFalse(result['is_prorated'])
        self.assertEqual(result['amount'], Decimal('10000'))

    def test_mid_month_start_is_prorated_per_day(self):
        result = prorate_monthly_amount(Decimal('10000'), date(2025, 3, 16), None, 2025, 3)
        self.assertTrue(result['is_prorated'])
        self.assertEqual(result['active_days'], 16)
        self.assertEqual(result['total_days'], 31)
        self.assertEqual(result['amount'], Decimal('5161'))
        self.assertEqual(result['period_start'], date(2025, 3, 16))

    def test_early_start_with_early_end_is_prorated(self):
        result = prorate_monthly_amount(Decimal('10000'), date(2025, 3, 2), date(2025, 3, 10), 2025, 3)
        self.assertTrue(result['is_prorated'])
        self.assertEqual(result['active_days'], 9)
        self.assertEqual(result['amount'], Decimal('2903'))

    def test_engagement_outside_month_bills_nothing(self):
        result = prorate_monthly_amount(Decimal('10000'), date(2025, 4, 1), None, 2025, 3)
        self.assertEqual(result['amount'], Decimal('0'))
        self.assertEqual(result['active_days'], 0)

    def test_reward_without_start_date_is_full(self):
        result = calculate_prorated_reward(Decimal('30000'), None, 2025, 3)
        self.assertFalse(result['is_prorated'])
        self.assertEqual(result['prorated_amount'], Decimal('30000'))

    def test_reward_started_before_month_or_on_first_is_full(self):
        self.assertFalse(calculate_prorated_reward(Decimal('30000'), date(2025, 2, 15), 2025, 3)['is_prorated'])
        self.assertFalse(calculate_prorated_reward(Decimal('30000'), date(2025, 3, 1), 2025, 3)['is_prorated'])

    def test_reward_mid_month_start(self):
        result = calculate_prorated_reward(Decimal('30000'), date(2025, 3, 16), 2025, 3)
        self.assertTrue(result['is_prorated'])
        self.assertEqual(result['days_worked'], 16)
        self.assertEqual(result['prorated_amount'], Decimal('15484'))
        self.assertEqual(result['percent_of_month'], 52)

    def test_reward_started_after_month_is_zero(self):
        result = calculate_prorated_reward(Decimal('30000'), '2025-04-02', 2025, 3)
        self.assertTrue(result['is_prorated'])
        self.assertEqual(result['prorated_amount'], Decimal('0'))
        self.assertEqual(result['days_worked'], 0)


class InvoiceDraftTests(TestCase):
    """Test invoice draft generation"""

    def setUp(self):
        self.client_obj = TestDataFactory.create_client(name='Acme')
        self.engagement = TestDataFactory.create_engagement(client=self.client_obj, start_date=date(2024, 1, 1))
        TestDataFactory.create_engagement_service(self.engagement, price=Decimal('10000.00'), name='PPC')
        self.cb_service = TestDataFactory.create_engagement_service(
            self.engagement, service=TestDataFactory.create_creative_boost_service(), price=Decimal('0')
        )
        TestDataFactory.create_client_month(
            client=self.client_obj, year=2025, month=3,
            max_credits=Decimal('50'), price_per_credit=Decimal('1500'),
            engagement=self.engagement, engagement_service=self.cb_service
        )
        self.extra_work = TestDataFactory.create_extra_work(
            self.client_obj, engagement=self.engagement, amount=Decimal('3000.00'),
            billing_period='2025-03', status='ready_to_invoice'
        )
        self.one_off = TestDataFactory.create_engagement_service(
            self.engagement, price=Decimal('5000.00'), billing_type='one_off', name='Audit'
        )

    def _draft(self, engagement):
        drafts = services.build_engagement_invoices(2025, 3)
        return next((d for d in drafts if d['engagement_id'] == engagement.pk), None)

    def test_draft_contains_all_line_sources(self):
        draft = self._draft(self.engagement)
        self.assertIsNotNone(draft)
        sources = [line['source'] for line in draft['line_items']]
        self.assertEqual(sources, ['engagement', 'creative_boost', 'extra_work', 'one_off'])
        self.assertEqual(draft['subtotal'], Decimal('93000'))
        self.assertEqual(draft['total_amount'], Decimal('93000'))

    def test_creative_boost_line_uses_package_or_override(self):
        cb_line = [l for l in self._draft(self.engagement)['line_items'] if l['source'] == 'creative_boost'][0]
        self.assertEqual(cb_line['unit_price'], Decimal('75000'))
        self.assertIn('50 credits', cb_line['description'])

        month = self.client_obj.creative_boost_months.get()
        month.invoice_amount = Decimal('60000')
        month.save()
        cb_line = [l for l in self._draft(self.engagement)['line_items'] if l['source'] == 'creative_boost'][0]
        self.assertEqual(cb_line['unit_price'], Decimal('60000'))

    def test_creative_boost_line_only_on_first_engagement_of_client(self):
        second = TestDataFactory.create_engagement(client=self.client_obj, start_date=date(2024, 6, 1))
        TestDataFactory.create_engagement_service(second, price=Decimal('2000.00'))
        draft = self._draft(second)
        self.assertEqual([l['source'] for l in draft['line_items']], ['engagement'])

    def test_zero_package_adds_no_creative_boost_line(self):
        month = self.client_obj.creative_boost_months.get()
        month.max_credits = Decimal('0')
        month.save()
        sources = [l['source'] for l in self._draft(self.engagement)['line_items']]
        self.assertNotIn('creative_boost', sources)

    def test_engagement_without_lines_is_skipped(self):
        empty = TestDataFactory.create_engagement(start_date=date(2024, 1, 1))
        self.assertIsNone(self._draft(empty))

    def test_only_active_retainers_in_period(self):
        one_off = TestDataFactory.create_engagement(type='one_off')
        TestDataFactory.create_engagement_service(one_off)
        planned = TestDataFactory.create_engagement(status='planned')
        TestDataFactory.create_engagement_service(planned)
        later = TestDataFactory.create_engagement(start_date=date(2025, 4, 1))
        TestDataFactory.create_engagement_service(later)
        for engagement in (one_off, planned, later):
            self.assertIsNone(self._draft(engagement))

    def test_mid_month_start_is_prorated_in_draft(self):
        engagement = TestDataFactory.create_engagement(start_date=date(2025, 3, 16))
        TestDataFactory.create_engagement_service(engagement, price=Decimal('10000.00'))
        line = self._draft(engagement)['line_items'][0]
        self.assertEqual(line['unit_price'], Decimal('5161'))
        self.assertEqual(line['prorated_days'], 16)
        self.assertEqual(line['total_days_in_month'], 31)

    def test_adjustments_are_added_to_total(self):
        lines = self._draft(self.engagement)['line_items']
        lines[0]['adjustment_amount'] = Decimal('-1000')
        subtotal, adjustments, total = services.calculate_totals(lines)
        self.assertEqual(subtotal, Decimal('93000'))
        self.assertEqual(adjustments, Decimal('-1000'))
        self.assertEqual(total, Decimal('92000'))


class InvoiceIssueTests(TestCase):
    """Test invoice numbering and issuing"""

    def setUp(self):
        self.user = TestDataFactory.create_finance_user()
        self.client_obj = TestDataFactory.create_client()
        self.engagement = TestDataFactory.create_engagement(client=self.client_obj, start_date=date(2024, 1, 1))
        TestDataFactory.create_engagement_service(self.engagement, price=Decimal('10000.00'))
        self.extra_work = TestDataFactory.create_extra_work(
            self.client_obj, engagement=self.engagement, billing_period='2025-03', status='ready_to_invoice'
        )
        self.one_off = TestDataFactory.create_engagement_service(
            self.engagement, price=Decimal('5000.00'), billing_type='one_off'
        )

    def test_first_invoice_number_of_year(self):
        self.assertEqual(services.next_invoice_number(2025), 'FV-2025-001')

    def test_invoice_number_follows_highest(self):
        IssuedInvoice.objects.create(invoice_number='FV-2025-009', client=self.client_obj, year=2025, month=1)
        IssuedInvoice.objects.create(invoice_number='FV-2024-120', client=self.client_obj, year=2024, month=12)
        self.assertEqual(services.next_invoice_number(2025), 'FV-2025-010')

    def test_issue_marks_sources_invoiced(self):
        invoice = services.issue_invoice(self.engagement, 2025, 3, user=self.user)
        self.assertEqual(invoice.invoice_number, 'FV-2025-001')
        self.assertEqual(invoice.total_amount, Decimal('18000.00'))
        self.assertEqual(len(invoice.line_items), 3)

        self.extra_work.refresh_from_db()
        self.assertEqual(self.extra_work.status, 'invoiced')
        self.assertEqual(self.extra_work.invoice, invoice)
        self.assertEqual(self.extra_work.invoice_number, 'FV-2025-001')
        self.assertIsNotNone(self.extra_work.invoiced_at)

        self.one_off.refresh_from_db()
        self.assertEqual(self.one_off.invoicing_status, 'invoiced')
        self.assertEqual(self.one_off.invoiced_in_period, '2025-03')

    def test_issued_sources_leave_next_draft(self):
        services.issue_invoice(self.engagement, 2025, 3, user=self.user)
        draft = services.build_engagement_invoices(2025, 4)[0]
        self.assertEqual([l['source'] for l in draft['line_items']], ['engagement'])

    def test_issue_twice_is_rejected(self):
        services.issue_invoice(self.engagement, 2025, 3, user=self.user)
        with self.assertRaises(ValidationError):
            services.issue_invoice(self.engagement, 2025, 3, user=self.user)

    def test_issue_with_nothing_to_invoice_is_rejected(self):
        empty = TestDataFactory.create_engagement()
        with self.assertRaises(ValidationError):
            services.issue_invoice(empty, 2025, 3, user=self.user)

    def test_lines_of_other_engagement_are_rejected(self):
        other = TestDataFactory.create_engagement(client=self.client_obj, name='Other')
        foreign_work = TestDataFactory.create_extra_work(self.client_obj, engagement=other, billing_period='2025-03')
        line = {
            'source': 'extra_work', 'extra_work_id': foreign_work.pk, 'description': 'Banners',
            'unit_price': Decimal('3000.00'), 'quantity': 1,
        }
        with self.assertRaises(ValidationError):
            services.issue_invoice(self.engagement, 2025, 3, user=self.user, line_items=[line])

        foreign_work.refresh_from_db()
        self.assertEqual(foreign_work.status, 'pending_approval')
        self.assertIsNone(foreign_work.invoice_id)
        self.assertFalse(IssuedInvoice.objects.exists())

    def test_one_off_already_invoiced_is_rejected(self):
        self.one_off.invoicing_status = 'invoiced'
        self.one_off.save()
        line = {
            'source': 'one_off', 'engagement_service_id': self.one_off.pk, 'description': 'Setup',
            'unit_price': Decimal('5000.00'), 'quantity': 1,
        }
        with self.assertRaises(ValidationError):
            services.issue_invoice(self.engagement, 2025, 3, user=self.user, line_items=[line])

    def test_number_clash_is_retried(self):
        IssuedInvoice.objects.create(invoice_number='FV-2025-001', client=self.client_obj, year=2025, month=1)
        with mock.patch.object(services, 'next_invoice_number', side_effect=['FV-2025-001', 'FV-2025-002']):
            invoice = services.issue_invoice(self.engagement, 2025, 3, user=self.user)
        self.assertEqual(invoice.invoice_number, 'FV-2025-002')
        self.extra_work.refresh_from_db()
        self.assertEqual(self.extra_work.invoice, invoice)


class InvoicingAPITests(TestCase):
    """Test invoicing endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_finance_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.engagement = TestDataFactory.create_engagement(start_date=date(2024, 1, 1))
        TestDataFactory.create_engagement_service(self.engagement, price=Decimal('10000.00'))

    def test_drafts(self):
        response = self.client.get('/api/v1/invoicing/drafts/?year=2025&month=3')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['drafts'][0]['engagement_id'], self.engagement.pk)

    def test_drafts_invalid_month(self):
        response = self.client.get('/api/v1/invoicing/drafts/?year=2025&month=13')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_drafts_require_financial_access(self):
        specialist = TestDataFactory.create_user()
        self.client.authenticate_user(specialist)
        response = self.client.get('/api/v1/invoicing/drafts/?year=2025&month=3')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_issue_and_list(self):
        response = self.client.post('/api/v1/invoicing/issue/', {
            'engagement': self.engagement.pk, 'year': 2025, 'month': 3
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['invoice_number'], 'FV-2025-001')
        self.assertTrue(AuditLog.objects.filter(action='invoice_issue', object_reference='FV-2025-001').exists())

        duplicate = self.client.post('/api/v1/invoicing/issue/', {
            'engagement': self.engagement.pk, 'year': 2025, 'month': 3
        }, format='json')
        self.assertEqual(duplicate.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.get('/api/v1/invoicing/invoices/?year=2025')
        self.assertEqual(len(response.data), 1)
        response = self.client.get('/api/v1/invoicing/invoices/?year=2024')
        self.assertEqual(len(response.data), 0)

    def test_issue_with_edited_lines(self):
        response = self.client.post('/api/v1/invoicing/issue/', {
            'engagement': self.engagement.pk,
            'year': 2025,
            'month': 3,
            'line_items': [{
                'source': 'engagement',
                'engagement_id': self.engagement.pk,
                'description': 'PPC management',
                'unit_price': '10000.00',
                'quantity': '1',
                'adjustment_amount': '-500.00',
                'adjustment_reason': 'Discount',
            }],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Decimal(response.data['total_amount']), Decimal('9500.00'))
        self.assertEqual(Decimal(response.data['total_adjustments']), Decimal('-500.00'))

    def test_issue_rejects_extra_work_of_other_engagement(self):
        other = TestDataFactory.create_engagement(name='Other')
        foreign_work = TestDataFactory.create_extra_work(other.client, engagement=other, billing_period='2025-03')
        response = self.client.post('/api/v1/invoicing/issue/', {
            'engagement': self.engagement.pk,
            'year': 2025,
            'month': 3,
            'line_items': [{
                'source': 'extra_work',
                'extra_work_id': foreign_work.pk,
                'description': 'Banners',
                'unit_price': '3000.00',
            }],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        foreign_work.refresh_from_db()
        self.assertEqual(foreign_work.status, 'pending_approval')
        self.assertIsNone(foreign_work.invoice_id)

    def test_invoice_detail(self):
        invoice = services.issue_invoice(self.engagement, 2025, 3, user=self.user)
        response = self.client.get(f'/api/v1/invoicing/invoices/{invoice.pk}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['period'], '2025-03')
