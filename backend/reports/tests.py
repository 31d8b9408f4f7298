"""
Test suite for Reports module
Tests: dashboard KPIs, birthdays, engagement and client margins, team costs, funnel, colleague earnings
"""
from datetime import date, datetime
from decimal import Decimal
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.clients.models import EngagementService
from backend.reports import earnings, services


class ReportServiceTests(TestCase):
    """Test report calculations"""

    def setUp(self):
        TestDataFactory.clear_cache()

    def test_upcoming_birthdays_wrap_year_end(self):
        TestDataFactory.create_colleague(full_name='Jan Novak', birthday=date(1990, 1, 2))
        TestDataFactory.create_colleague(full_name='Eva Mala', birthday=date(1990, 12, 20))
        birthdays = services.upcoming_birthdays(today=date(2025, 12, 25))
        self.assertEqual([b['full_name'] for b in birthdays], ['Jan Novak'])
        self.assertEqual(birthdays[0]['days_until'], 8)
        self.assertEqual(birthdays[0]['turning'], 36)

    def test_leap_day_birthday_outside_leap_year(self):
        TestDataFactory.create_colleague(full_name='Leap Day', birthday=date(1992, 2, 29))
        birthdays = services.upcoming_birthdays(today=date(2025, 2, 20))
        self.assertEqual(birthdays[0]['birthday'], date(2025, 3, 1))
        self.assertEqual(birthdays[0]['days_until'], 9)

    def test_inactive_colleague_birthday_is_ignored(self):
        TestDataFactory.create_colleague(birthday=date(1990, 1, 2), status='left')
        self.assertEqual(services.upcoming_birthdays(today=date(2025, 12, 25)), [])

    def test_engagement_margin_report_flags_low_margin(self):
        low = TestDataFactory.create_engagement(monthly_fee=Decimal('20000.00'))
        TestDataFactory.create_assignment(low, monthly_cost=Decimal('16000.00'))
        healthy = TestDataFactory.create_engagement(monthly_fee=Decimal('20000.00'))
        TestDataFactory.create_assignment(healthy, monthly_cost=Decimal('5000.00'))

        report = services.engagement_margin_report.uncached()
        rows = {r['engagement_id']: r for r in report['engagements']}
        self.assertTrue(rows[low.pk]['is_low_margin'])
        self.assertEqual(rows[low.pk]['margin_percent'], Decimal('20.00'))
        self.assertFalse(rows[healthy.pk]['is_low_margin'])
        self.assertEqual(report['total_margin'], Decimal('19000.00'))
        self.assertEqual(report['low_margin_count'], 1)

    def test_client_margin_report_rolls_up_engagements(self):
        client = TestDataFactory.create_client(name='Acme')
        first = TestDataFactory.create_engagement(client=client, monthly_fee=Decimal('10000.00'))
        second = TestDataFactory.create_engagement(client=client, monthly_fee=Decimal('30000.00'))
        TestDataFactory.create_assignment(first, monthly_cost=Decimal('4000.00'))
        TestDataFactory.create_assignment(second, monthly_cost=Decimal('6000.00'))

        rows = services.client_margin_report()
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]['revenue'], Decimal('40000.00'))
        self.assertEqual(rows[0]['margin'], Decimal('30000.00'))
        self.assertEqual(rows[0]['margin_percent'], Decimal('75.00'))
        self.assertEqual(rows[0]['engagement_count'], 2)

    def test_team_cost_breakdown_by_cost_model(self):
        colleague = TestDataFactory.create_colleague()
        TestDataFactory.create_assignment(TestDataFactory.create_engagement(), colleague=colleague, monthly_cost=Decimal('5000.00'))
        TestDataFactory.create_assignment(TestDataFactory.create_engagement(), colleague=colleague, monthly_cost=Decimal('7000.00'))
        TestDataFactory.create_assignment(
            TestDataFactory.create_engagement(), monthly_cost=Decimal('2000.00'), cost_model='hourly'
        )
        TestDataFactory.create_assignment(
            TestDataFactory.create_engagement(status='completed'), monthly_cost=Decimal('9000.00')
        )

        breakdown = services.team_cost_breakdown()
        by_model = {row['cost_model']: row for row in breakdown['by_cost_model']}
        self.assertEqual(by_model['fixed_monthly']['assignment_count'], 2)
        self.assertEqual(by_model['fixed_monthly']['monthly_cost'], Decimal('12000.00'))
        self.assertEqual(by_model['hourly']['monthly_cost'], Decimal('2000.00'))
        self.assertEqual(by_model['percentage']['assignment_count'], 0)
        self.assertEqual(breakdown['total_cost'], Decimal('14000.00'))
        self.assertEqual(breakdown['by_colleague'][0]['colleague_id'], colleague.pk)

    def test_strip_financials_is_recursive(self):
        data = {'active_clients': 3, 'monthly_recurring_revenue': 1, 'top_clients': [{'client_id': 1, 'monthly_revenue': 5}]}
        self.assertEqual(services.strip_financials(data), {'active_clients': 3, 'top_clients': [{'client_id': 1}]})


class DashboardAPITests(TestCase):
    """Test dashboard endpoint"""

    def setUp(self):
        TestDataFactory.clear_cache()
        self.client = AuthenticatedAPIClient()
        client_obj = TestDataFactory.create_client(name='Top Client')
        TestDataFactory.create_engagement(client=client_obj, monthly_fee=Decimal('40000.00'))
        TestDataFactory.create_engagement(monthly_fee=Decimal('10000.00'))
        TestDataFactory.create_engagement(monthly_fee=Decimal('99000.00'), status='paused')
        TestDataFactory.create_lead(company_name='Won Co', stage='won')

    def test_dashboard_for_finance_user(self):
        self.client.authenticate_user(TestDataFactory.create_finance_user())
        response = self.client.get('/api/v1/reports/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['active_engagements'], 2)
        self.assertEqual(Decimal(response.data['monthly_recurring_revenue']), Decimal('50000.00'))
        self.assertEqual(response.data['top_clients'][0]['client_name'], 'Top Client')
        self.assertEqual(response.data['recently_won_leads'][0]['company_name'], 'Won Co')
        self.assertIn('creative_boost', response.data)

    def test_dashboard_hides_money_without_financial_access(self):
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.get('/api/v1/reports/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertNotIn('monthly_recurring_revenue', response.data)
        self.assertNotIn('monthly_revenue', response.data['top_clients'][0])
        self.assertNotIn('invoice_estimate', response.data['creative_boost'])
        self.assertIn('used_credits', response.data['creative_boost'])

    def test_dashboard_requires_authentication(self):
        response = self.client.get('/api/v1/reports/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class ReportsAPITests(TestCase):
    """Test report endpoints"""

    def setUp(self):
        TestDataFactory.clear_cache()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_finance_user())
        engagement = TestDataFactory.create_engagement(monthly_fee=Decimal('20000.00'))
        TestDataFactory.create_assignment(engagement, monthly_cost=Decimal('18000.00'))

    def test_engagement_margins(self):
        response = self.client.get('/api/v1/reports/engagement-margins/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['engagements']), 1)

    def test_engagement_margins_low_margin_filter(self):
        healthy = TestDataFactory.create_engagement(monthly_fee=Decimal('20000.00'))
        TestDataFactory.create_assignment(healthy, monthly_cost=Decimal('1000.00'))
        response = self.client.get('/api/v1/reports/engagement-margins/?low_margin=true')
        self.assertEqual(len(response.data['engagements']), 1)
        self.assertTrue(response.data['engagements'][0]['is_low_margin'])

    def test_margin_reports_require_financial_access(self):
        self.client.authenticate_user(TestDataFactory.create_user())
        for url in ('/api/v1/reports/engagement-margins/', '/api/v1/reports/client-margins/', '/api/v1/reports/team-costs/'):
            response = self.client.get(url)
            self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_client_margins_and_team_costs(self):
        self.assertEqual(self.client.get('/api/v1/reports/client-margins/').status_code, status.HTTP_200_OK)
        response = self.client.get('/api/v1/reports/team-costs/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data['total_cost']), Decimal('18000.00'))

    def test_funnel_report(self):
        response = self.client.get('/api/v1/reports/funnel/?months=3')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['monthly_trend']), 3)
        self.assertEqual(len(response.data['conversion_rates']), 6)

    def test_funnel_report_rejects_bad_months(self):
        response = self.client.get('/api/v1/reports/funnel/?months=40')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class ColleagueEarningsTests(TestCase):
    """Test the colleague earnings read model"""

    def setUp(self):
        TestDataFactory.clear_cache()
        self.colleague = TestDataFactory.create_colleague(full_name='Petra Kralova')
        self.retainer = TestDataFactory.create_engagement(name='Retainer', start_date=date(2024, 1, 1))
        TestDataFactory.create_assignment(self.retainer, colleague=self.colleague, monthly_cost=Decimal('20000.00'))
        self.campaign = TestDataFactory.create_engagement(name='Campaign', start_date=date(2024, 1, 1))
        TestDataFactory.create_assignment(
            self.campaign, colleague=self.colleague, monthly_cost=Decimal('10000.00'), start_date=date(2025, 3, 16)
        )
        client = self.retainer.client

        output_type = TestDataFactory.create_output_type(base_credits=Decimal('1'))
        TestDataFactory.create_output(client, output_type, normal_count=3, colleague=self.colleague)

        approved = timezone.make_aware(datetime(2025, 3, 20, 9, 0))
        TestDataFactory.create_extra_work(
            client, engagement=self.retainer, amount=Decimal('10000.00'),
            upsold_by=self.colleague, upsell_commission_percent=Decimal('10'), commission_approved_at=approved,
        )
        TestDataFactory.create_extra_work(
            client, engagement=self.retainer, amount=Decimal('5000.00'),
            upsold_by=self.colleague, upsell_commission_percent=Decimal('10'),
        )
        upsold_service = TestDataFactory.create_engagement_service(
            self.retainer, price=Decimal('4000.00'), upsold_by=self.colleague,
            upsell_commission_percent=Decimal('5'), commission_approved_at=approved,
        )
        EngagementService.objects.filter(pk=upsold_service.pk).update(
            created_at=timezone.make_aware(datetime(2025, 3, 5, 12, 0))
        )

        TestDataFactory.create_activity_reward(self.colleague, amount=Decimal('1500.00'))
        TestDataFactory.create_activity_reward(
            self.colleague, billing_type='hourly', hours=Decimal('2'), hourly_rate=Decimal('600'),
            activity_date=date(2025, 3, 20), description='Training',
        )

    def test_month_earnings_by_part(self):
        result = earnings.colleague_earnings(self.colleague, 2025, 3)
        self.assertEqual(result['fixed_earnings'], Decimal('25161.00'))
        self.assertEqual(result['creative_boost_credits'], Decimal('3'))
        self.assertEqual(result['creative_boost_reward'], Decimal('240.00'))
        self.assertEqual(result['commissions_reward'], Decimal('1200.00'))
        self.assertEqual(result['activities_reward'], Decimal('2700.00'))
        self.assertEqual(result['activities_count'], 2)
        self.assertEqual(result['total_earnings'], Decimal('29301.00'))

    def test_mid_month_assignment_is_prorated(self):
        fixed = {row['engagement_name']: row for row in earnings.fixed_earnings(self.colleague, 2025, 3)}
        self.assertFalse(fixed['Retainer']['is_prorated'])
        self.assertTrue(fixed['Campaign']['is_prorated'])
        self.assertEqual(fixed['Campaign']['days_worked'], 16)
        self.assertEqual(fixed['Campaign']['amount'], Decimal('5161.00'))

    def test_only_approved_commissions_count(self):
        upsells = earnings.upsells_for_month(2025, 3)
        self.assertEqual(len(upsells), 3)
        approved = earnings.upsells_for_month(2025, 3, colleague=self.colleague, approved_only=True)
        self.assertEqual(sorted(u['commission_amount'] for u in approved), [Decimal('200.00'), Decimal('1000.00')])

    def test_history_goes_back_from_current_month(self):
        history = earnings.colleague_earnings_history(self.colleague, months=3, today=date(2025, 4, 10))
        self.assertEqual([h['period'] for h in history], ['2025-04', '2025-03', '2025-02'])
        self.assertEqual(history[0]['total_earnings'], Decimal('30000.00'))
        self.assertEqual(history[1]['total_earnings'], Decimal('29301.00'))
        self.assertEqual(history[2]['fixed_earnings'], Decimal('20000.00'))

    def test_team_earnings_lists_active_colleagues(self):
        TestDataFactory.create_colleague(full_name='Adam Idle')
        TestDataFactory.create_colleague(full_name='Former', status='left')
        result = earnings.team_earnings(2025, 3)
        self.assertEqual([c['full_name'] for c in result['colleagues']], ['Petra Kralova', 'Adam Idle'])
        self.assertEqual(result['colleagues'][0]['engagement_count'], 2)
        self.assertEqual(result['colleagues'][1]['total_earnings'], Decimal('0.00'))
        self.assertEqual(result['total_earnings'], Decimal('29301.00'))


class EarningsAPITests(TestCase):
    """Test earnings endpoints"""

    def setUp(self):
        TestDataFactory.clear_cache()
        self.client = AuthenticatedAPIClient()
        self.finance = TestDataFactory.create_finance_user()
        self.client.authenticate_user(self.finance)
        self.colleague = TestDataFactory.create_colleague()
        engagement = TestDataFactory.create_engagement(start_date=date(2024, 1, 1))
        TestDataFactory.create_assignment(engagement, colleague=self.colleague, monthly_cost=Decimal('12000.00'))

    def test_team_earnings(self):
        response = self.client.get('/api/v1/reports/team-earnings/?year=2025&month=3')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data['total_earnings']), Decimal('12000.00'))
        self.assertEqual(response.data['colleagues'][0]['colleague_id'], self.colleague.pk)
        self.assertEqual(
            self.client.get('/api/v1/reports/team-earnings/?year=2025&month=13').status_code,
            status.HTTP_400_BAD_REQUEST
        )

    def test_team_earnings_require_financial_access(self):
        self.client.authenticate_user(TestDataFactory.create_user())
        for url in ('/api/v1/reports/team-earnings/', '/api/v1/reports/upsell-commissions/'):
            self.assertEqual(self.client.get(url).status_code, status.HTTP_403_FORBIDDEN)

    def test_colleague_sees_own_earnings(self):
        user = TestDataFactory.create_user()
        self.colleague.user = user
        self.colleague.save()
        url = f'/api/v1/reports/colleagues/{self.colleague.pk}/earnings/?year=2025&month=3'

        self.client.authenticate_user(user)
        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data['fixed_earnings']), Decimal('12000.00'))

        self.client.authenticate_user(TestDataFactory.create_user())
        self.assertEqual(self.client.get(url).status_code, status.HTTP_403_FORBIDDEN)

    def test_earnings_history(self):
        url = f'/api/v1/reports/colleagues/{self.colleague.pk}/earnings-history/'
        response = self.client.get(f'{url}?months=2')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['months']), 2)
        self.assertNotIn('fixed', response.data['months'][0])
        self.assertEqual(self.client.get(f'{url}?months=abc').status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(self.client.get(f'{url}?months=30').status_code, status.HTTP_400_BAD_REQUEST)

    def test_upsell_commissions(self):
        TestDataFactory.create_extra_work(
            TestDataFactory.create_client(), amount=Decimal('8000.00'),
            upsold_by=self.colleague, upsell_commission_percent=Decimal('10'),
        )
        response = self.client.get(f'/api/v1/reports/upsell-commissions/?year=2025&month=3&colleague={self.colleague.pk}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertFalse(response.data[0]['is_approved'])
        self.assertEqual(Decimal(response.data[0]['commission_amount']), Decimal('800.00'))

        response = self.client.get('/api/v1/reports/upsell-commissions/?year=2025&month=3&approved=true')
        self.assertEqual(response.data, [])
