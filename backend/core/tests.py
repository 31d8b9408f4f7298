"""
Test suite for Core module
Tests: period helpers, audit logging, query cache, users and audit log endpoints
"""
from datetime import date
from io import StringIO
from django.core.cache import cache
from django.core.management import call_command
from django.test import TestCase, RequestFactory
from rest_framework import status
from backend.core.cache_utils import cached_query, invalidate_cache_pattern, make_cache_key
from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.core.utils import create_audit_log, parse_period, period_label, month_bounds, previous_period


class PeriodHelperTests(TestCase):

    def test_parse_period(self):
        self.assertEqual(parse_period({'year': '2025', 'month': '3'}), (2025, 3))
        self.assertEqual(parse_period({}, default=date(2024, 11, 5)), (2024, 11))

    def test_parse_period_rejects_invalid_month(self):
        with self.assertRaises(ValueError):
            parse_period({'year': '2025', 'month': '13'})
        with self.assertRaises(ValueError):
            parse_period({'year': '2025', 'month': 'march'})

    def test_period_helpers(self):
        self.assertEqual(period_label(2025, 2), '2025-02')
        self.assertEqual(month_bounds(2024, 2), (date(2024, 2, 1), date(2024, 2, 29)))
        self.assertEqual(previous_period(2025, 1), (2024, 12))
        self.assertEqual(previous_period(2025, 7), (2025, 6))


class AuditLogTests(TestCase):

    def test_create_audit_log_from_request(self):
        user = TestDataFactory.create_user()
        request = RequestFactory().post('/', HTTP_X_FORWARDED_FOR='10.0.0.1, 10.0.0.2')
        request.user = user
        log = create_audit_log(request=request, action='update', model_name='Client', object_id=5, changes={'a': 1})
        self.assertEqual(log.user, user)
        self.assertEqual(log.object_id, '5')
        self.assertEqual(log.ip_address, '10.0.0.1')

    def test_missing_fields_skip_logging(self):
        self.assertIsNone(create_audit_log(action='update', model_name='Client'))
        self.assertFalse(AuditLog.objects.exists())


class QueryCacheTests(TestCase):

    def setUp(self):
        TestDataFactory.clear_cache()

    def test_cached_query_hits_cache(self):
        calls = []

        @cached_query(cache_ttl=60, key_prefix='test_prefix')
        def expensive(year, month):
            calls.append((year, month))
            return {'year': year, 'month': month}

        self.assertEqual(expensive(2025, 3), {'year': 2025, 'month': 3})
        expensive(2025, 3)
        expensive(2025, 4)
        self.assertEqual(calls, [(2025, 3), (2025, 4)])
        expensive.uncached(2025, 3)
        self.assertEqual(len(calls), 3)

    def test_cache_keys_differ_by_arguments(self):
        self.assertNotEqual(make_cache_key('p', 2025, 3), make_cache_key('p', 2025, 4))
        self.assertTrue(make_cache_key('p', 1).startswith('p:'))

    def test_invalidate_pattern_without_redis_clears_cache(self):
        cache.set('dashboard_kpis:abc', 1)
        invalidate_cache_pattern('dashboard_kpis')
        self.assertIsNone(cache.get('dashboard_kpis:abc'))

    def test_check_cache_command(self):
        out = StringIO()
        call_command('check_cache', '--clear', stdout=out)
        self.assertIn('Cache SET/GET/DELETE work', out.getvalue())
        self.assertIn('Read model caches invalidated', out.getvalue())


class UserAPITests(TestCase):
    """Test user and audit log endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user(username='specialist')
        self.staff = TestDataFactory.create_user(username='boss', role='admin', is_staff=True)
        self.client = AuthenticatedAPIClient()

    def test_me_requires_authentication(self):
        self.assertEqual(self.client.get('/api/v1/auth/me/').status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me(self):
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.data['username'], 'specialist')
        self.assertFalse(response.data['has_financial_access'])

    def test_me_cannot_grant_financial_access(self):
        self.client.authenticate_user(self.user)
        response = self.client.patch('/api/v1/auth/me/', {'phone': '+420123', 'can_see_financials': True, 'role': 'admin'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertEqual(self.user.phone, '+420123')
        self.assertFalse(self.user.can_see_financials)
        self.assertEqual(self.user.role, 'specialist')

    def test_user_list_visibility(self):
        self.client.authenticate_user(self.user)
        self.assertEqual(len(self.client.get('/api/v1/users/').data), 1)
        self.client.authenticate_user(self.staff)
        self.assertEqual(len(self.client.get('/api/v1/users/').data), 2)

    def test_staff_updates_role(self):
        self.client.authenticate_user(self.user)
        url = f'/api/v1/users/{self.user.pk}/'
        self.assertEqual(self.client.patch(url, {'role': 'finance'}, format='json').status_code, status.HTTP_403_FORBIDDEN)

        self.client.authenticate_user(self.staff)
        response = self.client.patch(url, {'role': 'finance'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['has_financial_access'])

    def test_audit_logs_scoped_to_user(self):
        create_audit_log(user=self.user, action='create', model_name='Lead', object_id=1)
        other = create_audit_log(user=self.staff, action='delete', model_name='Lead', object_id=2)

        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/audit-logs/')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(self.client.get(f'/api/v1/audit-logs/{other.pk}/').status_code, status.HTTP_403_FORBIDDEN)

        self.client.authenticate_user(self.staff)
        response = self.client.get('/api/v1/audit-logs/?action=delete')
        self.assertEqual(len(response.data), 1)
