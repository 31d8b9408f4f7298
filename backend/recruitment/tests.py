"""
Test suite for Recruitment module
Tests: stage changes, hiring, kanban board
"""
from decimal import Decimal
from django.core.exceptions import ValidationError
from django.test import TestCase
from rest_framework import status
from backend.clients.models import Colleague
from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.recruitment import services


class RecruitmentServiceTests(TestCase):

    def test_hire_creates_freelancer_colleague(self):
        applicant = TestDataFactory.create_applicant(
            full_name='Petra Kralova', ico='12345678', hourly_rate=Decimal('650.00')
        )
        colleague = services.hire_applicant(applicant, seniority='senior')

        self.assertEqual(colleague.full_name, 'Petra Kralova')
        self.assertEqual(colleague.position, 'Designer')
        self.assertTrue(colleague.is_freelancer)
        self.assertEqual(colleague.internal_hourly_cost, Decimal('650.00'))
        applicant.refresh_from_db()
        self.assertEqual(applicant.stage, 'hired')
        self.assertEqual(applicant.converted_to_colleague, colleague)
        self.assertIsNotNone(applicant.onboarding_sent_at)

    def test_hire_employee_without_rate(self):
        colleague = services.hire_applicant(TestDataFactory.create_applicant(), position='Art director')
        self.assertFalse(colleague.is_freelancer)
        self.assertEqual(colleague.position, 'Art director')
        self.assertEqual(colleague.internal_hourly_cost, Decimal('0.00'))

    def test_hire_twice_is_rejected(self):
        applicant = TestDataFactory.create_applicant()
        services.hire_applicant(applicant)
        with self.assertRaises(ValidationError):
            services.hire_applicant(applicant)
        self.assertEqual(Colleague.objects.count(), 1)

    def test_hired_applicant_stays_hired(self):
        applicant = TestDataFactory.create_applicant()
        services.hire_applicant(applicant)
        with self.assertRaises(ValidationError):
            services.change_stage(applicant, 'rejected')

    def test_kanban_board_keeps_pipeline_order(self):
        TestDataFactory.create_applicant(stage='interview_done')
        TestDataFactory.create_applicant(stage='interview_done')
        TestDataFactory.create_applicant()
        board = services.kanban_board()
        self.assertEqual([stage for stage, _, _ in board][:3], ['new_applicant', 'invited_interview', 'interview_done'])
        self.assertEqual(len(board[2][2]), 2)
        self.assertEqual(board[1][2], [])


class RecruitmentAPITests(TestCase):
    """Test applicant endpoints"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user())

    def test_create_and_filter(self):
        payload = {'full_name': 'Tomas Maly', 'email': 'tomas@example.com', 'position': 'PPC specialist'}
        response = self.client.post('/api/v1/applicants/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['stage'], 'new_applicant')

        TestDataFactory.create_applicant(position='Designer')
        response = self.client.get('/api/v1/applicants/?position=ppc')
        self.assertEqual(len(response.data), 1)

    def test_invalid_email(self):
        payload = {'full_name': 'X', 'email': 'not-an-email', 'position': 'Designer'}
        response = self.client.post('/api/v1/applicants/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_stage_endpoint(self):
        applicant = TestDataFactory.create_applicant()
        response = self.client.post(f'/api/v1/applicants/{applicant.pk}/stage/', {'stage': 'invited_interview'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['stage_label'], 'Invited to interview')

    def test_hire_endpoint(self):
        applicant = TestDataFactory.create_applicant()
        response = self.client.post(f'/api/v1/applicants/{applicant.pk}/hire/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['applicant']['converted_to_colleague'], response.data['colleague_id'])
        self.assertTrue(AuditLog.objects.filter(action='applicant_hire').exists())

        response = self.client.post(f'/api/v1/applicants/{applicant.pk}/hire/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_board_endpoint(self):
        TestDataFactory.create_applicant(stage='offer_sent')
        response = self.client.get('/api/v1/applicants/board/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 7)
        columns = {column['stage']: column for column in response.data}
        self.assertEqual(columns['offer_sent']['count'], 1)

    def test_notes(self):
        applicant = TestDataFactory.create_applicant()
        response = self.client.post(f'/api/v1/applicants/{applicant.pk}/notes/', {'text': 'Strong portfolio'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(len(self.client.get(f'/api/v1/applicants/{applicant.pk}/notes/').data), 1)
