"""
Test suite for Meetings module
Tests: upcoming/today queries, calendar invites, participants, tasks
"""
from datetime import timedelta
from django.core.exceptions import ValidationError
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.meetings import services


class MeetingServiceTests(TestCase):

    def test_upcoming_excludes_cancelled_and_far_meetings(self):
        now = timezone.now()
        soon = TestDataFactory.create_meeting(title='Soon', scheduled_at=now + timedelta(days=2))
        TestDataFactory.create_meeting(title='Cancelled', scheduled_at=now + timedelta(days=1), status='cancelled')
        TestDataFactory.create_meeting(title='Later', scheduled_at=now + timedelta(days=20))
        TestDataFactory.create_meeting(title='Past', scheduled_at=now - timedelta(days=1))
        self.assertEqual(list(services.upcoming_meetings(days=7, now=now)), [soon])

    def test_todays_meetings(self):
        today = timezone.localdate()
        meeting = TestDataFactory.create_meeting(scheduled_at=timezone.now())
        TestDataFactory.create_meeting(scheduled_at=timezone.now() + timedelta(days=3))
        self.assertEqual(list(services.todays_meetings(today=today)), [meeting])

    def test_send_invites_to_colleagues(self):
        meeting = TestDataFactory.create_meeting()
        TestDataFactory.create_participant(meeting, colleague=TestDataFactory.create_colleague(full_name='Jan Novak'))
        TestDataFactory.create_participant(meeting, external_name='Client CEO')
        recipients = services.send_calendar_invites(meeting)
        self.assertEqual(recipients, ['jan.novak@agency.test'])
        meeting.refresh_from_db()
        self.assertIsNotNone(meeting.calendar_invites_sent_at)

    def test_send_invites_needs_colleague(self):
        meeting = TestDataFactory.create_meeting()
        TestDataFactory.create_participant(meeting, external_name='Guest')
        with self.assertRaises(ValidationError):
            services.send_calendar_invites(meeting)

    def test_send_invites_for_cancelled_meeting(self):
        meeting = TestDataFactory.create_meeting(status='cancelled')
        TestDataFactory.create_participant(meeting, colleague=TestDataFactory.create_colleague())
        with self.assertRaises(ValidationError):
            services.send_calendar_invites(meeting)

    def test_task_completed_at_follows_status(self):
        task = TestDataFactory.create_meeting_task(TestDataFactory.create_meeting())
        self.assertIsNone(task.completed_at)
        task.status = 'done'
        task.save()
        self.assertIsNotNone(task.completed_at)
        task.status = 'in_progress'
        task.save()
        self.assertIsNone(task.completed_at)


class MeetingAPITests(TestCase):
    """Test meeting endpoints"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user())

    def test_create_internal_meeting(self):
        payload = {'title': 'Weekly sync', 'scheduled_at': (timezone.now() + timedelta(days=1)).isoformat()}
        response = self.client.post('/api/v1/meetings/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIsNone(response.data['client_name'])
        self.assertEqual(response.data['participants'], [])

    def test_client_meeting_needs_client(self):
        payload = {'title': 'Kickoff', 'type': 'client', 'scheduled_at': timezone.now().isoformat()}
        response = self.client.post('/api/v1/meetings/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('client', response.data)

    def test_engagement_must_belong_to_client(self):
        client_obj = TestDataFactory.create_client()
        engagement = TestDataFactory.create_engagement()
        payload = {
            'title': 'Kickoff', 'type': 'client', 'client': client_obj.pk,
            'engagement': engagement.pk, 'scheduled_at': timezone.now().isoformat(),
        }
        response = self.client.post('/api/v1/meetings/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('engagement', response.data)

    def test_list_filters(self):
        client_obj = TestDataFactory.create_client(name='Acme')
        TestDataFactory.create_meeting(type='client', client=client_obj)
        TestDataFactory.create_meeting()
        response = self.client.get(f'/api/v1/meetings/?client={client_obj.pk}')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['client_name'], 'Acme')
        self.assertEqual(len(self.client.get('/api/v1/meetings/?type=internal').data), 1)

    def test_participants(self):
        meeting = TestDataFactory.create_meeting()
        url = f'/api/v1/meetings/{meeting.pk}/participants/'
        self.assertEqual(self.client.post(url, {'role': 'optional'}, format='json').status_code, status.HTTP_400_BAD_REQUEST)

        colleague = TestDataFactory.create_colleague(full_name='Eva Mala')
        response = self.client.post(url, {'colleague': colleague.pk, 'role': 'organizer'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['display_name'], 'Eva Mala')

        response = self.client.patch(
            f"/api/v1/meeting-participants/{response.data['id']}/", {'attendance_status': 'confirmed'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['attendance_status'], 'confirmed')

    def test_tasks(self):
        meeting = TestDataFactory.create_meeting()
        response = self.client.post(f'/api/v1/meetings/{meeting.pk}/tasks/', {'title': 'Send recap'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        response = self.client.patch(f"/api/v1/meeting-tasks/{response.data['id']}/", {'status': 'done'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNotNone(response.data['completed_at'])

    def test_upcoming_and_today(self):
        TestDataFactory.create_meeting(scheduled_at=timezone.now() + timedelta(days=2))
        self.assertEqual(len(self.client.get('/api/v1/meetings/upcoming/?days=3').data), 1)
        self.assertEqual(self.client.get('/api/v1/meetings/upcoming/?days=x').status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(self.client.get('/api/v1/meetings/today/').status_code, status.HTTP_200_OK)

    def test_send_invites_endpoint(self):
        meeting = TestDataFactory.create_meeting()
        url = f'/api/v1/meetings/{meeting.pk}/send-invites/'
        self.assertEqual(self.client.post(url).status_code, status.HTTP_400_BAD_REQUEST)

        TestDataFactory.create_participant(meeting, colleague=TestDataFactory.create_colleague(full_name='Jan Novak'))
        response = self.client.post(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['recipients'], ['jan.novak@agency.test'])
