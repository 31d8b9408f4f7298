import logging
from datetime import timedelta

from django.core.exceptions import ValidationError
from django.utils import timezone

from .models import Meeting

logger = logging.getLogger(__name__)


def _active_meetings():
    return Meeting.objects.exclude(status='cancelled').select_related('client')


def upcoming_meetings(days=7, now=None):
    """Meetings from now until ``days`` ahead, cancelled ones excluded"""
    now = now or timezone.now()
    return _active_meetings().filter(scheduled_at__gte=now, scheduled_at__lte=now + timedelta(days=days))


def todays_meetings(today=None):
    today = today or timezone.localdate()
    return _active_meetings().filter(scheduled_at__date=today)


def invite_recipients(meeting):
    """Email addresses of colleague participants"""
    return [
        participant.colleague.email
        for participant in meeting.participants.select_related('colleague')
        if participant.colleague_id and participant.colleague.email
    ]


def send_calendar_invites(meeting):
    """
    Mark calendar invites as sent for the colleague participants.

    Delivery itself is done by the calendar integration of the hosted
    workspace; the API records the recipients and the time.
    """
    if meeting.status == 'cancelled':
        raise ValidationError("Cannot send invites for a cancelled meeting")
    recipients = invite_recipients(meeting)
    if not recipients:
        raise ValidationError("No colleague participant with an email address")
    meeting.calendar_invites_sent_at = timezone.now()
    meeting.save(update_fields=['calendar_invites_sent_at', 'updated_at'])
    logger.info(f"Calendar invites for meeting {meeting.pk} sent to {len(recipients)} recipient(s)")
    return recipients
