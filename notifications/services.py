"""
Outbound notifications for timesheet events.

notify() renders one message per event, emails it and posts it to Slack. It
never raises: delivery problems come back as a failed NotificationResult and
are logged.
"""
import logging
from dataclasses import dataclass, field
from smtplib import SMTPException

from django.conf import settings
from django.core.mail import send_mail

from timesheets.constants import (
    NOTIFY_APPROVED,
    NOTIFY_MANAGER_APPROVED,
    NOTIFY_REJECTED,
    NOTIFY_TASK_POSTPONED,
    NOTIFY_TIMESHEET_SUBMITTED,
)
from timesheets.exceptions import NotificationError

from .slack_utils import SlackNotificationService

logger = logging.getLogger(__name__)


@dataclass
class NotificationResult:
    success: bool
    error: str = None


@dataclass
class Message:
    subject: str
    body: str
    emails: list = field(default_factory=list)
    slack_recipients: list = field(default_factory=list)
    slack_blocks: list = None
    management_digest: bool = False


def _emails(*employees):
    return [e.email for e in employees if e is not None and e.email]


def _unique(values):
    return list(dict.fromkeys(v for v in values if v))


def _render_timesheet_submitted(payload):
    employee = payload['employee']
    date = payload['date']
    task_count = payload['task_count']
    total_hours = payload['total_hours']
    body = SlackNotificationService.timesheet_submitted_message(employee, date, task_count, total_hours)
    return Message(
        subject=f"Timesheet submitted: {employee.get_full_name()} - {date:%d-%b-%Y}",
        body=body,
        emails=_unique(
            list(settings.TIMESHEET_NOTIFICATION_RECIPIENTS) + _emails(employee.reporting_manager)
        ),
        slack_recipients=[employee],
        slack_blocks=SlackNotificationService.timesheet_digest_blocks(employee, date, task_count, total_hours),
        management_digest=True,
    )


def _entry_renderer(status_msg):
    def render(payload):
        entry = payload['entry']
        reason = payload.get('reason')
        return Message(
            subject=f"Time entry {status_msg.lower()}: {entry.date:%d-%b-%Y} {entry.project_name}",
            body=SlackNotificationService.entry_status_message(entry, status_msg, reason),
            emails=_emails(entry.employee),
            slack_recipients=[entry.employee],
        )
    return render


def _render_task_postponed(payload):
    postponement = payload['postponement']
    recipients = list(payload.get('recipients') or [])
    return Message(
        subject=f"Task {postponement.task_id} postponed to {postponement.new_due_date}",
        body=SlackNotificationService.task_postponed_message(postponement),
        emails=_unique(_emails(*recipients)),
        slack_recipients=recipients,
    )


RENDERERS = {
    NOTIFY_TIMESHEET_SUBMITTED: _render_timesheet_submitted,
    NOTIFY_MANAGER_APPROVED: _entry_renderer("Approved by Manager"),
    NOTIFY_APPROVED: _entry_renderer("Approved"),
    NOTIFY_REJECTED: _entry_renderer("Rejected"),
    NOTIFY_TASK_POSTPONED: _render_task_postponed,
}


def _deliver(message):
    failures = []

    if message.emails:
        try:
            send_mail(
                message.subject,
                message.body,
                settings.DEFAULT_FROM_EMAIL,
                message.emails,
                fail_silently=False,
            )
        except (SMTPException, OSError) as e:
            failures.append(f"email: {e}")

    if SlackNotificationService.is_configured():
        service = SlackNotificationService()
        for employee in message.slack_recipients:
            if not service.send_message(employee, message.body):
                failures.append(f"slack: {employee.employee_id}")
        if message.management_digest and not service.notify_management(message.subject, blocks=message.slack_blocks):
            failures.append("slack: management channel")

    if failures:
        raise NotificationError("; ".join(failures))


def notify(event, payload):
    """Send the notification for `event`. Returns a NotificationResult."""
    renderer = RENDERERS.get(event)
    if renderer is None:
        logger.error(f"Unknown notification event: {event}")
        return NotificationResult(success=False, error=f"Unknown notification event: {event}")

    try:
        _deliver(renderer(payload))
    except NotificationError as e:
        logger.error(f"Notification {event} failed: {e.message}")
        return NotificationResult(success=False, error=e.message)
    except Exception as e:
        logger.exception(f"Notification {event} failed unexpectedly")
        return NotificationResult(success=False, error=str(e))

    logger.info(f"Notification {event} sent")
    return NotificationResult(success=True)
