"""
Daily timesheet submission.

One attempt moves through idle -> checking -> blocked | submitting ->
submitted | failed. Drafts are persisted one by one; an entry that fails does
not roll back the ones already saved, so a failed result reports both lists.
"""
import logging
from dataclasses import dataclass, field

from django.conf import settings
from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import Sum

from notifications.events import publish
from notifications.services import notify
from timesheets.constants import (
    DESCRIPTION_SEPARATOR,
    EVENT_TIME_ENTRY_CREATED,
    EVENT_TIMESHEET_SUBMITTED,
    NOTIFY_TIMESHEET_SUBMITTED,
    STATUS_PENDING,
    STATUS_REJECTED,
    SUBMIT_FAILED_MESSAGE,
)
from timesheets.exceptions import ValidationError
from timesheets.models import TimeEntry
from timesheets.serializers import entry_event_payload

from .deadlines import to_calendar_day, today
from .durations import format_duration, minutes_between
from .gate import PendingResolutionGate

logger = logging.getLogger(__name__)

STATE_IDLE = 'idle'
STATE_CHECKING = 'checking'
STATE_BLOCKED = 'blocked'
STATE_SUBMITTING = 'submitting'
STATE_SUBMITTED = 'submitted'
STATE_FAILED = 'failed'


@dataclass
class Draft:
    project: str
    title: str
    sub_task: str = ''
    description: str = ''
    pms_task_id: str = ''
    problem_and_issues: str = ''
    quantify: str = ''
    achievements: str = ''
    scope_of_improvements: str = ''
    tools_used: list = field(default_factory=list)
    start_time: str = ''
    end_time: str = ''
    duration_minutes: int = None
    percentage_complete: int = None

    def __post_init__(self):
        if self.duration_minutes is None:
            if self.start_time and self.end_time:
                self.duration_minutes = minutes_between(self.start_time, self.end_time)
            else:
                self.duration_minutes = 0

    @property
    def task_description(self):
        """title | sub task, then | description when there is one"""
        text = f"{self.title}{DESCRIPTION_SEPARATOR}{self.sub_task or ''}"
        if self.description:
            text += f"{DESCRIPTION_SEPARATOR}{self.description}"
        return text

    def to_dict(self):
        return {
            'project': self.project,
            'taskDescription': self.task_description,
            'startTime': self.start_time,
            'endTime': self.end_time,
            'durationMinutes': self.duration_minutes,
        }


@dataclass
class FailedDraft:
    draft: Draft
    error: str

    def to_dict(self):
        return {'draft': self.draft.to_dict(), 'error': self.error}


@dataclass
class SubmissionResult:
    state: str
    work_date: object = None
    total_minutes: int = 0
    required_minutes: int = 0
    pending: list = field(default_factory=list)
    submitted: list = field(default_factory=list)
    failed: list = field(default_factory=list)
    skipped: list = field(default_factory=list)
    notification: object = None

    @property
    def total_hours(self):
        return format_duration(self.total_minutes)

    def to_dict(self, entry_serializer=None):
        return {
            'state': self.state,
            'date': self.work_date.isoformat() if self.work_date else None,
            'totalMinutes': self.total_minutes,
            'requiredMinutes': self.required_minutes,
            'totalHours': self.total_hours,
            'pending': [item.to_dict() for item in self.pending],
            'submitted': [entry_serializer(e) if entry_serializer else e.pk for e in self.submitted],
            'failed': [item.to_dict() for item in self.failed],
            'skipped': [item.to_dict() for item in self.skipped],
        }


class TimesheetSubmissionPipeline:

    def __init__(self, gate=None, notifier=notify, publisher=publish):
        self.gate = gate or PendingResolutionGate()
        self.notifier = notifier
        self.publisher = publisher

    @staticmethod
    def can_submit(drafts, total_minutes, shift_minutes):
        return len(drafts) > 0 and total_minutes >= shift_minutes

    @staticmethod
    def logged_minutes(employee, work_date):
        """Minutes already stored for the day, rejected entries excluded."""
        total = (
            TimeEntry.objects.filter(employee=employee, date=work_date)
            .exclude(status=STATUS_REJECTED)
            .aggregate(total=Sum('duration_minutes'))['total']
        )
        return total or 0

    def submit(self, employee, drafts, work_date=None, shift_hours=None, policy=None):
        """
        Gate and persist one day's drafts for `employee`.

        Raises ValidationError when the day cannot be submitted yet (no drafts
        or not enough logged time). Returns a SubmissionResult otherwise.
        """
        state = STATE_IDLE
        if shift_hours is None:
            shift_hours = employee.shift_hours
        if shift_hours not in settings.TIMESHEET_SHIFT_HOURS_CHOICES:
            raise ValidationError(
                "shiftHours must be one of " + ", ".join(str(h) for h in settings.TIMESHEET_SHIFT_HOURS_CHOICES)
            )

        work_day = to_calendar_day(work_date) or today()
        drafts = [d if isinstance(d, Draft) else Draft(**d) for d in drafts]
        shift_minutes = shift_hours * 60
        total_minutes = sum(d.duration_minutes for d in drafts) + self.logged_minutes(employee, work_day)

        result = SubmissionResult(
            state=state, work_date=work_day, total_minutes=total_minutes, required_minutes=shift_minutes,
        )

        if not self.can_submit(drafts, total_minutes, shift_minutes):
            raise ValidationError(
                f"Log at least {format_duration(shift_minutes)} with one or more tasks before submitting",
                details={
                    'taskCount': len(drafts),
                    'totalMinutes': total_minutes,
                    'requiredMinutes': shift_minutes,
                },
            )

        result.state = STATE_CHECKING
        gate_result = self.gate.compute_pending(employee, today(), policy=policy)
        result.skipped = gate_result.skipped
        if gate_result.blocked:
            result.state = STATE_BLOCKED
            result.pending = gate_result.pending
            logger.info(f"Submission for {employee.employee_id} blocked by {len(gate_result.pending)} task(s)")
            return result

        result.state = STATE_SUBMITTING
        for draft in drafts:
            try:
                with transaction.atomic():
                    entry = self._persist(employee, work_day, draft)
            except (IntegrityError, DatabaseError) as e:
                logger.error(f"Failed to save time entry for {employee.employee_id} on {work_day}: {e}")
                result.failed.append(FailedDraft(draft=draft, error=str(e)))
                continue
            result.submitted.append(entry)
            self.publisher(EVENT_TIME_ENTRY_CREATED, entry_event_payload(entry))

        if result.failed:
            result.state = STATE_FAILED
            logger.warning(
                f"{SUBMIT_FAILED_MESSAGE} employee={employee.employee_id} "
                f"saved={len(result.submitted)} failed={len(result.failed)}"
            )
            return result

        result.state = STATE_SUBMITTED
        result.notification = self.notifier(NOTIFY_TIMESHEET_SUBMITTED, {
            'employee': employee,
            'date': work_day,
            'task_count': len(result.submitted),
            'total_hours': result.total_hours,
        })
        self.publisher(EVENT_TIMESHEET_SUBMITTED, {
            'employeeId': employee.pk,
            'employeeCode': employee.employee_id,
            'date': work_day.isoformat(),
            'taskCount': len(result.submitted),
            'totalHours': result.total_hours,
        })
        return result

    def _persist(self, employee, work_day, draft):
        return TimeEntry.objects.create(
            employee=employee,
            employee_code=employee.employee_id,
            employee_name=employee.get_full_name(),
            date=work_day,
            project_name=draft.project,
            task_description=draft.task_description,
            pms_task_id=draft.pms_task_id or '',
            problem_and_issues=draft.problem_and_issues or '',
            quantify=draft.quantify or '',
            achievements=draft.achievements or '',
            scope_of_improvements=draft.scope_of_improvements or '',
            tools_used=list(draft.tools_used or []),
            start_time=draft.start_time or '',
            end_time=draft.end_time or '',
            duration_minutes=draft.duration_minutes,
            total_hours=format_duration(draft.duration_minutes),
            percentage_complete=draft.percentage_complete,
            status=STATUS_PENDING,
        )
