"""
Postponement and acknowledgement of overdue PMS tasks.

Both are append-only ledgers. Only a postponement changes anything in the PMS
(the task's due date); an acknowledgement is an audit record.
"""
import logging
from dataclasses import dataclass

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Q

from employees.models import Employee
from notifications.services import notify
from pms.clients import get_pms_client
from timesheets.constants import NOTIFY_TASK_POSTPONED
from timesheets.exceptions import UpstreamError, ValidationError
from timesheets.models import TaskDeadlineAcknowledgement, TaskPostponement

from .deadlines import to_calendar_day, today

logger = logging.getLogger(__name__)


@dataclass
class PostponeResult:
    postponement: TaskPostponement
    task: object
    notification: object


def _parse_day(value, field_name):
    try:
        return to_calendar_day(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is not a valid date", details={field_name: str(value)})


def postponement_recipients(actor):
    """Active HR/admin employees and the acting employee."""
    hr_codes = [role.upper() for role in settings.TIMESHEET_HR_ROLES]
    recipients = list(
        Employee.objects.filter(is_active=True).filter(
            Q(role__code__in=hr_codes) | Q(department__name=settings.TIMESHEET_HR_DEPARTMENT)
        )
    )
    if actor is not None and all(r.pk != actor.pk for r in recipients):
        recipients.append(actor)
    return recipients


class ResolutionRecorder:

    def __init__(self, pms=None, notifier=notify):
        self.pms = pms
        self.notifier = notifier

    def postpone(self, task_id, new_due_date, reason, actor, previous_due_date=None, project_code=''):
        """
        Move a task's due date and log why.

        The ledger row is written first, then the PMS is updated. The previous
        date is stored as given; it is not checked against the last record.
        """
        if not task_id:
            raise ValidationError("taskId is required")
        if not reason or not str(reason).strip():
            raise ValidationError("reason is required")
        if actor is None:
            raise ValidationError("postponedBy is required")

        new_day = _parse_day(new_due_date, 'newDueDate')
        if new_day is None:
            raise ValidationError("newDueDate is required")
        if new_day < today():
            raise ValidationError("newDueDate cannot be in the past", details={'newDueDate': new_day.isoformat()})
        previous_day = _parse_day(previous_due_date, 'previousDueDate')

        task_id = str(task_id)
        try:
            with transaction.atomic():
                prior = list(
                    TaskPostponement.objects.select_for_update()
                    .filter(task_id=task_id)
                    .values_list('id', flat=True)
                )
                postponement = TaskPostponement.objects.create(
                    task_id=task_id,
                    project_code=project_code or '',
                    previous_due_date=previous_day,
                    new_due_date=new_day,
                    reason=str(reason).strip(),
                    postponed_by=actor,
                    postpone_count=len(prior) + 1,
                )
        except IntegrityError as e:
            logger.error(f"Concurrent postponement of task {task_id}: {e}")
            raise UpstreamError("Task was postponed concurrently, please retry") from e

        logger.info(f"Task {task_id} postponed to {new_day} by {actor.employee_id} (#{postponement.postpone_count})")

        pms = self.pms or get_pms_client()
        updated_task = pms.update_task_due_date(task_id, new_day)

        notification = self.notifier(NOTIFY_TASK_POSTPONED, {
            'postponement': postponement,
            'recipients': postponement_recipients(actor),
        })
        return PostponeResult(postponement=postponement, task=updated_task, notification=notification)

    def acknowledge(self, task_id, actor, project_code=''):
        if not task_id:
            raise ValidationError("taskId is required")
        if actor is None:
            raise ValidationError("acknowledgedBy is required")

        acknowledgement = TaskDeadlineAcknowledgement.objects.create(
            task_id=str(task_id),
            project_code=project_code or '',
            acknowledged_by=actor,
        )
        logger.info(f"Task {task_id} deadline acknowledged by {actor.employee_id}")
        return acknowledgement

    def postponement_history(self, task_id):
        """Ledger for one task, newest first."""
        return (
            TaskPostponement.objects.filter(task_id=str(task_id))
            .select_related('postponed_by')
            .order_by('-postpone_count', '-postponed_at')
        )
