"""
Lifecycle of a submitted time entry.

    pending -> manager_approved -> approved
    pending | manager_approved -> rejected

approved and rejected are terminal. The owner may edit or delete an entry only
while it is pending.
"""
import logging

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from notifications.events import publish
from notifications.services import notify
from timesheets.constants import (
    EVENT_TIME_ENTRY_DELETED,
    EVENT_TIME_ENTRY_UPDATED,
    NOTIFY_APPROVED,
    NOTIFY_MANAGER_APPROVED,
    NOTIFY_REJECTED,
    STATUS_APPROVED,
    STATUS_MANAGER_APPROVED,
    STATUS_PENDING,
    STATUS_REJECTED,
    TERMINAL_STATUSES,
)
from timesheets.exceptions import NotFoundError, StateError, ValidationError
from timesheets.models import TimeEntry
from timesheets.serializers import TIME_ENTRY_CONTENT_FIELDS, entry_event_payload

from .durations import format_duration

logger = logging.getLogger(__name__)


class TimeEntryStateMachine:

    def __init__(self, notifier=notify, publisher=publish, admin_requires_manager=None):
        self.notifier = notifier
        self.publisher = publisher
        if admin_requires_manager is None:
            admin_requires_manager = settings.TIMESHEET_ADMIN_APPROVE_REQUIRES_MANAGER
        self.admin_requires_manager = admin_requires_manager

    def _lock(self, entry_id):
        try:
            return TimeEntry.objects.select_for_update().select_related('employee').get(pk=entry_id)
        except (TimeEntry.DoesNotExist, ValueError, TypeError):
            raise NotFoundError("Time entry not found", details={'id': str(entry_id)})

    def _announce(self, entry, event, **extra):
        self.publisher(EVENT_TIME_ENTRY_UPDATED, entry_event_payload(entry))
        return self.notifier(event, {'entry': entry, **extra})

    def manager_approve(self, entry_id, approver):
        with transaction.atomic():
            entry = self._lock(entry_id)
            if entry.status != STATUS_PENDING:
                raise StateError(
                    f"Only pending entries can be approved by a manager (status: {entry.status})"
                )
            entry.status = STATUS_MANAGER_APPROVED
            entry.manager_approved_by = approver
            entry.manager_approved_at = timezone.now()
            entry.save(update_fields=['status', 'manager_approved_by', 'manager_approved_at', 'updated_at'])

        logger.info(f"Time entry {entry.pk} manager approved by {getattr(approver, 'employee_id', None)}")
        self._announce(entry, NOTIFY_MANAGER_APPROVED, actor=approver)
        return entry

    def admin_approve(self, entry_id, approver):
        allowed = (STATUS_MANAGER_APPROVED,) if self.admin_requires_manager else (STATUS_PENDING, STATUS_MANAGER_APPROVED)
        with transaction.atomic():
            entry = self._lock(entry_id)
            if entry.status not in allowed:
                if entry.status == STATUS_PENDING:
                    raise StateError("Entry must be approved by a manager first")
                raise StateError(f"Entry is already {entry.status}")
            entry.status = STATUS_APPROVED
            entry.approved_by = approver
            entry.approved_at = timezone.now()
            entry.save(update_fields=['status', 'approved_by', 'approved_at', 'updated_at'])

        logger.info(f"Time entry {entry.pk} approved by {getattr(approver, 'employee_id', None)}")
        self._announce(entry, NOTIFY_APPROVED, actor=approver)
        return entry

    def reject(self, entry_id, approver, reason):
        if not reason or not str(reason).strip():
            raise ValidationError("reason is required")

        with transaction.atomic():
            entry = self._lock(entry_id)
            if entry.status in TERMINAL_STATUSES:
                raise StateError(f"Entry is already {entry.status}")
            entry.status = STATUS_REJECTED
            entry.rejected_by = approver
            entry.rejected_at = timezone.now()
            entry.rejection_reason = str(reason).strip()
            entry.save(update_fields=['status', 'rejected_by', 'rejected_at', 'rejection_reason', 'updated_at'])

        logger.info(f"Time entry {entry.pk} rejected by {getattr(approver, 'employee_id', None)}")
        self._announce(entry, NOTIFY_REJECTED, actor=approver, reason=entry.rejection_reason)
        return entry

    def edit(self, entry_id, changes):
        unknown = set(changes) - set(TIME_ENTRY_CONTENT_FIELDS)
        if unknown:
            raise ValidationError("These fields cannot be changed", details=sorted(unknown))

        try:
            with transaction.atomic():
                entry = self._lock(entry_id)
                if entry.status != STATUS_PENDING:
                    raise StateError()
                for name, value in changes.items():
                    setattr(entry, name, value)
                entry.total_hours = format_duration(entry.duration_minutes)
                entry.save()
        except IntegrityError:
            raise ValidationError("An identical time entry already exists for this day")

        self.publisher(EVENT_TIME_ENTRY_UPDATED, entry_event_payload(entry))
        return entry

    def delete(self, entry_id):
        with transaction.atomic():
            entry = self._lock(entry_id)
            if entry.status != STATUS_PENDING:
                raise StateError()
            pk = entry.pk
            entry.delete()

        logger.info(f"Time entry {pk} deleted")
        self.publisher(EVENT_TIME_ENTRY_DELETED, {'id': pk})
        return pk
