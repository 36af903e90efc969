from unittest import mock

from django.test import TestCase
from django.utils import timezone

from notifications.services import NotificationResult
from timesheets.exceptions import NotFoundError, StateError, ValidationError
from timesheets.models import TimeEntry
from timesheets.services.approvals import TimeEntryStateMachine

from .fakes import make_employee


class TimeEntryStateMachineTest(TestCase):

    def setUp(self):
        self.manager = make_employee('M001', role='MANAGER')
        self.admin = make_employee('A001', role='ADMIN')
        self.employee = make_employee('E400', manager=self.manager)
        self.entry = TimeEntry.objects.create(
            employee=self.employee,
            employee_code='E400',
            date=timezone.localdate(),
            project_name='Apollo',
            task_description='Build | API',
            start_time='09:00',
            duration_minutes=240,
            total_hours='4h 0m',
        )
        self.notifier = mock.Mock(return_value=NotificationResult(success=True))
        self.publisher = mock.Mock()
        self.machine = TimeEntryStateMachine(notifier=self.notifier, publisher=self.publisher,
                                             admin_requires_manager=True)

    def test_full_approval_path(self):
        entry = self.machine.manager_approve(self.entry.pk, self.manager)
        self.assertEqual(entry.status, 'manager_approved')
        self.assertEqual(entry.manager_approved_by, self.manager)
        self.assertIsNotNone(entry.manager_approved_at)

        entry = self.machine.admin_approve(self.entry.pk, self.admin)
        self.assertEqual(entry.status, 'approved')
        self.assertEqual(entry.approved_by, self.admin)

        events = [c[0][0] for c in self.notifier.call_args_list]
        self.assertEqual(events, ['time_entry_manager_approved', 'time_entry_approved'])
        broadcasts = [c[0][0] for c in self.publisher.call_args_list]
        self.assertEqual(broadcasts, ['time_entry_updated', 'time_entry_updated'])

    def test_manager_approve_only_from_pending(self):
        self.machine.manager_approve(self.entry.pk, self.manager)
        with self.assertRaises(StateError):
            self.machine.manager_approve(self.entry.pk, self.manager)

    def test_admin_approve_requires_manager_stage(self):
        with self.assertRaises(StateError):
            self.machine.admin_approve(self.entry.pk, self.admin)
        self.entry.refresh_from_db()
        self.assertEqual(self.entry.status, 'pending')

    def test_admin_approve_from_pending_when_allowed(self):
        machine = TimeEntryStateMachine(notifier=self.notifier, publisher=self.publisher,
                                        admin_requires_manager=False)
        self.assertEqual(machine.admin_approve(self.entry.pk, self.admin).status, 'approved')

    def test_reject_from_pending_and_manager_approved(self):
        entry = self.machine.reject(self.entry.pk, self.manager, 'Missing details')
        self.assertEqual(entry.status, 'rejected')
        self.assertEqual(entry.rejection_reason, 'Missing details')
        payload = self.notifier.call_args[0][1]
        self.assertEqual(payload['reason'], 'Missing details')

        other = TimeEntry.objects.create(
            employee=self.employee, employee_code='E400', date=timezone.localdate(),
            project_name='Apollo', task_description='Other | ', status='manager_approved',
        )
        self.assertEqual(self.machine.reject(other.pk, self.admin, 'Wrong project').status, 'rejected')

    def test_terminal_states_do_not_change(self):
        self.machine.reject(self.entry.pk, self.manager, 'No')
        with self.assertRaises(StateError):
            self.machine.manager_approve(self.entry.pk, self.manager)
        with self.assertRaises(StateError):
            self.machine.admin_approve(self.entry.pk, self.admin)
        with self.assertRaises(StateError):
            self.machine.reject(self.entry.pk, self.admin, 'Again')

    def test_reject_requires_reason(self):
        with self.assertRaises(ValidationError):
            self.machine.reject(self.entry.pk, self.manager, ' ')

    def test_unknown_entry(self):
        with self.assertRaises(NotFoundError):
            self.machine.manager_approve(999999, self.manager)

    def test_edit_and_delete_while_pending(self):
        entry = self.machine.edit(self.entry.pk, {'duration_minutes': 90, 'achievements': 'Shipped'})
        self.assertEqual(entry.total_hours, '1h 30m')
        self.assertEqual(entry.achievements, 'Shipped')

        self.machine.delete(self.entry.pk)
        self.assertFalse(TimeEntry.objects.filter(pk=self.entry.pk).exists())
        self.publisher.assert_called_with('time_entry_deleted', {'id': self.entry.pk})

    def test_edit_and_delete_fail_once_not_pending(self):
        self.machine.manager_approve(self.entry.pk, self.manager)
        with self.assertRaises(StateError) as ctx:
            self.machine.edit(self.entry.pk, {'achievements': 'late change'})
        self.assertEqual(ctx.exception.message, "Only pending entries can be modified")
        with self.assertRaises(StateError):
            self.machine.delete(self.entry.pk)
        self.assertTrue(TimeEntry.objects.filter(pk=self.entry.pk).exists())

    def test_edit_rejects_status_fields(self):
        with self.assertRaises(ValidationError):
            self.machine.edit(self.entry.pk, {'status': 'approved'})
