from datetime import timedelta
from unittest import mock

from django.test import SimpleTestCase, TestCase
from django.utils import timezone

from notifications.services import NotificationResult
from timesheets.exceptions import ValidationError
from timesheets.models import TimeEntry
from timesheets.services.gate import PendingResolutionGate
from timesheets.services.submission import (
    STATE_BLOCKED,
    STATE_FAILED,
    STATE_SUBMITTED,
    Draft,
    TimesheetSubmissionPipeline,
)

from .fakes import FakePMSClient, make_employee


def draft(title='Build API', minutes=240, start='09:00', **kwargs):
    return Draft(project='Apollo', title=title, start_time=start, duration_minutes=minutes, **kwargs)


class DraftTest(SimpleTestCase):

    def test_description_composition(self):
        self.assertEqual(Draft(project='p', title='Fix', sub_task='Login').task_description, 'Fix | Login')
        self.assertEqual(Draft(project='p', title='Fix').task_description, 'Fix | ')
        self.assertEqual(
            Draft(project='p', title='Fix', sub_task='Login', description='SSO bug').task_description,
            'Fix | Login | SSO bug',
        )

    def test_duration_from_times(self):
        self.assertEqual(Draft(project='p', title='t', start_time='09:00', end_time='10:30').duration_minutes, 90)
        self.assertEqual(Draft(project='p', title='t', start_time='23:00', end_time='01:00').duration_minutes, 120)
        self.assertEqual(Draft(project='p', title='t').duration_minutes, 0)

    def test_can_submit(self):
        can_submit = TimesheetSubmissionPipeline.can_submit
        self.assertTrue(can_submit([draft()], 480, 480))
        self.assertFalse(can_submit([draft()], 479, 480))
        self.assertFalse(can_submit([], 600, 480))


class SubmissionPipelineTest(TestCase):

    def setUp(self):
        self.today = timezone.localdate()
        self.employee = make_employee('E300')
        self.pms = FakePMSClient()
        self.pms.add_project('P1')
        self.notifier = mock.Mock(return_value=NotificationResult(success=True))
        self.publisher = mock.Mock()
        self.pipeline = TimesheetSubmissionPipeline(
            gate=PendingResolutionGate(pms=self.pms),
            notifier=self.notifier,
            publisher=self.publisher,
        )

    def published(self, event_type):
        return [c for c in self.publisher.call_args_list if c[0][0] == event_type]

    def test_submits_all_drafts_and_notifies_once(self):
        drafts = [draft('Build API', 240, '09:00'), draft('Write tests', 240, '13:00')]
        result = self.pipeline.submit(self.employee, drafts)

        self.assertEqual(result.state, STATE_SUBMITTED)
        self.assertEqual(len(result.submitted), 2)
        self.assertEqual(result.total_hours, '8h 0m')
        entries = TimeEntry.objects.filter(employee=self.employee, date=self.today)
        self.assertEqual(entries.count(), 2)
        self.assertTrue(all(e.status == 'pending' for e in entries))
        self.assertEqual(entries.get(start_time='09:00').total_hours, '4h 0m')

        self.notifier.assert_called_once()
        event, payload = self.notifier.call_args[0]
        self.assertEqual(event, 'timesheet_submitted')
        self.assertEqual(payload['task_count'], 2)
        self.assertEqual(len(self.published('time_entry_created')), 2)
        self.assertEqual(len(self.published('timesheet_submitted')), 1)

    def test_not_enough_minutes_is_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            self.pipeline.submit(self.employee, [draft(minutes=300)])
        self.assertEqual(ctx.exception.details['requiredMinutes'], 480)
        self.assertFalse(TimeEntry.objects.exists())

    def test_no_drafts_is_rejected(self):
        with self.assertRaises(ValidationError):
            self.pipeline.submit(self.employee, [])

    def test_shift_hours_override(self):
        result = self.pipeline.submit(self.employee, [draft(minutes=240)], shift_hours=4)
        self.assertEqual(result.state, STATE_SUBMITTED)

    def test_invalid_shift_hours(self):
        with self.assertRaises(ValidationError):
            self.pipeline.submit(self.employee, [draft(minutes=600)], shift_hours=10)

    def test_already_logged_minutes_count(self):
        TimeEntry.objects.create(
            employee=self.employee, employee_code='E300', date=self.today, project_name='Apollo',
            task_description='Morning | ', start_time='08:00', duration_minutes=240,
        )
        TimeEntry.objects.create(
            employee=self.employee, employee_code='E300', date=self.today, project_name='Apollo',
            task_description='Rejected | ', start_time='07:00', duration_minutes=240, status='rejected',
        )
        result = self.pipeline.submit(self.employee, [draft(minutes=240, start='13:00')])
        self.assertEqual(result.state, STATE_SUBMITTED)
        self.assertEqual(result.total_minutes, 480)

    def test_pending_tasks_block_submission(self):
        self.pms.add_task('P1', 't1', assignee='E300', due_date=self.today)

        result = self.pipeline.submit(self.employee, [draft(minutes=480)])

        self.assertEqual(result.state, STATE_BLOCKED)
        self.assertEqual([item.task.id for item in result.pending], ['t1'])
        self.assertFalse(TimeEntry.objects.exists())
        self.notifier.assert_not_called()
        self.publisher.assert_not_called()

    def test_gate_checks_today_even_for_other_work_date(self):
        self.pms.add_task('P1', 't1', assignee='E300', due_date=self.today)
        result = self.pipeline.submit(self.employee, [draft(minutes=480)], work_date=self.today - timedelta(days=1))
        self.assertEqual(result.state, STATE_BLOCKED)

    def test_partial_failure_keeps_saved_entries(self):
        drafts = [draft('Same', 240, '09:00'), draft('Same', 240, '09:00'), draft('Other', 240, '14:00')]

        result = self.pipeline.submit(self.employee, drafts)

        self.assertEqual(result.state, STATE_FAILED)
        self.assertEqual(len(result.submitted), 2)
        self.assertEqual(len(result.failed), 1)
        self.assertEqual(TimeEntry.objects.count(), 2)
        self.notifier.assert_not_called()
        self.assertEqual(len(self.published('time_entry_created')), 2)
        self.assertEqual(self.published('timesheet_submitted'), [])
        self.assertEqual(result.to_dict()['failed'][0]['draft']['taskDescription'], 'Same | ')

    def test_failed_notification_does_not_fail_submission(self):
        self.notifier.return_value = NotificationResult(success=False, error='smtp down')
        result = self.pipeline.submit(self.employee, [draft(minutes=480)])
        self.assertEqual(result.state, STATE_SUBMITTED)
        self.assertFalse(result.notification.success)
