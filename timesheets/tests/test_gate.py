from datetime import timedelta

from django.test import TestCase
from django.utils import timezone

from timesheets.exceptions import UpstreamError
from timesheets.services.gate import PendingResolutionGate
from timesheets.services.policy import PolicyStore, TimesheetPolicy

from .fakes import FakePMSClient, make_employee

BLOCKING = TimesheetPolicy(block_unassigned_project_tasks=True)
NON_BLOCKING = TimesheetPolicy(block_unassigned_project_tasks=False)


class PendingResolutionGateTest(TestCase):

    def setUp(self):
        self.today = timezone.localdate()
        self.employee = make_employee('E100')
        self.pms = FakePMSClient()
        self.pms.add_project('P1', due_date=self.today + timedelta(days=30))
        self.gate = PendingResolutionGate(pms=self.pms)

    def pending_ids(self, policy, target=None):
        result = self.gate.compute_pending(self.employee, target or self.today, policy=policy)
        return [item.task.id for item in result.pending]

    def test_assigned_task_due_on_target_day_is_pending(self):
        self.pms.add_task('P1', 't1', assignee='E100', due_date=self.today)
        result = self.gate.compute_pending(self.employee, self.today, policy=NON_BLOCKING)

        self.assertEqual(len(result.pending), 1)
        item = result.pending[0]
        self.assertTrue(item.is_assigned_to_employee)
        data = item.to_dict()
        self.assertEqual(data['projectCode'], 'P1')
        self.assertEqual(data['projectName'], 'Project P1')
        self.assertTrue(data['isAssignedToEmployee'])

    def test_membership_counts_as_assignment(self):
        self.pms.add_task('P1', 't1', assignee='E999', members=['E100'], due_date=self.today)
        self.assertEqual(self.pending_ids(NON_BLOCKING), ['t1'])

    def test_due_day_must_equal_target(self):
        self.pms.add_task('P1', 'past', assignee='E100', due_date=self.today - timedelta(days=1))
        self.pms.add_task('P1', 'future', assignee='E100', due_date=self.today + timedelta(days=1))
        self.pms.add_task('P1', 'none', assignee='E100', due_date=None)
        self.assertEqual(self.pending_ids(NON_BLOCKING), [])
        self.assertEqual(self.pending_ids(BLOCKING), [])

    def test_completed_tasks_are_excluded(self):
        self.pms.add_task('P1', 'flag', assignee='E100', due_date=self.today, is_completed=True)
        self.pms.add_task('P1', 'status', assignee='E100', due_date=self.today, status='Completed')
        self.pms.add_task('P1', 'open', assignee='E100', due_date=self.today, status='In Progress')
        self.assertEqual(self.pending_ids(NON_BLOCKING), ['open'])

    def test_unassigned_tasks_follow_policy(self):
        self.pms.add_task('P1', 'other', assignee='E999', due_date=self.today)
        self.assertEqual(self.pending_ids(NON_BLOCKING), [])

        result = self.gate.compute_pending(self.employee, self.today, policy=BLOCKING)
        self.assertEqual([item.task.id for item in result.pending], ['other'])
        self.assertFalse(result.pending[0].is_assigned_to_employee)

    def test_blocking_policy_only_grows_pending_set(self):
        self.pms.add_project('P2')
        self.pms.add_task('P1', 'mine', assignee='E100', due_date=self.today)
        self.pms.add_task('P1', 'theirs', assignee='E200', due_date=self.today)
        self.pms.add_task('P2', 'nobody', due_date=self.today)
        self.pms.add_task('P2', 'done', due_date=self.today, is_completed=True)
        self.pms.add_task('P2', 'later', due_date=self.today + timedelta(days=2))

        relaxed = set(self.pending_ids(NON_BLOCKING))
        strict = set(self.pending_ids(BLOCKING))
        self.assertTrue(relaxed <= strict)
        self.assertEqual(relaxed, {'mine'})
        self.assertEqual(strict, {'mine', 'theirs', 'nobody'})

    def test_project_failure_is_skipped_not_fatal(self):
        self.pms.add_project('BROKEN')
        self.pms.failing_projects.add('BROKEN')
        self.pms.add_task('P1', 't1', assignee='E100', due_date=self.today)

        result = self.gate.compute_pending(self.employee, self.today, policy=NON_BLOCKING)

        self.assertEqual([item.task.id for item in result.pending], ['t1'])
        self.assertEqual(len(result.skipped), 1)
        self.assertEqual(result.skipped[0].project_code, 'BROKEN')
        self.assertIsNone(result.skipped[0].task_id)

    def test_unreadable_task_is_skipped(self):
        self.pms.add_task('P1', 'bad', assignee='E100', due_date=20260310)
        self.pms.add_task('P1', 'good', assignee='E100', due_date=self.today)

        result = self.gate.compute_pending(self.employee, self.today, policy=NON_BLOCKING)

        self.assertEqual([item.task.id for item in result.pending], ['good'])
        self.assertEqual([(s.project_code, s.task_id) for s in result.skipped], [('P1', 'bad')])

    def test_listing_projects_failure_raises(self):
        self.pms.fail_listing_projects = True
        with self.assertRaises(UpstreamError):
            self.gate.compute_pending(self.employee, self.today, policy=NON_BLOCKING)

    def test_policy_is_read_on_every_call(self):
        self.pms.add_task('P1', 'other', assignee='E999', due_date=self.today)
        store = PolicyStore()

        self.assertEqual(self.pending_ids(None), [])
        store.set_policy(True)
        self.assertEqual(self.pending_ids(None), ['other'])
        store.set_policy(False)
        self.assertEqual(self.pending_ids(None), [])

    def test_target_can_be_a_string(self):
        self.pms.add_task('P1', 't1', assignee='E100', due_date=self.today)
        self.assertEqual(self.pending_ids(NON_BLOCKING, target=self.today.isoformat()), ['t1'])
