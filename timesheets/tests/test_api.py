from datetime import timedelta

from django.core import mail
from django.test import override_settings
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from timesheets.models import TaskDeadlineAcknowledgement, TimeEntry

from .fakes import FakePMSMixin, make_employee

PENDING_URL = '/api/pending-deadline-tasks/'
SUBMIT_URL = '/api/time-entries/submit-daily/'
SETTINGS_URL = '/api/settings/timesheet-blocking/'

FULL_DAY = {'tasks': [{'project': 'Apollo', 'title': 'Build', 'subTask': 'API', 'startTime': '09:00', 'endTime': '17:00'}]}


@override_settings(SLACK_BOT_TOKEN='', TIMESHEET_NOTIFICATION_RECIPIENTS=['lead@example.com'])
class TimesheetApiTestBase(FakePMSMixin, APITestCase):

    def setUp(self):
        super().setUp()
        self.today = timezone.localdate()
        self.tomorrow = self.today + timedelta(days=1)
        self.manager = make_employee('M500', role='MANAGER')
        self.employee = make_employee('E500', manager=self.manager)
        self.admin = make_employee('A500', role='ADMIN')
        self.pms.add_project('P1', name='Apollo')
        self.client.force_authenticate(user=self.employee.user)

    def pending(self, **params):
        params.setdefault('employeeId', self.employee.pk)
        params.setdefault('date', self.today.isoformat())
        return self.client.get(PENDING_URL, params)


class SubmissionScenarioTest(TimesheetApiTestBase):

    def test_assigned_task_due_today_blocks_until_postponed(self):
        self.pms.add_task('P1', 't1', assignee='E500', due_date=self.today)

        response = self.pending()
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([t['id'] for t in response.data], ['t1'])
        self.assertTrue(response.data[0]['isAssignedToEmployee'])
        self.assertEqual(response.data[0]['projectCode'], 'P1')

        response = self.client.post('/api/tasks/t1/acknowledge/', {'projectCode': 'P1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['success'])
        self.assertEqual(TaskDeadlineAcknowledgement.objects.count(), 1)

        # Acknowledging leaves the due date alone
        self.assertEqual([t['id'] for t in self.pending().data], ['t1'])

        response = self.client.post(SUBMIT_URL, FULL_DAY, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['details']['state'], 'blocked')
        self.assertEqual([t['id'] for t in response.data['details']['pending']], ['t1'])
        self.assertFalse(TimeEntry.objects.exists())

        response = self.client.post('/api/tasks/t1/postpone/', {
            'previousDueDate': self.today.isoformat(),
            'newDueDate': self.tomorrow.isoformat(),
            'reason': 'Waiting for client assets',
            'projectCode': 'P1',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['postponement']['postpone_count'], 1)
        self.assertEqual(response.data['updatedPMS']['end_date'], self.tomorrow.isoformat())

        self.assertEqual(self.pending().data, [])

        response = self.client.post(SUBMIT_URL, FULL_DAY, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['state'], 'submitted')
        entries = TimeEntry.objects.filter(employee=self.employee)
        self.assertEqual(entries.count(), 1)
        self.assertEqual(entries.get().status, 'pending')
        self.assertEqual(entries.get().task_description, 'Build | API')
        self.assertEqual(len(mail.outbox), 2)  # postponement notice + daily submission

    def test_unassigned_task_blocks_only_with_policy(self):
        self.pms.add_task('P1', 't9', assignee='E999', due_date=self.today)
        self.assertEqual(self.pending().data, [])

        self.client.force_authenticate(user=self.admin.user)
        response = self.client.patch(SETTINGS_URL, {'blockUnassignedProjectTasks': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'blockUnassignedProjectTasks': True})

        self.client.force_authenticate(user=self.employee.user)
        response = self.pending()
        self.assertEqual([t['id'] for t in response.data], ['t9'])
        self.assertFalse(response.data[0]['isAssignedToEmployee'])

    def test_diagnostics_report_skipped_projects(self):
        self.pms.add_project('P2')
        self.pms.failing_projects.add('P2')
        response = self.pending(diagnostics='true')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['pending'], [])
        self.assertEqual(response.data['skipped'][0]['projectCode'], 'P2')

    def test_short_day_is_rejected(self):
        body = {'tasks': [{'project': 'Apollo', 'title': 'Build', 'startTime': '09:00', 'endTime': '11:00'}]}
        response = self.client.post(SUBMIT_URL, body, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['details']['requiredMinutes'], 480)

    def test_partial_failure_reports_items(self):
        task = FULL_DAY['tasks'][0]
        response = self.client.post(SUBMIT_URL, {'tasks': [task, task]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data['error'], "Some tasks failed to submit. Please try again.")
        self.assertEqual(len(response.data['details']['submitted']), 1)
        self.assertEqual(len(response.data['details']['failed']), 1)
        self.assertEqual(TimeEntry.objects.count(), 1)


class ErrorEncodingTest(TimesheetApiTestBase):

    def test_postpone_without_reason_is_400(self):
        self.pms.add_task('P1', 't1', assignee='E500', due_date=self.today)
        response = self.client.post('/api/tasks/t1/postpone/', {'newDueDate': self.tomorrow.isoformat()}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data, {'error': 'reason is required'})

    def test_unknown_employee_is_404(self):
        response = self.pending(employeeId='NOPE')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Employee not found')

    def test_impossible_date_is_400(self):
        response = self.pending(date='2026-02-30T10:00:00')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data, {'error': 'date is required'})

    def test_pms_outage_is_500(self):
        self.pms.fail_listing_projects = True
        response = self.pending()
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertIn('error', response.data)

    def test_policy_update_requires_admin(self):
        response = self.client.patch(SETTINGS_URL, {'blockUnassignedProjectTasks': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertIn('error', response.data)
        self.assertEqual(self.client.get(SETTINGS_URL).data, {'blockUnassignedProjectTasks': False})

    def test_invalid_draft_is_400(self):
        response = self.client.post(SUBMIT_URL, {'tasks': [{'project': 'Apollo'}]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Validation failed')
        self.assertIn('tasks', response.data['details'])

    def test_postponement_history_newest_first(self):
        self.pms.add_task('P1', 't1', assignee='E500', due_date=self.today)
        for days in (1, 2):
            self.client.post('/api/tasks/t1/postpone/', {
                'newDueDate': (self.today + timedelta(days=days)).isoformat(), 'reason': f'r{days}',
            }, format='json')
        response = self.client.get('/api/tasks/t1/postponements/')
        self.assertEqual([r['postpone_count'] for r in response.data], [2, 1])


class TimeEntryApprovalApiTest(TimesheetApiTestBase):

    def create_entry(self):
        response = self.client.post('/api/time-entries/', {
            'date': self.today.isoformat(),
            'project_name': 'Apollo',
            'task_description': 'Build | API',
            'start_time': '09:00',
            'duration_minutes': 120,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'pending')
        self.assertEqual(response.data['total_hours'], '2h 0m')
        return response.data['id']

    def test_two_stage_approval(self):
        entry_id = self.create_entry()

        response = self.client.patch(f'/api/time-entries/{entry_id}/manager-approve/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.manager.user)
        response = self.client.patch(f'/api/time-entries/{entry_id}/approve/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = self.client.patch(f'/api/time-entries/{entry_id}/manager-approve/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'manager_approved')

        self.client.force_authenticate(user=self.admin.user)
        response = self.client.patch(f'/api/time-entries/{entry_id}/approve/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'approved')
        self.assertEqual(response.data['approved_by'], self.admin.pk)

    def test_approver_is_the_requesting_user(self):
        entry_id = self.create_entry()
        self.client.force_authenticate(user=self.manager.user)
        response = self.client.patch(
            f'/api/time-entries/{entry_id}/manager-approve/', {'approvedBy': self.admin.pk}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['manager_approved_by'], self.manager.pk)

        self.client.force_authenticate(user=self.admin.user)
        response = self.client.patch(
            f'/api/time-entries/{entry_id}/reject/',
            {'reason': 'Too vague', 'approvedBy': self.manager.pk},
            format='json',
        )
        self.assertEqual(response.data['rejected_by'], self.admin.pk)

    def test_owner_cannot_edit_after_approval(self):
        entry_id = self.create_entry()
        response = self.client.patch(f'/api/time-entries/{entry_id}/', {'achievements': 'Done'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        self.client.force_authenticate(user=self.manager.user)
        self.client.patch(f'/api/time-entries/{entry_id}/manager-approve/', {}, format='json')

        self.client.force_authenticate(user=self.employee.user)
        response = self.client.patch(f'/api/time-entries/{entry_id}/', {'achievements': 'Later'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Only pending entries can be modified')
        response = self.client.delete(f'/api/time-entries/{entry_id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_reject_requires_reason(self):
        entry_id = self.create_entry()
        self.client.force_authenticate(user=self.manager.user)
        response = self.client.patch(f'/api/time-entries/{entry_id}/reject/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.patch(f'/api/time-entries/{entry_id}/reject/', {'reason': 'Too vague'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'rejected')

    def test_delete_pending_entry(self):
        entry_id = self.create_entry()
        response = self.client.delete(f'/api/time-entries/{entry_id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(TimeEntry.objects.filter(pk=entry_id).exists())

    def test_list_is_scoped_to_visible_entries(self):
        self.create_entry()
        other = make_employee('E501')
        TimeEntry.objects.create(employee=other, employee_code='E501', date=self.today,
                                 project_name='Apollo', task_description='Other | ')

        response = self.client.get('/api/time-entries/')
        self.assertEqual(response.data['count'], 1)

        self.client.force_authenticate(user=self.admin.user)
        self.assertEqual(self.client.get('/api/time-entries/').data['count'], 2)

        self.client.force_authenticate(user=self.manager.user)
        response = self.client.get('/api/time-entries/pending/')
        self.assertEqual([e['employee_code'] for e in response.data['results']], ['E500'])
