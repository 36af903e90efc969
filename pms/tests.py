from datetime import date, timedelta
from unittest import mock

import requests
from django.test import SimpleTestCase, override_settings
from django.utils import timezone
from rest_framework.test import APITestCase

from timesheets.exceptions import NotFoundError, UpstreamError
from timesheets.tests.fakes import FakePMSMixin, make_employee

from .clients import SupabasePMSClient, get_pms_client
from .types import Project, Task


def fake_response(payload, status_code=200):
    response = mock.Mock()
    response.status_code = status_code
    response.content = b'x' if payload is not None else b''
    response.json.return_value = payload
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status_code} error")
    else:
        response.raise_for_status.return_value = None
    return response


class PMSTypesTest(SimpleTestCase):

    def test_task_from_row(self):
        task = Task.from_row({
            'id': 17, 'task_name': 'Design', 'assigned_to': 'E1', 'task_members': ['E2', 'E3'],
            'end_date': '2026-03-10', 'is_completed': None, 'status': 'Completed',
        }, project_code='P1')

        self.assertEqual(task.id, '17')
        self.assertEqual(task.project_code, 'P1')
        self.assertEqual(task.assignee, 'E1')
        self.assertTrue(task.is_assigned_to('E3'))
        self.assertFalse(task.is_assigned_to(''))
        self.assertTrue(task.completed)

    def test_members_must_be_a_list(self):
        task = Task.from_row({'id': 1, 'task_members': 'E2'})
        self.assertEqual(task.members, [])
        self.assertFalse(task.is_assigned_to('E2'))

    def test_project_from_row(self):
        project = Project.from_row({'project_code': 'P1', 'project_name': 'Apollo', 'end_date': None, 'extra': 1})
        self.assertEqual(project.name, 'Apollo')
        self.assertEqual(project.to_dict()['extra'], 1)


@override_settings(PMS_BASE_URL='https://pms.example.com', PMS_API_KEY='key', PMS_TIMEOUT_SECONDS=5)
class SupabasePMSClientTest(SimpleTestCase):

    def setUp(self):
        self.session = mock.Mock()
        self.client = SupabasePMSClient(session=self.session)

    def test_admin_sees_every_project(self):
        self.session.request.return_value = fake_response([{'project_code': 'P1', 'project_name': 'Apollo'}])

        projects = self.client.list_projects('admin', 'E1', 'Engineering')

        self.assertEqual([p.code for p in projects], ['P1'])
        method, url = self.session.request.call_args[0]
        kwargs = self.session.request.call_args[1]
        self.assertEqual((method, url), ('GET', 'https://pms.example.com/rest/v1/projects'))
        self.assertNotIn('department', kwargs['params'])
        self.assertEqual(kwargs['headers']['apikey'], 'key')
        self.assertEqual(kwargs['timeout'], 5)

    def test_other_roles_are_scoped_to_department(self):
        self.session.request.return_value = fake_response([])
        self.client.list_projects('employee', 'E1', 'Engineering')
        self.assertEqual(self.session.request.call_args[1]['params']['department'], 'eq.Engineering')

    def test_list_tasks(self):
        self.session.request.return_value = fake_response([{'id': 5, 'task_name': 'Build', 'assignee': 'E1'}])
        tasks = self.client.list_tasks('P1', 'Engineering')
        self.assertEqual(tasks[0].project_code, 'P1')
        self.assertEqual(self.session.request.call_args[1]['params']['project_code'], 'eq.P1')

    def test_update_due_date(self):
        self.session.request.return_value = fake_response([{'id': 5, 'end_date': '2026-03-11'}])

        task = self.client.update_task_due_date('5', date(2026, 3, 11))

        self.assertEqual(task.due_date, '2026-03-11')
        kwargs = self.session.request.call_args[1]
        self.assertEqual(self.session.request.call_args[0][0], 'PATCH')
        self.assertEqual(kwargs['json'], {'end_date': '2026-03-11'})
        self.assertEqual(kwargs['params'], {'id': 'eq.5'})
        self.assertEqual(kwargs['headers']['Prefer'], 'return=representation')

    def test_update_unknown_task(self):
        self.session.request.return_value = fake_response([])
        with self.assertRaises(NotFoundError):
            self.client.update_task_due_date('404', date(2026, 3, 11))

    def test_http_error_becomes_upstream_error(self):
        self.session.request.return_value = fake_response({'message': 'boom'}, status_code=503)
        with self.assertRaises(UpstreamError):
            self.client.list_tasks('P1', '')

    def test_network_error_becomes_upstream_error(self):
        self.session.request.side_effect = requests.ConnectionError("refused")
        with self.assertRaises(UpstreamError):
            self.client.list_projects('hr', 'E1', '')

    @override_settings(PMS_BASE_URL='')
    def test_missing_base_url(self):
        with self.assertRaises(UpstreamError):
            SupabasePMSClient(session=self.session).list_tasks('P1', '')

    @override_settings(PMS_CLIENT='timesheets.tests.fakes.FakePMSClient')
    def test_client_class_is_configurable(self):
        self.assertEqual(type(get_pms_client()).__name__, 'FakePMSClient')


class AvailableTasksApiTest(FakePMSMixin, APITestCase):

    def setUp(self):
        super().setUp()
        self.today = timezone.localdate()
        self.employee = make_employee('E700')
        self.client.force_authenticate(user=self.employee.user)

    def test_overdue_flags(self):
        self.pms.add_project('OLD', due_date=self.today - timedelta(days=1))
        self.pms.add_project('NEW', due_date=self.today + timedelta(days=10))
        self.pms.add_task('OLD', 'a', assignee='E700', due_date=self.today + timedelta(days=2))
        self.pms.add_task('NEW', 'b', due_date=self.today - timedelta(days=3))
        self.pms.add_task('NEW', 'c', due_date=self.today)

        response = self.client.get('/api/available-tasks/', {'employeeId': 'E700'})

        self.assertEqual(response.status_code, 200)
        flags = {t['id']: (t['isTaskOverdue'], t['isProjectOverdue'], t['isOverdue']) for t in response.data}
        self.assertEqual(flags['a'], (False, True, True))
        self.assertEqual(flags['b'], (True, False, True))
        # due today is not overdue yet
        self.assertEqual(flags['c'], (False, False, False))

    def test_projects_have_expiry_flag(self):
        self.pms.add_project('OLD', due_date=self.today - timedelta(days=1))
        self.pms.add_project('NOW', due_date=self.today)
        response = self.client.get('/api/projects/')
        self.assertEqual({p['project_code']: p['isExpired'] for p in response.data}, {'OLD': True, 'NOW': False})

    def test_tasks_require_project(self):
        response = self.client.get('/api/tasks/')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data, {'error': 'projectId is required'})
