from django.test import TestCase
from rest_framework.test import APITestCase

from timesheets.exceptions import NotFoundError, ValidationError
from timesheets.tests.fakes import make_employee

from .services import resolve_employee


class EmployeeModelTest(TestCase):
    """Role helpers on Employee"""

    def setUp(self):
        self.admin = make_employee('A100', role='ADMIN')
        self.manager = make_employee('M100', role='MANAGER')
        self.employee = make_employee('E100', manager=self.manager)

    def test_role_name(self):
        self.assertEqual(self.admin.role_name, 'admin')
        self.assertEqual(self.employee.role_name, 'employee')

    def test_staff_user_counts_as_admin(self):
        staff = make_employee('S100', is_staff=True)
        self.assertTrue(staff.is_admin())

    def test_approval_rights(self):
        other = make_employee('E101')
        self.assertTrue(self.manager.can_manager_approve_for(self.employee))
        self.assertTrue(self.manager.can_manager_approve_for(other))
        self.assertFalse(self.employee.can_approve_timesheet())
        self.assertFalse(self.employee.can_manager_approve_for(other))


class ResolveEmployeeTest(TestCase):

    def setUp(self):
        self.employee = make_employee('E200')

    def test_by_pk_and_code(self):
        self.assertEqual(resolve_employee(self.employee.pk), self.employee)
        self.assertEqual(resolve_employee(str(self.employee.pk)), self.employee)
        self.assertEqual(resolve_employee('E200'), self.employee)

    def test_missing_identifier(self):
        with self.assertRaises(ValidationError):
            resolve_employee('')

    def test_unknown_employee(self):
        with self.assertRaises(NotFoundError):
            resolve_employee('NOPE')


class EmployeeApiTest(APITestCase):

    def setUp(self):
        self.manager = make_employee('M300', role='MANAGER')
        self.reportee = make_employee('E300', manager=self.manager)
        self.stranger = make_employee('E301')

    def codes(self, response):
        return sorted(row['employee_id'] for row in response.data['results'])

    def test_manager_sees_self_and_reportees(self):
        self.client.force_authenticate(self.manager.user)
        response = self.client.get('/api/employees/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.codes(response), ['E300', 'M300'])

    def test_employee_sees_only_self(self):
        self.client.force_authenticate(self.stranger.user)
        response = self.client.get('/api/employees/')
        self.assertEqual(self.codes(response), ['E301'])

    def test_me(self):
        self.client.force_authenticate(self.reportee.user)
        response = self.client.get('/api/employees/me/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['manager_name'], self.manager.get_full_name())

    def test_managers(self):
        self.client.force_authenticate(self.reportee.user)
        response = self.client.get('/api/employees/managers/')
        self.assertEqual([row['employee_id'] for row in response.data], ['M300'])
