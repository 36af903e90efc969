from rest_framework.test import APITestCase

from timesheets.tests.fakes import make_employee

from .models import User


class LoginApiTest(APITestCase):

    def setUp(self):
        self.employee = make_employee('E900', role='MANAGER')

    def test_login_returns_employee_identity(self):
        response = self.client.post('/auth/login/', {'username': 'e900', 'password': 'pass1234!'}, format='json')

        self.assertEqual(response.status_code, 200)
        self.assertIn('access', response.data)
        self.assertEqual(response.data['user']['employee_code'], 'E900')
        self.assertEqual(response.data['user']['role'], 'manager')

    def test_unverified_user_is_blocked(self):
        User.objects.create_user(username='fresh', email='fresh@example.com', password='pass1234!')
        response = self.client.post('/auth/login/', {'username': 'fresh', 'password': 'pass1234!'}, format='json')
        self.assertEqual(response.status_code, 401)

    def test_profile(self):
        self.client.force_authenticate(self.employee.user)
        response = self.client.get('/auth/me/')
        self.assertEqual(response.data['department'], 'Engineering')
        self.assertEqual(response.data['shift_hours'], 8)
