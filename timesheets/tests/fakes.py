"""In-memory PMS client and fixtures shared by the timesheet tests."""
from unittest import mock

from auth_app.models import User
from departments.models import Department
from employees.models import Employee, Role
from pms.clients import BasePMSClient
from pms.types import Project, Task
from timesheets.exceptions import NotFoundError, UpstreamError
from timesheets.services.deadlines import day_key

# Every place that looks up the configured PMS client.
PMS_CLIENT_LOOKUPS = (
    'timesheets.services.gate.get_pms_client',
    'timesheets.services.resolution.get_pms_client',
    'pms.views.get_pms_client',
)


class FakePMSClient(BasePMSClient):

    def __init__(self):
        self.projects = []
        self.tasks = {}
        self.subtasks = {}
        self.failing_projects = set()
        self.fail_listing_projects = False
        self.updates = []

    def add_project(self, code, name=None, due_date=None, department='Engineering'):
        project = Project(code=code, name=name or f"Project {code}", due_date=day_key(due_date), department=department)
        self.projects.append(project)
        self.tasks.setdefault(code, [])
        return project

    def add_task(self, project_code, task_id, name=None, assignee='', members=None, due_date=None,
                 is_completed=False, status=''):
        task = Task(
            id=str(task_id),
            project_code=project_code,
            name=name or f"Task {task_id}",
            assignee=assignee,
            members=list(members or []),
            due_date=due_date if isinstance(due_date, (int, float)) else day_key(due_date),
            is_completed=is_completed,
            status=status,
        )
        self.tasks.setdefault(project_code, []).append(task)
        return task

    def list_projects(self, role, employee_code, department):
        if self.fail_listing_projects:
            raise UpstreamError("PMS request failed: GET projects")
        return list(self.projects)

    def list_tasks(self, project_code, department):
        if project_code in self.failing_projects:
            raise UpstreamError(f"PMS request failed: GET tasks {project_code}")
        return list(self.tasks.get(project_code, []))

    def list_subtasks(self, task_id, department):
        return list(self.subtasks.get(str(task_id), []))

    def update_task_due_date(self, task_id, new_date):
        for tasks in self.tasks.values():
            for task in tasks:
                if task.id == str(task_id):
                    task.due_date = day_key(new_date)
                    self.updates.append((task.id, task.due_date))
                    return task
        raise NotFoundError("Task not found in PMS")


class FakePMSMixin:
    """Route every PMS lookup to one FakePMSClient per test."""

    def setUp(self):
        super().setUp()
        self.pms = FakePMSClient()
        for target in PMS_CLIENT_LOOKUPS:
            patcher = mock.patch(target, return_value=self.pms)
            patcher.start()
            self.addCleanup(patcher.stop)


def make_department(name='Engineering'):
    department, _ = Department.objects.get_or_create(name=name, defaults={'code': name[:3].upper()})
    return department


def make_employee(code, role='EMPLOYEE', department='Engineering', manager=None, with_user=True, is_staff=False):
    user = None
    if with_user:
        user = User.objects.create_user(
            username=code.lower(),
            email=f"{code.lower()}@example.com",
            password='pass1234!',
            is_verified=True,
            is_staff=is_staff,
        )
    return Employee.objects.create(
        employee_id=code,
        user=user,
        first_name=code.title(),
        last_name='Tester',
        email=f"{code.lower()}@example.com",
        role=Role.objects.get(code=role),
        department=make_department(department) if department else None,
        reporting_manager=manager,
    )
