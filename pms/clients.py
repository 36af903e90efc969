import logging

import requests
from django.conf import settings
from django.utils.module_loading import import_string

from timesheets.exceptions import NotFoundError, UpstreamError
from timesheets.services.deadlines import day_key

from .types import Project, Task

logger = logging.getLogger(__name__)

# Roles that see every project regardless of department.
UNSCOPED_ROLES = ('admin', 'hr')


class BasePMSClient:
    """Read/write contract the timesheet workflow needs from the PMS."""

    def list_projects(self, role, employee_code, department):
        raise NotImplementedError

    def list_tasks(self, project_code, department):
        raise NotImplementedError

    def list_subtasks(self, task_id, department):
        raise NotImplementedError

    def update_task_due_date(self, task_id, new_date):
        raise NotImplementedError


class SupabasePMSClient(BasePMSClient):
    """
    PMS client over the PostgREST API exposed by Supabase.

    Tables: projects, tasks, subtasks. Any network or HTTP error is raised as
    UpstreamError.
    """

    def __init__(self, base_url=None, api_key=None, timeout=None, session=None):
        self.base_url = (base_url if base_url is not None else settings.PMS_BASE_URL).rstrip('/')
        self.api_key = api_key if api_key is not None else settings.PMS_API_KEY
        self.timeout = timeout if timeout is not None else settings.PMS_TIMEOUT_SECONDS
        self.session = session or requests.Session()

    def _headers(self, extra=None):
        headers = {
            'apikey': self.api_key,
            'Authorization': f'Bearer {self.api_key}',
            'Content-Type': 'application/json',
        }
        if extra:
            headers.update(extra)
        return headers

    def _request(self, method, table, params=None, payload=None, headers=None):
        if not self.base_url:
            raise UpstreamError("PMS_BASE_URL is not configured")

        url = f"{self.base_url}/rest/v1/{table}"
        try:
            response = self.session.request(
                method,
                url,
                params=params,
                json=payload,
                headers=self._headers(headers),
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"PMS {method} {table} failed: {e}")
            raise UpstreamError(f"PMS request failed: {method} {table}") from e

        if not response.content:
            return []
        try:
            return response.json()
        except ValueError as e:
            logger.error(f"PMS {method} {table} returned invalid JSON")
            raise UpstreamError(f"PMS returned an invalid response for {table}") from e

    def list_projects(self, role, employee_code, department):
        params = {'select': '*', 'order': 'project_name.asc'}
        if (role or '').lower() not in UNSCOPED_ROLES and department:
            params['department'] = f'eq.{department}'
        logger.debug(f"Listing PMS projects role={role} employee={employee_code} department={department}")
        return [Project.from_row(row) for row in self._request('GET', 'projects', params=params)]

    def list_tasks(self, project_code, department):
        params = {'select': '*', 'project_code': f'eq.{project_code}', 'order': 'id.asc'}
        rows = self._request('GET', 'tasks', params=params)
        return [Task.from_row(row, project_code=project_code) for row in rows]

    def list_subtasks(self, task_id, department):
        params = {'select': '*', 'task_id': f'eq.{task_id}', 'order': 'id.asc'}
        return self._request('GET', 'subtasks', params=params)

    def update_task_due_date(self, task_id, new_date):
        rows = self._request(
            'PATCH',
            'tasks',
            params={'id': f'eq.{task_id}'},
            payload={'end_date': day_key(new_date)},
            headers={'Prefer': 'return=representation'},
        )
        if not rows:
            raise NotFoundError("Task not found in PMS", details={"taskId": str(task_id)})
        logger.info(f"PMS task {task_id} due date set to {day_key(new_date)}")
        return Task.from_row(rows[0])


def get_pms_client():
    """Instantiate the client class named by settings.PMS_CLIENT."""
    return import_string(settings.PMS_CLIENT)()
