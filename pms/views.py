"""
Read-through views over the project-management system.
"""
import logging

from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from employees.services import request_employee, resolve_employee
from timesheets.exceptions import ValidationError
from timesheets.services.deadlines import is_overdue, today

from .clients import get_pms_client

logger = logging.getLogger(__name__)

department_param = openapi.Parameter(
    'userDepartment', openapi.IN_QUERY, type=openapi.TYPE_STRING,
    description="Department name; defaults to the requesting employee's department"
)


class ProjectListView(APIView):
    permission_classes = [IsAuthenticated]

    @swagger_auto_schema(
        operation_description="Projects visible to a role/department, each with an isExpired flag.",
        manual_parameters=[
            openapi.Parameter('userRole', openapi.IN_QUERY, type=openapi.TYPE_STRING),
            openapi.Parameter('userEmpCode', openapi.IN_QUERY, type=openapi.TYPE_STRING),
            department_param,
        ]
    )
    def get(self, request):
        employee = request_employee(request)
        role = request.query_params.get('userRole') or (employee.role_name if employee else '')
        employee_code = request.query_params.get('userEmpCode') or (employee.employee_id if employee else '')
        department = request.query_params.get('userDepartment') or (employee.department_name if employee else '')

        projects = get_pms_client().list_projects(role, employee_code, department)
        reference = today()
        data = []
        for project in projects:
            item = project.to_dict()
            item['isExpired'] = is_overdue(project.due_date, reference)
            data.append(item)
        return Response(data)


class TaskListView(APIView):
    permission_classes = [IsAuthenticated]

    @swagger_auto_schema(
        operation_description="Tasks of one PMS project.",
        manual_parameters=[
            openapi.Parameter('projectId', openapi.IN_QUERY, type=openapi.TYPE_STRING, required=True),
            department_param,
        ]
    )
    def get(self, request):
        project_code = request.query_params.get('projectId')
        if not project_code:
            raise ValidationError("projectId is required")
        department = request.query_params.get('userDepartment', '')
        tasks = get_pms_client().list_tasks(project_code, department)
        return Response([task.to_dict() for task in tasks])


class SubtaskListView(APIView):
    permission_classes = [IsAuthenticated]

    @swagger_auto_schema(
        operation_description="Subtasks of one PMS task.",
        manual_parameters=[
            openapi.Parameter('taskId', openapi.IN_QUERY, type=openapi.TYPE_STRING, required=True),
            department_param,
        ]
    )
    def get(self, request):
        task_id = request.query_params.get('taskId')
        if not task_id:
            raise ValidationError("taskId is required")
        department = request.query_params.get('userDepartment', '')
        return Response(get_pms_client().list_subtasks(task_id, department))


class AvailableTasksView(APIView):
    """Every task the employee can log time against, flagged when overdue."""
    permission_classes = [IsAuthenticated]

    @swagger_auto_schema(
        operation_description="All tasks visible to the employee with task/project overdue flags.",
        manual_parameters=[
            openapi.Parameter('employeeId', openapi.IN_QUERY, type=openapi.TYPE_STRING, required=True),
        ]
    )
    def get(self, request):
        employee = resolve_employee(request.query_params.get('employeeId'))
        department = employee.department_name
        pms = get_pms_client()
        reference = today()

        data = []
        for project in pms.list_projects(employee.role_name, employee.employee_id, department):
            project_overdue = is_overdue(project.due_date, reference)
            for task in pms.list_tasks(project.code, department):
                task_overdue = is_overdue(task.due_date, reference)
                item = task.to_dict()
                item.update({
                    'projectCode': project.code,
                    'projectName': project.name,
                    'projectDescription': project.description,
                    'projectDeadline': project.due_date,
                    'taskDeadline': task.due_date,
                    'isProjectOverdue': project_overdue,
                    'isTaskOverdue': task_overdue,
                    'isOverdue': task_overdue or project_overdue,
                    'isAssignedToEmployee': task.is_assigned_to(employee.employee_id),
                })
                data.append(item)

        logger.debug(f"Available tasks for {employee.employee_id}: {len(data)}")
        return Response(data)
