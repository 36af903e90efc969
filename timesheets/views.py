"""
Timesheet APIs: pending-deadline gate, task resolution, blocking policy,
time entries with daily submission and the two-stage approval.
"""
import logging

from django.db import IntegrityError, transaction
from django.db.models import Q
from django_filters.rest_framework import DjangoFilterBackend
from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.filters import OrderingFilter
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from employees.services import request_employee, resolve_employee
from notifications.events import publish
from .constants import (
    EVENT_TIME_ENTRY_CREATED,
    STATUS_MANAGER_APPROVED,
    STATUS_PENDING,
    SUBMIT_FAILED_MESSAGE,
)
from .exceptions import ValidationError
from .models import TimeEntry
from .permissions import (
    IsTimesheetAdminOrReadOnly,
    TimeEntryObjectPermission,
    can_manager_approve,
    can_view_all_entries,
    is_timesheet_admin,
)
from .serializers import (
    SubmitDailySerializer,
    TaskDeadlineAcknowledgementSerializer,
    TaskPostponementSerializer,
    TimeEntryCreateSerializer,
    TimeEntrySerializer,
    TimeEntryUpdateSerializer,
    entry_event_payload,
)
from .services.approvals import TimeEntryStateMachine
from .services.deadlines import today
from .services.gate import PendingResolutionGate
from .services.policy import PolicyStore
from .services.resolution import ResolutionRecorder
from .services.submission import (
    STATE_BLOCKED,
    STATE_FAILED,
    Draft,
    TimesheetSubmissionPipeline,
)

logger = logging.getLogger(__name__)

APPROVAL_ACTIONS = ('manager_approve', 'approve', 'reject')


def _actor(request, field_name):
    """Employee named in the body, else the requesting user's profile."""
    identifier = request.data.get(field_name)
    if identifier not in (None, ''):
        return resolve_employee(identifier)
    return request_employee(request)


def _target_employee(request, identifier):
    """Employee a request acts for; only admins may act for someone else."""
    own = request_employee(request)
    if identifier in (None, ''):
        if own is None:
            raise PermissionDenied("No employee profile is linked to this account.")
        return own
    employee = resolve_employee(identifier)
    if own is not None and own.pk == employee.pk:
        return employee
    if can_view_all_entries(request.user) or (own is not None and employee.reporting_manager_id == own.pk):
        return employee
    raise PermissionDenied("You can only access your own timesheet.")


class PendingDeadlineTasksView(APIView):
    permission_classes = [IsAuthenticated]

    @swagger_auto_schema(
        operation_description=(
            "Tasks due on `date` that must be postponed or acknowledged before the employee can submit. "
            "With diagnostics=true the response is {pending, skipped, policy}."
        ),
        manual_parameters=[
            openapi.Parameter('employeeId', openapi.IN_QUERY, type=openapi.TYPE_STRING),
            openapi.Parameter('date', openapi.IN_QUERY, type=openapi.TYPE_STRING, format='date'),
            openapi.Parameter('diagnostics', openapi.IN_QUERY, type=openapi.TYPE_BOOLEAN),
        ]
    )
    def get(self, request):
        employee = _target_employee(request, request.query_params.get('employeeId'))
        target = request.query_params.get('date') or today()

        result = PendingResolutionGate().compute_pending(employee, target)

        if request.query_params.get('diagnostics', '').lower() in ('1', 'true', 'yes'):
            return Response(result.to_dict())
        return Response([item.to_dict() for item in result.pending])


class TaskPostponeView(APIView):
    permission_classes = [IsAuthenticated]

    @swagger_auto_schema(
        operation_description="Move a PMS task's due date and log the reason.",
        request_body=openapi.Schema(
            type=openapi.TYPE_OBJECT,
            required=['newDueDate', 'reason'],
            properties={
                'previousDueDate': openapi.Schema(type=openapi.TYPE_STRING, format='date'),
                'newDueDate': openapi.Schema(type=openapi.TYPE_STRING, format='date'),
                'reason': openapi.Schema(type=openapi.TYPE_STRING),
                'postponedBy': openapi.Schema(type=openapi.TYPE_STRING),
                'projectCode': openapi.Schema(type=openapi.TYPE_STRING),
            }
        )
    )
    def post(self, request, task_id):
        result = ResolutionRecorder().postpone(
            task_id=task_id,
            new_due_date=request.data.get('newDueDate'),
            reason=request.data.get('reason'),
            actor=_actor(request, 'postponedBy'),
            previous_due_date=request.data.get('previousDueDate'),
            project_code=request.data.get('projectCode', ''),
        )
        return Response({
            'success': True,
            'postponement': TaskPostponementSerializer(result.postponement).data,
            'updatedPMS': result.task.to_dict() if result.task else None,
            'notification': {'success': result.notification.success, 'error': result.notification.error},
        }, status=status.HTTP_201_CREATED)


class TaskAcknowledgeView(APIView):
    permission_classes = [IsAuthenticated]

    @swagger_auto_schema(
        operation_description="Log that a task's due date is kept as is.",
        request_body=openapi.Schema(
            type=openapi.TYPE_OBJECT,
            properties={
                'acknowledgedBy': openapi.Schema(type=openapi.TYPE_STRING),
                'projectCode': openapi.Schema(type=openapi.TYPE_STRING),
            }
        )
    )
    def post(self, request, task_id):
        acknowledgement = ResolutionRecorder().acknowledge(
            task_id=task_id,
            actor=_actor(request, 'acknowledgedBy'),
            project_code=request.data.get('projectCode', ''),
        )
        return Response({
            'success': True,
            'acknowledgement': TaskDeadlineAcknowledgementSerializer(acknowledgement).data,
        }, status=status.HTTP_201_CREATED)


class TaskPostponementListView(APIView):
    permission_classes = [IsAuthenticated]

    @swagger_auto_schema(
        operation_description="Postponement ledger of a task, newest first.",
        responses={200: TaskPostponementSerializer(many=True)}
    )
    def get(self, request, task_id):
        records = ResolutionRecorder().postponement_history(task_id)
        return Response(TaskPostponementSerializer(records, many=True).data)


class TimesheetBlockingSettingView(APIView):
    permission_classes = [IsAuthenticated, IsTimesheetAdminOrReadOnly]

    @swagger_auto_schema(operation_description="Read the blockUnassignedProjectTasks policy flag.")
    def get(self, request):
        return Response(PolicyStore().get_policy().policy.to_dict())

    @swagger_auto_schema(
        operation_description="Update the blockUnassignedProjectTasks policy flag (admin only).",
        request_body=openapi.Schema(
            type=openapi.TYPE_OBJECT,
            required=['blockUnassignedProjectTasks'],
            properties={'blockUnassignedProjectTasks': openapi.Schema(type=openapi.TYPE_BOOLEAN)}
        )
    )
    def patch(self, request):
        policy = PolicyStore().set_policy(
            request.data.get('blockUnassignedProjectTasks'),
            actor=request_employee(request),
        )
        return Response(policy.to_dict())


class TimeEntryViewSet(viewsets.ModelViewSet):
    """
    Time entries.

    list: Own entries; reportees' for managers; all for HR/Admin
    create: Create one pending entry
    update/partial_update/destroy: Owner only, while the entry is pending
    submit_daily: Gate and submit a day's tasks
    manager_approve / approve / reject: Approval transitions
    """
    permission_classes = [IsAuthenticated, TimeEntryObjectPermission]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_fields = ['status', 'date', 'employee']
    ordering_fields = ['date', 'created_at', 'status']
    ordering = ['-date', '-created_at']

    def get_serializer_class(self):
        if self.action == 'create':
            return TimeEntryCreateSerializer
        if self.action in ('update', 'partial_update'):
            return TimeEntryUpdateSerializer
        return TimeEntrySerializer

    def get_queryset(self):
        user = self.request.user
        queryset = TimeEntry.objects.select_related('employee')

        if can_view_all_entries(user):
            return queryset

        employee = request_employee(self.request)
        if employee is None:
            return queryset.none()

        if self.action in APPROVAL_ACTIONS and employee.can_approve_timesheet():
            return queryset

        return queryset.filter(Q(employee=employee) | Q(employee__reporting_manager=employee))

    def get_state_machine(self):
        return TimeEntryStateMachine()

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        own = request_employee(request)
        employee = serializer.validated_data.get('employee') or own
        if employee is None:
            raise PermissionDenied("No employee profile is linked to this account.")
        if (own is None or employee.pk != own.pk) and not is_timesheet_admin(request.user):
            raise PermissionDenied("You can only create your own time entries.")

        try:
            with transaction.atomic():
                entry = serializer.save(employee=employee)
        except IntegrityError:
            raise ValidationError("An identical time entry already exists for this day")
        publish(EVENT_TIME_ENTRY_CREATED, entry_event_payload(entry))
        return Response(TimeEntrySerializer(entry).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        entry = self.get_state_machine().edit(instance.pk, serializer.validated_data)
        return Response(TimeEntrySerializer(entry).data)

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        self.get_state_machine().delete(instance.pk)
        return Response({'success': True})

    @swagger_auto_schema(
        operation_description="Entries awaiting a decision from the requesting approver.",
        responses={200: TimeEntrySerializer(many=True)}
    )
    @action(detail=False, methods=['get'])
    def pending(self, request):
        queryset = self.get_queryset().filter(status__in=[STATUS_PENDING, STATUS_MANAGER_APPROVED])
        if not is_timesheet_admin(request.user):
            own = request_employee(request)
            queryset = queryset.filter(status=STATUS_PENDING).exclude(employee=own)
        page = self.paginate_queryset(self.filter_queryset(queryset))
        serializer = TimeEntrySerializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    @swagger_auto_schema(
        operation_description="All entries of one employee.",
        responses={200: TimeEntrySerializer(many=True)}
    )
    @action(detail=False, methods=['get'], url_path=r'employee/(?P<employee_id>[^/.]+)')
    def by_employee(self, request, employee_id=None):
        employee = _target_employee(request, employee_id)
        queryset = self.filter_queryset(TimeEntry.objects.filter(employee=employee).select_related('employee'))
        page = self.paginate_queryset(queryset)
        serializer = TimeEntrySerializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    @swagger_auto_schema(
        operation_description=(
            "Submit a day's tasks. 201 when every task was saved, 409 when deadline tasks "
            "must be resolved first, 500 when some tasks could not be saved."
        ),
        request_body=SubmitDailySerializer,
    )
    @action(detail=False, methods=['post'], url_path='submit-daily')
    def submit_daily(self, request):
        serializer = SubmitDailySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        employee = _target_employee(request, data.get('employeeId'))
        result = TimesheetSubmissionPipeline().submit(
            employee,
            [Draft(**task) for task in data['tasks']],
            work_date=data.get('date'),
            shift_hours=data.get('shiftHours'),
        )
        body = result.to_dict(entry_serializer=lambda entry: TimeEntrySerializer(entry).data)

        if result.state == STATE_BLOCKED:
            return Response({
                'error': "Resolve the pending deadline tasks before submitting",
                'details': body,
            }, status=status.HTTP_409_CONFLICT)
        if result.state == STATE_FAILED:
            return Response({
                'error': SUBMIT_FAILED_MESSAGE,
                'details': body,
            }, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
        return Response(body, status=status.HTTP_201_CREATED)

    @swagger_auto_schema(operation_description="First-stage approval by the reporting manager.")
    @action(detail=True, methods=['patch'], url_path='manager-approve')
    def manager_approve(self, request, pk=None):
        entry = self.get_object()
        if not can_manager_approve(request.user, entry):
            raise PermissionDenied("Only the reporting manager can approve this entry.")
        entry = self.get_state_machine().manager_approve(entry.pk, request_employee(request))
        return Response(TimeEntrySerializer(entry).data)

    @swagger_auto_schema(operation_description="Final approval by an admin.")
    @action(detail=True, methods=['patch'])
    def approve(self, request, pk=None):
        entry = self.get_object()
        if not is_timesheet_admin(request.user):
            raise PermissionDenied("Only admins can give final approval.")
        entry = self.get_state_machine().admin_approve(entry.pk, request_employee(request))
        return Response(TimeEntrySerializer(entry).data)

    @swagger_auto_schema(
        operation_description="Reject an entry that is not yet approved. A reason is required.",
        request_body=openapi.Schema(
            type=openapi.TYPE_OBJECT,
            required=['reason'],
            properties={
                'reason': openapi.Schema(type=openapi.TYPE_STRING),
            }
        )
    )
    @action(detail=True, methods=['patch'])
    def reject(self, request, pk=None):
        entry = self.get_object()
        if not (is_timesheet_admin(request.user) or can_manager_approve(request.user, entry)):
            raise PermissionDenied("You cannot reject this entry.")
        entry = self.get_state_machine().reject(
            entry.pk, request_employee(request), request.data.get('reason')
        )
        return Response(TimeEntrySerializer(entry).data)
