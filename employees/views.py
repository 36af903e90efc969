from django.db.models import Q
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .models import Employee
from .permissions import EmployeeObjectPermission
from .serializers import EmployeeListSerializer


class EmployeeViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Employees visible to the requesting user.

    list: Admin/HR see everyone, managers see themselves and their reportees,
          employees see themselves
    retrieve: Single employee
    me: The requesting user's employee profile
    managers: Employees that can approve timesheets
    """
    serializer_class = EmployeeListSerializer
    permission_classes = [IsAuthenticated, EmployeeObjectPermission]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    filterset_fields = ['department', 'role', 'reporting_manager', 'is_active']
    search_fields = ['employee_id', 'first_name', 'last_name', 'email']
    ordering_fields = ['employee_id', 'first_name', 'created_at']
    ordering = ['employee_id']

    def get_queryset(self):
        user = self.request.user
        queryset = Employee.objects.select_related('role', 'department', 'reporting_manager')

        if user.is_staff or user.is_superuser:
            return queryset

        employee = getattr(user, 'employee_profile', None)
        if employee is None:
            return queryset.none()

        if employee.role and employee.role.can_view_all_employees:
            return queryset

        return queryset.filter(Q(pk=employee.pk) | Q(reporting_manager=employee))

    @action(detail=False, methods=['get'])
    def me(self, request):
        """Get current user's employee profile"""
        employee = getattr(request.user, 'employee_profile', None)
        if employee is None:
            return Response({'error': 'Employee profile not found'}, status=404)
        return Response(self.get_serializer(employee).data)

    @action(detail=False, methods=['get'])
    def managers(self, request):
        """Active employees whose role can approve timesheets"""
        queryset = Employee.objects.filter(
            is_active=True, role__can_approve_timesheet=True
        ).select_related('role', 'department')
        return Response(self.get_serializer(queryset, many=True).data)
