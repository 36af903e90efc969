from rest_framework import serializers

from .models import Employee


class EmployeeListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for employee lists"""
    full_name = serializers.CharField(source='get_full_name', read_only=True)
    department_name = serializers.CharField(source='department.name', read_only=True, default='')
    role = serializers.CharField(source='role_name', read_only=True)
    manager_name = serializers.CharField(
        source='reporting_manager.get_full_name', read_only=True, default=None
    )

    class Meta:
        model = Employee
        fields = [
            'id', 'employee_id', 'full_name', 'email', 'role',
            'department', 'department_name', 'reporting_manager',
            'manager_name', 'shift_hours', 'is_active'
        ]


class EmployeeSummarySerializer(serializers.ModelSerializer):
    """Embedded in time entries and notifications"""
    full_name = serializers.CharField(source='get_full_name', read_only=True)

    class Meta:
        model = Employee
        fields = ['id', 'employee_id', 'full_name', 'email']
