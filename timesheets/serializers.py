from rest_framework import serializers

from employees.serializers import EmployeeSummarySerializer
from .models import TaskDeadlineAcknowledgement, TaskPostponement, TimeEntry
from .services.durations import format_duration

TIME_ENTRY_CONTENT_FIELDS = [
    'date', 'project_name', 'task_description', 'pms_task_id',
    'problem_and_issues', 'quantify', 'achievements', 'scope_of_improvements',
    'tools_used', 'start_time', 'end_time', 'duration_minutes', 'percentage_complete',
]


class TimeEntrySerializer(serializers.ModelSerializer):
    """Read serializer for time entries"""
    employee_detail = EmployeeSummarySerializer(source='employee', read_only=True)

    class Meta:
        model = TimeEntry
        fields = [
            'id', 'employee', 'employee_detail', 'employee_code', 'employee_name',
            *TIME_ENTRY_CONTENT_FIELDS,
            'total_hours', 'status',
            'manager_approved_by', 'manager_approved_at',
            'approved_by', 'approved_at',
            'rejected_by', 'rejected_at', 'rejection_reason',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields


class TimeEntryCreateSerializer(serializers.ModelSerializer):
    """Create one pending entry; status and approval fields are not writable"""

    class Meta:
        model = TimeEntry
        fields = ['employee', *TIME_ENTRY_CONTENT_FIELDS]
        extra_kwargs = {'employee': {'required': False}}
        # Duplicates are caught by the database constraint on save
        validators = []

    def validate_percentage_complete(self, value):
        if value is not None and value > 100:
            raise serializers.ValidationError("Must be between 0 and 100.")
        return value

    def create(self, validated_data):
        employee = validated_data['employee']
        validated_data.setdefault('employee_code', employee.employee_id)
        validated_data.setdefault('employee_name', employee.get_full_name())
        validated_data['total_hours'] = format_duration(validated_data.get('duration_minutes') or 0)
        return super().create(validated_data)


class TimeEntryUpdateSerializer(serializers.ModelSerializer):
    """Fields the owner may change while the entry is pending"""

    class Meta:
        model = TimeEntry
        fields = TIME_ENTRY_CONTENT_FIELDS

    def validate_percentage_complete(self, value):
        if value is not None and value > 100:
            raise serializers.ValidationError("Must be between 0 and 100.")
        return value


class DraftSerializer(serializers.Serializer):
    """One locally accumulated task in a daily submission"""
    project = serializers.CharField(max_length=255)
    title = serializers.CharField(max_length=500)
    subTask = serializers.CharField(source='sub_task', required=False, allow_blank=True, default='')
    description = serializers.CharField(required=False, allow_blank=True, default='')
    pmsTaskId = serializers.CharField(source='pms_task_id', required=False, allow_blank=True, default='')
    problemAndIssues = serializers.CharField(source='problem_and_issues', required=False, allow_blank=True, default='')
    quantify = serializers.CharField(required=False, allow_blank=True, default='')
    achievements = serializers.CharField(required=False, allow_blank=True, default='')
    scopeOfImprovements = serializers.CharField(
        source='scope_of_improvements', required=False, allow_blank=True, default=''
    )
    toolsUsed = serializers.ListField(
        source='tools_used', child=serializers.CharField(), required=False, default=list
    )
    startTime = serializers.RegexField(
        r'^\d{1,2}:\d{2}$', source='start_time', required=False, allow_blank=True, default=''
    )
    endTime = serializers.RegexField(
        r'^\d{1,2}:\d{2}$', source='end_time', required=False, allow_blank=True, default=''
    )
    durationMinutes = serializers.IntegerField(source='duration_minutes', min_value=0, required=False, default=None)
    percentageComplete = serializers.IntegerField(
        source='percentage_complete', min_value=0, max_value=100, required=False, allow_null=True, default=None
    )


class SubmitDailySerializer(serializers.Serializer):
    employeeId = serializers.CharField(required=False)
    date = serializers.DateField(required=False)
    shiftHours = serializers.IntegerField(required=False)
    tasks = DraftSerializer(many=True, allow_empty=True)


class TaskPostponementSerializer(serializers.ModelSerializer):
    postponed_by_detail = EmployeeSummarySerializer(source='postponed_by', read_only=True)

    class Meta:
        model = TaskPostponement
        fields = [
            'id', 'task_id', 'project_code', 'previous_due_date', 'new_due_date',
            'reason', 'postponed_by', 'postponed_by_detail', 'postponed_at', 'postpone_count',
        ]
        read_only_fields = fields


class TaskDeadlineAcknowledgementSerializer(serializers.ModelSerializer):

    class Meta:
        model = TaskDeadlineAcknowledgement
        fields = ['id', 'task_id', 'project_code', 'acknowledged_by', 'acknowledged_at']
        read_only_fields = fields


def entry_event_payload(entry):
    return TimeEntrySerializer(entry).data
