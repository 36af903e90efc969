from django.contrib import admin

from .models import TaskDeadlineAcknowledgement, TaskPostponement, TimeEntry, TimesheetSetting


@admin.register(TimeEntry)
class TimeEntryAdmin(admin.ModelAdmin):
    list_display = ('employee_code', 'employee_name', 'date', 'project_name', 'total_hours', 'status')
    list_filter = ('status', 'date', 'project_name')
    search_fields = ('employee_code', 'employee_name', 'project_name', 'task_description')
    readonly_fields = (
        'manager_approved_by', 'manager_approved_at', 'approved_by', 'approved_at',
        'rejected_by', 'rejected_at', 'created_at', 'updated_at',
    )
    date_hierarchy = 'date'


@admin.register(TaskPostponement)
class TaskPostponementAdmin(admin.ModelAdmin):
    list_display = ('task_id', 'project_code', 'previous_due_date', 'new_due_date', 'postpone_count', 'postponed_by', 'postponed_at')
    search_fields = ('task_id', 'project_code', 'reason')

    # Ledger rows are append-only
    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(TaskDeadlineAcknowledgement)
class TaskDeadlineAcknowledgementAdmin(admin.ModelAdmin):
    list_display = ('task_id', 'project_code', 'acknowledged_by', 'acknowledged_at')
    search_fields = ('task_id', 'project_code')

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(TimesheetSetting)
class TimesheetSettingAdmin(admin.ModelAdmin):
    list_display = ('block_unassigned_project_tasks', 'updated_by', 'updated_at')

    def has_add_permission(self, request):
        return not TimesheetSetting.objects.exists()
