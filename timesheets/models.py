from django.db import models

from employees.models import Employee
from .constants import STATUS_CHOICES, STATUS_PENDING


class TimeEntry(models.Model):
    """One logged task for one employee on one work day."""

    employee = models.ForeignKey(
        Employee,
        on_delete=models.CASCADE,
        related_name='time_entries',
        help_text="Employee who logged the task"
    )
    employee_code = models.CharField(max_length=50, help_text="Employee code at submission time")
    employee_name = models.CharField(max_length=150, blank=True)

    date = models.DateField(db_index=True, help_text="Work date")
    project_name = models.CharField(max_length=255)
    task_description = models.CharField(
        max_length=1000,
        help_text="Title | sub task | free-text description"
    )
    pms_task_id = models.CharField(max_length=64, blank=True, default='')

    problem_and_issues = models.TextField(blank=True, default='')
    quantify = models.TextField(blank=True, default='')
    achievements = models.TextField(blank=True, default='')
    scope_of_improvements = models.TextField(blank=True, default='')
    tools_used = models.JSONField(default=list, blank=True)

    start_time = models.CharField(max_length=8, blank=True, default='', help_text="HH:MM")
    end_time = models.CharField(max_length=8, blank=True, default='', help_text="HH:MM")
    total_hours = models.CharField(max_length=20, blank=True, default='', help_text="e.g. 1h 30m")
    duration_minutes = models.PositiveIntegerField(default=0)
    percentage_complete = models.PositiveSmallIntegerField(null=True, blank=True)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)

    manager_approved_by = models.ForeignKey(
        Employee, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )
    manager_approved_at = models.DateTimeField(null=True, blank=True)
    approved_by = models.ForeignKey(
        Employee, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    rejected_by = models.ForeignKey(
        Employee, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )
    rejected_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.TextField(blank=True, default='')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-date', '-created_at']
        verbose_name = 'Time Entry'
        verbose_name_plural = 'Time Entries'
        constraints = [
            models.UniqueConstraint(
                fields=['employee', 'date', 'project_name', 'task_description', 'start_time'],
                name='unique_time_entry_per_task_slot',
            ),
        ]
        indexes = [
            models.Index(fields=['employee', 'date'], name='time_entry_employee_date_idx'),
        ]

    def __str__(self):
        return f"{self.employee_code} - {self.date} - {self.project_name} ({self.status})"

    @property
    def is_pending(self):
        return self.status == STATUS_PENDING


class TaskPostponement(models.Model):
    """Append-only ledger of due-date extensions of PMS tasks."""

    task_id = models.CharField(max_length=64, db_index=True)
    project_code = models.CharField(max_length=64, blank=True, default='')
    previous_due_date = models.DateField(null=True, blank=True)
    new_due_date = models.DateField()
    reason = models.TextField()
    postponed_by = models.ForeignKey(
        Employee,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='task_postponements'
    )
    postponed_at = models.DateTimeField(auto_now_add=True)
    postpone_count = models.PositiveIntegerField(help_text="Number of postponements of this task so far, this one included")

    class Meta:
        ordering = ['-postponed_at', '-id']
        constraints = [
            models.UniqueConstraint(fields=['task_id', 'postpone_count'], name='unique_postpone_count_per_task'),
        ]

    def __str__(self):
        return f"Task {self.task_id} postponed to {self.new_due_date} (#{self.postpone_count})"


class TaskDeadlineAcknowledgement(models.Model):
    """Append-only log of decisions to keep a task's due date as is."""

    task_id = models.CharField(max_length=64, db_index=True)
    project_code = models.CharField(max_length=64, blank=True, default='')
    acknowledged_by = models.ForeignKey(
        Employee,
        on_delete=models.SET_NULL,
        null=True,
        related_name='task_acknowledgements'
    )
    acknowledged_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-acknowledged_at', '-id']

    def __str__(self):
        return f"Task {self.task_id} acknowledged by {self.acknowledged_by_id}"


class TimesheetSetting(models.Model):
    """Single-row store for process-wide timesheet policy."""

    SINGLETON_PK = 1

    block_unassigned_project_tasks = models.BooleanField(
        default=False,
        help_text="Unassigned tasks of visible projects also block submission on their due date"
    )
    updated_by = models.ForeignKey(
        Employee, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Timesheet Setting'
        verbose_name_plural = 'Timesheet Settings'

    def __str__(self):
        return f"Block unassigned project tasks: {self.block_unassigned_project_tasks}"

    def save(self, *args, **kwargs):
        self.pk = self.SINGLETON_PK
        super().save(*args, **kwargs)
