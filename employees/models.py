from django.conf import settings
from django.db import models


class Role(models.Model):
    """Role model for employee access control"""
    name = models.CharField(
        max_length=50,
        unique=True,
        help_text="Role name (e.g., Admin, HR, Manager, Employee)"
    )
    code = models.CharField(
        max_length=20,
        unique=True,
        help_text="Role code sent to the PMS (e.g., ADMIN, HR, MANAGER, EMPLOYEE)"
    )
    description = models.TextField(blank=True, help_text="Role description")
    can_view_all_employees = models.BooleanField(
        default=False,
        help_text="Can view all employees and their timesheets"
    )
    can_approve_timesheet = models.BooleanField(
        default=False,
        help_text="Can approve timesheets"
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']
        verbose_name = 'Role'
        verbose_name_plural = 'Roles'

    def __str__(self):
        return self.name


class Employee(models.Model):
    """Employee identity used by the timesheet workflow"""

    SHIFT_HOURS_CHOICES = [(hours, f"{hours} hours") for hours in settings.TIMESHEET_SHIFT_HOURS_CHOICES]

    employee_id = models.CharField(
        max_length=50,
        unique=True,
        db_index=True,
        help_text="Employee code; matched against PMS task assignees and members"
    )
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='employee_profile',
        null=True,
        blank=True,
        help_text="Link to user account for login"
    )
    first_name = models.CharField(max_length=50)
    last_name = models.CharField(max_length=50, blank=True)
    email = models.EmailField(unique=True, db_index=True)
    role = models.ForeignKey(
        Role,
        on_delete=models.PROTECT,
        related_name='employees',
        null=True,
        blank=True,
        help_text="Employee role for access control"
    )
    department = models.ForeignKey(
        'departments.Department',
        on_delete=models.PROTECT,
        related_name='employees',
        null=True,
        blank=True,
    )
    reporting_manager = models.ForeignKey(
        'self',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='subordinates',
        help_text="Direct reporting manager"
    )
    shift_hours = models.PositiveSmallIntegerField(
        choices=SHIFT_HOURS_CHOICES,
        default=settings.TIMESHEET_DEFAULT_SHIFT_HOURS,
        help_text="Declared shift length; a day's timesheet needs at least this much logged time"
    )
    slack_user_id = models.CharField(max_length=50, blank=True, null=True, help_text="Slack ID for notifications")
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['employee_id']
        verbose_name = 'Employee'
        verbose_name_plural = 'Employees'

    def __str__(self):
        return f"{self.employee_id} - {self.get_full_name()}"

    def get_full_name(self):
        """Return full name of employee"""
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def full_name(self):
        return self.get_full_name()

    @property
    def role_name(self):
        """Lower-case role code as the PMS expects it ('employee' when unset)."""
        return self.role.code.lower() if self.role else 'employee'

    @property
    def department_name(self):
        return self.department.name if self.department else ''

    def has_role(self, role_name):
        """Check if employee has a specific role"""
        return self.role_name == role_name.lower()

    def is_admin(self):
        return self.has_role('admin') or bool(self.user and self.user.is_staff)

    def is_hr(self):
        return self.has_role('hr')

    def can_approve_timesheet(self):
        if self.is_admin():
            return True
        return bool(self.role and self.role.can_approve_timesheet)

    def can_manager_approve_for(self, other):
        """Reporting managers approve their reportees; approver roles approve anyone."""
        if other.reporting_manager_id == self.id:
            return True
        return self.can_approve_timesheet()
