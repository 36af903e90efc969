from rest_framework.permissions import SAFE_METHODS, BasePermission


def is_timesheet_admin(user):
    """Staff users and employees with the admin role give final approval."""
    if user.is_staff or user.is_superuser:
        return True
    employee = getattr(user, "employee_profile", None)
    return bool(employee and employee.is_admin())


def can_manager_approve(user, entry):
    """Reporting manager of the entry's owner, or a role allowed to approve timesheets."""
    if user.is_staff or user.is_superuser:
        return True
    employee = getattr(user, "employee_profile", None)
    if employee is None or employee.pk == entry.employee_id:
        return False
    return employee.can_manager_approve_for(entry.employee)


def can_view_all_entries(user):
    if user.is_staff or user.is_superuser:
        return True
    employee = getattr(user, "employee_profile", None)
    return bool(employee and employee.role and employee.role.can_view_all_employees)


class TimeEntryObjectPermission(BasePermission):
    """
    Time entry permissions:

    Employee  → own entries (edit/delete while pending)
    Manager   → reportees (read-only here; approvals are separate actions)
    HR/Admin  → full access
    """

    def has_object_permission(self, request, view, obj):
        user = request.user

        if user.is_staff or user.is_superuser:
            return True

        if not hasattr(user, "employee_profile"):
            return False

        employee = user.employee_profile

        if obj.employee_id == employee.id:
            return True

        if getattr(view, 'action', None) in ('manager_approve', 'approve', 'reject'):
            return True

        if request.method in SAFE_METHODS:
            return can_view_all_entries(user) or obj.employee.reporting_manager_id == employee.id

        return False


class IsTimesheetAdminOrReadOnly(BasePermission):

    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return True
        return is_timesheet_admin(request.user)
