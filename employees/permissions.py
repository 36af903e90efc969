from rest_framework.permissions import BasePermission


class EmployeeObjectPermission(BasePermission):
    """
    Read access based on the Role system:
    - Admin/HR → every employee (can_view_all_employees)
    - Manager → direct reportees
    - Employee → self only
    """
    def has_permission(self, request, view):
        if not request.user.is_authenticated:
            return False

        if request.user.is_superuser or request.user.is_staff:
            return True

        return hasattr(request.user, 'employee_profile')

    def has_object_permission(self, request, view, obj):
        user = request.user

        if user.is_superuser or user.is_staff:
            return True

        if not hasattr(user, "employee_profile"):
            return False

        employee = user.employee_profile

        if obj.id == employee.id:
            return True

        if employee.role and employee.role.can_view_all_employees:
            return True

        return obj.reporting_manager_id == employee.id
