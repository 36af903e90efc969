from timesheets.exceptions import NotFoundError, ValidationError

from .models import Employee


def resolve_employee(identifier):
    """
    Look an employee up by primary key or employee code.

    Raises ValidationError when no identifier is given and NotFoundError when
    nothing matches.
    """
    if identifier in (None, ''):
        raise ValidationError("employeeId is required")

    queryset = Employee.objects.select_related('role', 'department', 'user')
    identifier = str(identifier).strip()

    employee = None
    if identifier.isdigit():
        employee = queryset.filter(pk=int(identifier)).first()
    if employee is None:
        employee = queryset.filter(employee_id=identifier).first()
    if employee is None:
        raise NotFoundError("Employee not found", details={"employeeId": identifier})
    return employee


def request_employee(request):
    """Employee profile of the authenticated user, or None."""
    user = getattr(request, 'user', None)
    if user is None or not user.is_authenticated:
        return None
    return getattr(user, 'employee_profile', None)
