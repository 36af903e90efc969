# Data migration to seed initial roles
from django.db import migrations


def create_initial_roles(apps, schema_editor):
    """Create initial roles: Admin, HR, Manager, Employee"""
    Role = apps.get_model('employees', 'Role')

    roles_data = [
        {
            'name': 'Admin',
            'code': 'ADMIN',
            'description': 'System Administrator; final timesheet approval',
            'can_view_all_employees': True,
            'can_approve_timesheet': True,
        },
        {
            'name': 'HR',
            'code': 'HR',
            'description': 'Human Resources; receives deadline postponement notices',
            'can_view_all_employees': True,
            'can_approve_timesheet': True,
        },
        {
            'name': 'Manager',
            'code': 'MANAGER',
            'description': 'Manager; first-stage timesheet approval for reportees',
            'can_view_all_employees': False,
            'can_approve_timesheet': True,
        },
        {
            'name': 'Employee',
            'code': 'EMPLOYEE',
            'description': 'Regular employee with access to own timesheet only',
            'can_view_all_employees': False,
            'can_approve_timesheet': False,
        },
    ]

    for role_data in roles_data:
        Role.objects.get_or_create(
            code=role_data['code'],
            defaults=role_data
        )


def reverse_roles(apps, schema_editor):
    """Remove initial roles"""
    Role = apps.get_model('employees', 'Role')
    Role.objects.filter(code__in=['ADMIN', 'HR', 'MANAGER', 'EMPLOYEE']).delete()


class Migration(migrations.Migration):

    dependencies = [
        ('employees', '0001_initial'),
    ]

    operations = [
        migrations.RunPython(create_initial_roles, reverse_roles),
    ]
