import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('departments', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Role',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(help_text='Role name (e.g., Admin, HR, Manager, Employee)', max_length=50, unique=True)),
                ('code', models.CharField(help_text='Role code sent to the PMS (e.g., ADMIN, HR, MANAGER, EMPLOYEE)', max_length=20, unique=True)),
                ('description', models.TextField(blank=True, help_text='Role description')),
                ('can_view_all_employees', models.BooleanField(default=False, help_text='Can view all employees and their timesheets')),
                ('can_approve_timesheet', models.BooleanField(default=False, help_text='Can approve timesheets')),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Role',
                'verbose_name_plural': 'Roles',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Employee',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('employee_id', models.CharField(db_index=True, help_text='Employee code; matched against PMS task assignees and members', max_length=50, unique=True)),
                ('first_name', models.CharField(max_length=50)),
                ('last_name', models.CharField(blank=True, max_length=50)),
                ('email', models.EmailField(db_index=True, max_length=254, unique=True)),
                ('shift_hours', models.PositiveSmallIntegerField(choices=[(4, '4 hours'), (8, '8 hours'), (12, '12 hours')], default=8, help_text="Declared shift length; a day's timesheet needs at least this much logged time")),
                ('slack_user_id', models.CharField(blank=True, help_text='Slack ID for notifications', max_length=50, null=True)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('department', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='employees', to='departments.department')),
                ('reporting_manager', models.ForeignKey(blank=True, help_text='Direct reporting manager', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='subordinates', to='employees.employee')),
                ('role', models.ForeignKey(blank=True, help_text='Employee role for access control', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='employees', to='employees.role')),
                ('user', models.OneToOneField(blank=True, help_text='Link to user account for login', null=True, on_delete=django.db.models.deletion.CASCADE, related_name='employee_profile', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Employee',
                'verbose_name_plural': 'Employees',
                'ordering': ['employee_id'],
            },
        ),
    ]
