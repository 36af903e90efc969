import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('employees', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='TimeEntry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('employee_code', models.CharField(help_text='Employee code at submission time', max_length=50)),
                ('employee_name', models.CharField(blank=True, max_length=150)),
                ('date', models.DateField(db_index=True, help_text='Work date')),
                ('project_name', models.CharField(max_length=255)),
                ('task_description', models.CharField(help_text='Title | sub task | free-text description', max_length=1000)),
                ('pms_task_id', models.CharField(blank=True, default='', max_length=64)),
                ('problem_and_issues', models.TextField(blank=True, default='')),
                ('quantify', models.TextField(blank=True, default='')),
                ('achievements', models.TextField(blank=True, default='')),
                ('scope_of_improvements', models.TextField(blank=True, default='')),
                ('tools_used', models.JSONField(blank=True, default=list)),
                ('start_time', models.CharField(blank=True, default='', help_text='HH:MM', max_length=8)),
                ('end_time', models.CharField(blank=True, default='', help_text='HH:MM', max_length=8)),
                ('total_hours', models.CharField(blank=True, default='', help_text='e.g. 1h 30m', max_length=20)),
                ('duration_minutes', models.PositiveIntegerField(default=0)),
                ('percentage_complete', models.PositiveSmallIntegerField(blank=True, null=True)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('manager_approved', 'Manager Approved'), ('approved', 'Approved'), ('rejected', 'Rejected')], db_index=True, default='pending', max_length=20)),
                ('manager_approved_at', models.DateTimeField(blank=True, null=True)),
                ('approved_at', models.DateTimeField(blank=True, null=True)),
                ('rejected_at', models.DateTimeField(blank=True, null=True)),
                ('rejection_reason', models.TextField(blank=True, default='')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('approved_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='employees.employee')),
                ('employee', models.ForeignKey(help_text='Employee who logged the task', on_delete=django.db.models.deletion.CASCADE, related_name='time_entries', to='employees.employee')),
                ('manager_approved_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='employees.employee')),
                ('rejected_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='employees.employee')),
            ],
            options={
                'verbose_name': 'Time Entry',
                'verbose_name_plural': 'Time Entries',
                'ordering': ['-date', '-created_at'],
                'indexes': [models.Index(fields=['employee', 'date'], name='time_entry_employee_date_idx')],
                'constraints': [models.UniqueConstraint(fields=('employee', 'date', 'project_name', 'task_description', 'start_time'), name='unique_time_entry_per_task_slot')],
            },
        ),
        migrations.CreateModel(
            name='TaskPostponement',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('task_id', models.CharField(db_index=True, max_length=64)),
                ('project_code', models.CharField(blank=True, default='', max_length=64)),
                ('previous_due_date', models.DateField(blank=True, null=True)),
                ('new_due_date', models.DateField()),
                ('reason', models.TextField()),
                ('postponed_at', models.DateTimeField(auto_now_add=True)),
                ('postpone_count', models.PositiveIntegerField(help_text='Number of postponements of this task so far, this one included')),
                ('postponed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='task_postponements', to='employees.employee')),
            ],
            options={
                'ordering': ['-postponed_at', '-id'],
                'constraints': [models.UniqueConstraint(fields=('task_id', 'postpone_count'), name='unique_postpone_count_per_task')],
            },
        ),
        migrations.CreateModel(
            name='TaskDeadlineAcknowledgement',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('task_id', models.CharField(db_index=True, max_length=64)),
                ('project_code', models.CharField(blank=True, default='', max_length=64)),
                ('acknowledged_at', models.DateTimeField(auto_now_add=True)),
                ('acknowledged_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='task_acknowledgements', to='employees.employee')),
            ],
            options={
                'ordering': ['-acknowledged_at', '-id'],
            },
        ),
        migrations.CreateModel(
            name='TimesheetSetting',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('block_unassigned_project_tasks', models.BooleanField(default=False, help_text='Unassigned tasks of visible projects also block submission on their due date')),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('updated_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='employees.employee')),
            ],
            options={
                'verbose_name': 'Timesheet Setting',
                'verbose_name_plural': 'Timesheet Settings',
            },
        ),
    ]
