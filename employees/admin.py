from django import forms
from django.contrib import admin
from django.core.exceptions import ValidationError

from auth_app.models import User
from .models import Employee, Role


class EmployeeAdminForm(forms.ModelForm):
    """Custom form to validate user selection"""

    class Meta:
        model = Employee
        fields = '__all__'

    def clean_user(self):
        """Ensure only verified users can be linked to employees"""
        user = self.cleaned_data.get('user')
        if user:
            if not user.is_verified and not user.is_staff:
                raise ValidationError(
                    "Only verified users can be linked to employees. "
                    "Please verify the user first before creating an employee record."
                )
            if hasattr(user, 'employee_profile') and self.instance.pk != user.employee_profile.pk:
                raise ValidationError(
                    f"This user ({user.username}) is already linked to another employee."
                )
        return user


@admin.register(Employee)
class EmployeeAdmin(admin.ModelAdmin):
    form = EmployeeAdminForm
    list_display = (
        'employee_id', 'get_full_name', 'email', 'role', 'department',
        'reporting_manager', 'shift_hours', 'is_active'
    )
    list_filter = ('role', 'department', 'shift_hours', 'is_active')
    search_fields = ('employee_id', 'first_name', 'last_name', 'email', 'slack_user_id')
    readonly_fields = ('created_at', 'updated_at')

    fieldsets = (
        ('Core Information', {
            'fields': ('employee_id', 'user', 'first_name', 'last_name', 'email')
        }),
        ('Work', {
            'fields': ('role', 'department', 'reporting_manager', 'shift_hours')
        }),
        ('Notifications', {
            'fields': ('slack_user_id',)
        }),
        ('System Information', {
            'fields': ('is_active', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def formfield_for_foreignkey(self, db_field, request, **kwargs):
        """Only offer active users that are not linked to an employee yet"""
        if db_field.name == "user":
            kwargs["queryset"] = User.objects.filter(is_active=True).exclude(
                employee_profile__isnull=False
            )
        return super().formfield_for_foreignkey(db_field, request, **kwargs)

    def get_full_name(self, obj):
        return obj.get_full_name()
    get_full_name.short_description = 'Full Name'

    def save_model(self, request, obj, form, change):
        """Auto-populate names and email from the linked user"""
        if not change and obj.user:
            if not obj.first_name and obj.user.first_name:
                obj.first_name = obj.user.first_name
            if not obj.last_name and obj.user.last_name:
                obj.last_name = obj.user.last_name
            if not obj.email and obj.user.email:
                obj.email = obj.user.email
        super().save_model(request, obj, form, change)


@admin.register(Role)
class RoleAdmin(admin.ModelAdmin):
    list_display = ('name', 'code', 'can_approve_timesheet', 'is_active', 'created_at')
    list_filter = ('is_active', 'can_approve_timesheet')
    search_fields = ('name', 'code', 'description')
    readonly_fields = ('created_at', 'updated_at')

    fieldsets = (
        ('Basic Information', {
            'fields': ('name', 'code', 'description', 'is_active')
        }),
        ('Permissions', {
            'fields': ('can_view_all_employees', 'can_approve_timesheet')
        }),
        ('System Information', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )
