import logging

from rest_framework import serializers
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from .models import User

logger = logging.getLogger(__name__)


class TimesheetTokenObtainPairSerializer(TokenObtainPairSerializer):
    """JWT login that also returns the employee identity the timesheet screens need."""

    def validate(self, attrs):
        logger.info("Login attempt for username=%s", attrs.get("username"))

        data = super().validate(attrs)
        user = self.user

        # Allow admins
        if not (user.is_staff or user.is_superuser):
            if not user.is_verified:
                logger.warning("Unverified email login blocked: %s", user.email)
                raise AuthenticationFailed("Email not verified. Please check your email.")

        employee = getattr(user, "employee_profile", None)
        data["user"] = {
            "id": user.id,
            "username": user.username,
            "email": user.email,
            "is_staff": user.is_staff,
            "employee_id": employee.id if employee else None,
            "employee_code": employee.employee_id if employee else None,
            "role": employee.role_name if employee else None,
        }
        return data


class UserProfileSerializer(serializers.ModelSerializer):
    employee_id = serializers.IntegerField(source="employee_profile.id", read_only=True, default=None)
    employee_code = serializers.CharField(source="employee_profile.employee_id", read_only=True, default=None)
    department = serializers.CharField(source="employee_profile.department.name", read_only=True, default=None)
    shift_hours = serializers.IntegerField(source="employee_profile.shift_hours", read_only=True, default=None)

    class Meta:
        model = User
        fields = [
            "id", "username", "email", "first_name", "last_name", "is_staff",
            "employee_id", "employee_code", "department", "shift_hours",
        ]
