"""
URL configuration for the timesheet service.
"""
from django.contrib import admin
from django.urls import include, path
from drf_yasg import openapi
from drf_yasg.views import get_schema_view
from rest_framework import permissions

from config.views import health_view

schema_view = get_schema_view(
    openapi.Info(
        title="Timesheet API",
        default_version='v1',
        description="Daily timesheets gated on PMS task deadlines, with two-stage approval",
    ),
    public=True,
    permission_classes=(permissions.AllowAny,),
)

urlpatterns = [
    path('admin/', admin.site.urls),
    path('health/', health_view, name='health'),
    path("auth/", include("auth_app.urls")),
    path("api/employees/", include("employees.urls")),
    path("api/events/", include("notifications.urls")),
    path("api/", include("pms.urls")),
    path("api/", include("timesheets.urls")),
    path('swagger<format>/', schema_view.without_ui(cache_timeout=0), name='schema-json'),
    path('swagger/', schema_view.with_ui('swagger', cache_timeout=0), name='schema-swagger-ui'),
    path('redoc/', schema_view.with_ui('redoc', cache_timeout=0), name='schema-redoc'),
]
