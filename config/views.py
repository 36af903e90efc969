# config/views.py
from django.db import DatabaseError, connection
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from notifications.events import get_event_bus


@api_view(["GET"])
@permission_classes([AllowAny])
def health_view(request):
    """Liveness probe: database reachable and event stream subscribers."""
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
        database = "ok"
    except DatabaseError:
        database = "unavailable"

    body = {
        "service": "timesheet-api",
        "database": database,
        "eventSubscribers": get_event_bus().subscriber_count,
    }
    code = status.HTTP_200_OK if database == "ok" else status.HTTP_503_SERVICE_UNAVAILABLE
    return Response(body, status=code)
