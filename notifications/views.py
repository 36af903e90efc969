from django.conf import settings
from django.http import StreamingHttpResponse
from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .events import get_event_bus


class EventStreamView(APIView):
    """Server-Sent Events stream of {type, data} timesheet events."""
    permission_classes = [IsAuthenticated]

    @swagger_auto_schema(operation_description="Subscribe to real-time timesheet events (text/event-stream).")
    def get(self, request):
        bus = get_event_bus()
        subscriber = bus.subscribe()
        response = StreamingHttpResponse(
            bus.stream(subscriber, settings.EVENTS_HEARTBEAT_SECONDS),
            content_type='text/event-stream',
        )
        response['Cache-Control'] = 'no-cache'
        response['X-Accel-Buffering'] = 'no'
        return response


class RecentEventsView(APIView):
    permission_classes = [IsAuthenticated]

    @swagger_auto_schema(
        operation_description="Most recent events, oldest first.",
        manual_parameters=[openapi.Parameter('limit', openapi.IN_QUERY, type=openapi.TYPE_INTEGER)]
    )
    def get(self, request):
        try:
            limit = max(int(request.query_params.get('limit', 0)), 0) or None
        except ValueError:
            limit = None
        return Response([event.to_dict() for event in get_event_bus().recent(limit)])
