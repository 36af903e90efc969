import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from timesheets.exceptions import TimesheetError

logger = logging.getLogger(__name__)


def api_exception_handler(exc, context):
    """
    Render every API error as {"error": ..., "details": ...}.

    Domain errors from timesheets.exceptions map to their own status code;
    DRF exceptions keep theirs.
    """
    if isinstance(exc, TimesheetError):
        if exc.status_code >= 500:
            logger.error(f"{exc.__class__.__name__} in {context.get('view').__class__.__name__}: {exc.message}")
        body = {"error": exc.message}
        if exc.details is not None:
            body["details"] = exc.details
        return Response(body, status=exc.status_code)

    response = exception_handler(exc, context)
    if response is None:
        return None

    data = response.data
    if isinstance(data, dict) and set(data.keys()) == {"detail"}:
        response.data = {"error": str(data["detail"])}
    elif response.status_code == status.HTTP_400_BAD_REQUEST:
        response.data = {"error": "Validation failed", "details": data}
    else:
        response.data = {"error": str(data), "details": data}
    return response
