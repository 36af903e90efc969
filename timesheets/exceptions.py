"""
Error taxonomy for the timesheet workflow.

Each error carries the HTTP status the API layer renders it with; see
config.exceptions.api_exception_handler.
"""


class TimesheetError(Exception):
    status_code = 500
    default_message = "Unexpected timesheet error"

    def __init__(self, message=None, details=None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class ValidationError(TimesheetError):
    status_code = 400
    default_message = "Validation failed"


class NotFoundError(TimesheetError):
    status_code = 404
    default_message = "Not found"


class StateError(TimesheetError):
    status_code = 400
    default_message = "Only pending entries can be modified"


class UpstreamError(TimesheetError):
    """A PMS or storage call failed."""
    status_code = 500
    default_message = "Upstream service failed"


class NotificationError(TimesheetError):
    """Delivery failure. Caught and logged by notifications.services.notify."""
    default_message = "Notification delivery failed"
