# Time entry lifecycle
STATUS_PENDING = 'pending'
STATUS_MANAGER_APPROVED = 'manager_approved'
STATUS_APPROVED = 'approved'
STATUS_REJECTED = 'rejected'

STATUS_CHOICES = [
    (STATUS_PENDING, 'Pending'),
    (STATUS_MANAGER_APPROVED, 'Manager Approved'),
    (STATUS_APPROVED, 'Approved'),
    (STATUS_REJECTED, 'Rejected'),
]

TERMINAL_STATUSES = (STATUS_APPROVED, STATUS_REJECTED)

# Real-time broadcast event types
EVENT_TIME_ENTRY_CREATED = 'time_entry_created'
EVENT_TIME_ENTRY_UPDATED = 'time_entry_updated'
EVENT_TIME_ENTRY_DELETED = 'time_entry_deleted'
EVENT_TIMESHEET_SUBMITTED = 'timesheet_submitted'

# Notification events
NOTIFY_TIMESHEET_SUBMITTED = 'timesheet_submitted'
NOTIFY_MANAGER_APPROVED = 'time_entry_manager_approved'
NOTIFY_APPROVED = 'time_entry_approved'
NOTIFY_REJECTED = 'time_entry_rejected'
NOTIFY_TASK_POSTPONED = 'task_postponed'

SUBMIT_FAILED_MESSAGE = "Some tasks failed to submit. Please try again."
DESCRIPTION_SEPARATOR = ' | '
