from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import (
    PendingDeadlineTasksView,
    TaskAcknowledgeView,
    TaskPostponeView,
    TaskPostponementListView,
    TimeEntryViewSet,
    TimesheetBlockingSettingView,
)

router = DefaultRouter()
router.register(r'time-entries', TimeEntryViewSet, basename='time-entry')

urlpatterns = [
    path('pending-deadline-tasks/', PendingDeadlineTasksView.as_view(), name='pending-deadline-tasks'),
    path('tasks/<str:task_id>/postpone/', TaskPostponeView.as_view(), name='task-postpone'),
    path('tasks/<str:task_id>/acknowledge/', TaskAcknowledgeView.as_view(), name='task-acknowledge'),
    path('tasks/<str:task_id>/postponements/', TaskPostponementListView.as_view(), name='task-postponements'),
    path('settings/timesheet-blocking/', TimesheetBlockingSettingView.as_view(), name='timesheet-blocking'),
    path('', include(router.urls)),
]
