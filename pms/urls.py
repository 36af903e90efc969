from django.urls import path

from .views import AvailableTasksView, ProjectListView, SubtaskListView, TaskListView

urlpatterns = [
    path('projects/', ProjectListView.as_view(), name='pms-projects'),
    path('tasks/', TaskListView.as_view(), name='pms-tasks'),
    path('subtasks/', SubtaskListView.as_view(), name='pms-subtasks'),
    path('available-tasks/', AvailableTasksView.as_view(), name='pms-available-tasks'),
]
