from django.urls import path

from .views import EventStreamView, RecentEventsView

urlpatterns = [
    path('stream/', EventStreamView.as_view(), name='events-stream'),
    path('recent/', RecentEventsView.as_view(), name='events-recent'),
]
