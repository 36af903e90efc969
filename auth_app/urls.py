from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from .views import LoginAPI, UserProfileView

urlpatterns = [
    path('login/', LoginAPI.as_view(), name='login'),
    path("refresh-token/", TokenRefreshView.as_view(), name="token_refresh"),
    path("me/", UserProfileView.as_view(), name="user-profile"),
]
