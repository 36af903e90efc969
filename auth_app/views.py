"""
Authentication APIs: JWT login/refresh and the current user's profile.
"""
from drf_yasg.utils import swagger_auto_schema
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.views import TokenObtainPairView

from .serializers import TimesheetTokenObtainPairSerializer, UserProfileSerializer


class LoginAPI(TokenObtainPairView):
    permission_classes = [AllowAny]
    serializer_class = TimesheetTokenObtainPairSerializer


class UserProfileView(APIView):
    permission_classes = [IsAuthenticated]

    @swagger_auto_schema(
        operation_description="Get the profile of the currently logged-in user.",
        responses={200: UserProfileSerializer()}
    )
    def get(self, request):
        serializer = UserProfileSerializer(request.user, context={"request": request})
        return Response(serializer.data)
