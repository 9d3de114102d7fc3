from rest_framework import generics
from rest_framework.permissions import AllowAny, IsAuthenticated
from .serializers import UserDetailsSerializer, UserRegistrationSerializer


class RegisterAPIView(generics.CreateAPIView):
    serializer_class=UserRegistrationSerializer
    permission_classes=[AllowAny]

register_api_view=RegisterAPIView.as_view()


class UserDetailAPIView(generics.RetrieveAPIView):
    """Returns the authenticated actor ({id, email})."""
    serializer_class=UserDetailsSerializer
    permission_classes=[IsAuthenticated]

    def get_object(self):
        return self.request.user

user_detail_view=UserDetailAPIView.as_view()
