import logging

from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated

from accounts.models import AuthSession
from accounts.serializers.auth_serializers import LoginSerializer, RegisterSerializer, SessionUserSerializer
from training_app.services.statistics import personal_statistics
from training_app.utils import envelope

logger = logging.getLogger(__name__)


class AuthViewSet(viewsets.ViewSet):
    permission_classes = [IsAuthenticated]

    @action(detail=False, methods=["post"], permission_classes=[AllowAny], authentication_classes=[])
    def login(self, request):
        serializer = LoginSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        user = serializer.validated_data["user"]

        session = AuthSession.open_for(user.person)
        logger.info(f"Person {user.person_id} logged in")
        return envelope(
            {"token": session.session_id, "user": SessionUserSerializer(user).data},
            message="Login successful.",
        )

    @action(detail=False, methods=["post"], permission_classes=[AllowAny], authentication_classes=[])
    def register(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info(f"Registered {user.username} as {user.person.role}")
        return envelope(serializer.data, message="Registration successful.")

    @action(detail=False, methods=["post"])
    def logout(self, request):
        request.auth.delete()
        return envelope(message="Logged out.")

    @action(detail=False, methods=["get"], url_path="current-user")
    def current_user(self, request):
        user = request.user
        person = user.person
        return envelope({
            "personId": person.person_id,
            "name": person.name,
            "role": person.role,
            "roleDisplay": person.get_role_display(),
            "accountId": user.account_id,
            "username": user.username,
            "statistics": personal_statistics(person),
        })
