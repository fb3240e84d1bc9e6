import logging

from django.conf import settings
from django.utils import timezone
from rest_framework import exceptions
from rest_framework.authentication import BaseAuthentication

from accounts.models import AuthSession

logger = logging.getLogger(__name__)


class SessionTokenAuthentication(BaseAuthentication):
    """
    Opaque session tokens issued at login.

    Clients send the token in the ``Session-ID`` header or as
    ``Authorization: Session <token>``. Returns ``(user, auth_session)``.
    """
    keyword = "Session"

    def get_token(self, request):
        header = settings.SESSION_TOKEN_HEADER
        token = request.headers.get(header)
        if token:
            return token.strip()

        auth = request.headers.get("Authorization", "").split()
        if len(auth) == 2 and auth[0] == self.keyword:
            return auth[1]
        return None

    def authenticate(self, request):
        token = self.get_token(request)
        if not token:
            return None

        try:
            session = AuthSession.objects.select_related("person__account").get(session_id=token)
        except AuthSession.DoesNotExist:
            raise exceptions.AuthenticationFailed("Session is invalid or has expired.")

        if session.is_expired(timezone.now()):
            raise exceptions.AuthenticationFailed("Session has expired, please log in again.")

        user = getattr(session.person, "account", None)
        if user is None or not user.is_active:
            logger.warning(f"Session {session.session_id[:8]} has no active account")
            raise exceptions.AuthenticationFailed("Account is disabled.")
        return user, session

    def authenticate_header(self, request):
        return self.keyword
