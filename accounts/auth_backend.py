from django.contrib.auth import get_user_model
from django.contrib.auth.backends import ModelBackend

User = get_user_model()


class LoginNameAuthBackend(ModelBackend):
    """
    Authenticate with login name + password.
    Accounts without a bound person can only reach the admin site,
    never the API.
    """
    def authenticate(self, request, username=None, password=None, **kwargs):
        if not (username and password):
            return None

        try:
            user = User.objects.select_related("person").get(username=username)
        except User.DoesNotExist:
            # run the hasher anyway so missing accounts cost the same time
            User().set_password(password)
            return None

        if user.check_password(password) and self.user_can_authenticate(user):
            return user
        return None

    def get_user(self, user_id):
        try:
            return User.objects.select_related("person").get(pk=user_id)
        except User.DoesNotExist:
            return None
