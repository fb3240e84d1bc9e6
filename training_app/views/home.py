from django.http import JsonResponse
from rest_framework import exceptions, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny

from training_app.services import statistics
from training_app.utils import envelope


def health(request):
    return JsonResponse({"status": "ok"})


class HomeViewSet(viewsets.ViewSet):
    """Landing-page numbers; personal figures are added for a logged-in caller."""
    permission_classes = [AllowAny]

    def perform_authentication(self, request):
        # a stale token must not hide the public numbers
        pass

    @action(detail=False, methods=["get"], url_path="statistics")
    def home_statistics(self, request):
        data = statistics.platform_statistics()
        try:
            user = request.user
        except exceptions.AuthenticationFailed:
            user = None
        if user and user.is_authenticated and user.person_id:
            data["personal"] = statistics.personal_statistics(user.person)
        return envelope(data)
