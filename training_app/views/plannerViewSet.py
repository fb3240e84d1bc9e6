from django.shortcuts import get_object_or_404
from rest_framework import viewsets
from rest_framework.decorators import action

from accounts.models import Person, Role
from training_app.permissions import IsPlanner
from training_app.serializers.planner_serializers import PersonBriefSerializer
from training_app.services import statistics
from training_app.utils import envelope, parse_int_param


class PlannerViewSet(viewsets.ViewSet):
    """Planner lookups, analytics and per-employee drill-down."""
    permission_classes = [IsPlanner]

    def _people(self, role):
        people = Person.objects.filter(role=role).order_by("person_id")
        keyword = self.request.query_params.get("keyword")
        if keyword:
            people = people.filter(name__icontains=keyword)
        data = PersonBriefSerializer(people, many=True).data
        return envelope({"total": len(data), "list": data})

    @action(detail=False, methods=["get"])
    def teachers(self, request):
        return self._people(Role.TEACHER)

    @action(detail=False, methods=["get"])
    def employees(self, request):
        return self._people(Role.EMPLOYEE)

    @action(detail=False, methods=["get"], url_path=r"employees/(?P<employee_id>\d+)/scores")
    def employee_scores(self, request, employee_id=None):
        employee = get_object_or_404(Person, pk=employee_id, role=Role.EMPLOYEE)
        return envelope(statistics.planner_employee_scores(employee))

    @action(detail=False, methods=["get"])
    def analytics(self, request):
        top_n = parse_int_param(request.query_params, "topN", 10, minimum=1, maximum=100)
        return envelope(statistics.planner_analytics(top_n=top_n))
