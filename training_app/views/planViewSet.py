import logging

from django.db import transaction
from django.db.models import Count
from django.shortcuts import get_object_or_404
from rest_framework.decorators import action

from accounts.models import Person
from training_app.filters import TrainingPlanFilter
from training_app.models import PlanEmployee, TrainingPlan
from training_app.serializers.planner_serializers import (
    AddPlanEmployeesSerializer,
    TrainingPlanDetailSerializer,
    TrainingPlanSerializer,
)
from training_app.services import plan_admin
from training_app.utils import envelope, parse_bool_param
from training_app.views.base import PlannerModelViewSet

logger = logging.getLogger(__name__)


class TrainingPlanViewSet(PlannerModelViewSet):
    filterset_class = TrainingPlanFilter

    def get_queryset(self):
        return (
            TrainingPlan.objects.select_related("creator")
            .annotate(
                employee_count=Count("plan_employees", distinct=True),
                course_count=Count("course_items", distinct=True),
            )
            .order_by("-plan_start_datetime", "-plan_id")
        )

    def get_serializer_class(self):
        if self.action == "retrieve":
            return TrainingPlanDetailSerializer
        return TrainingPlanSerializer

    def perform_create(self, serializer):
        plan = serializer.save(creator=self.request.user.person)
        logger.info(f"Plan {plan.pk} created by {plan.creator_id}")

    def guarded_destroy(self, instance, *, force):
        return plan_admin.delete_plan(instance, force=force)

    @action(detail=True, methods=["post"], url_path="employees")
    def add_employees(self, request, pk=None):
        plan = self.get_object()
        serializer = AddPlanEmployeesSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        ids = serializer.validated_data["employeeIds"]
        existing = set(plan.plan_employees.filter(person_id__in=ids).values_list("person_id", flat=True))
        new_ids = [pk for pk in ids if pk not in existing]
        with transaction.atomic():
            PlanEmployee.objects.bulk_create(
                [PlanEmployee(plan=plan, person_id=pk) for pk in new_ids],
                ignore_conflicts=True,
            )
        return envelope(
            {"planId": plan.plan_id, "addedCount": len(new_ids), "skippedCount": len(existing)},
            message="Employees added.",
        )

    @action(detail=True, methods=["delete"], url_path=r"employees/(?P<employee_id>\d+)")
    def remove_employee(self, request, pk=None, employee_id=None):
        plan = self.get_object()
        person = get_object_or_404(Person, pk=employee_id)
        get_object_or_404(PlanEmployee, plan=plan, person=person)
        counts = plan_admin.remove_plan_employee(
            plan, person, force=parse_bool_param(request.query_params, "force"),
        )
        return envelope(counts, message="Employee removed from plan.")
