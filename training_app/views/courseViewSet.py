from rest_framework.decorators import action

from training_app.filters import CourseFilter
from training_app.models import Course
from training_app.serializers.planner_serializers import CourseSerializer
from training_app.services import plan_admin, statistics
from training_app.utils import envelope
from training_app.views.base import PlannerModelViewSet


class CourseViewSet(PlannerModelViewSet):
    serializer_class = CourseSerializer
    filterset_class = CourseFilter

    def get_queryset(self):
        return Course.objects.select_related("teacher").order_by("course_id")

    def guarded_destroy(self, instance, *, force):
        return plan_admin.delete_course(instance, force=force)

    @action(detail=True, methods=["get"])
    def evaluations(self, request, pk=None):
        return envelope(statistics.planner_course_evaluations(self.get_object()))
