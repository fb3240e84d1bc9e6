from training_app.filters import CourseItemFilter
from training_app.models import PlanCourseItem
from training_app.pagination import CourseItemPagination
from training_app.serializers.planner_serializers import CourseItemSerializer
from training_app.services import plan_admin
from training_app.views.base import PlannerModelViewSet


class CourseItemViewSet(PlannerModelViewSet):
    serializer_class = CourseItemSerializer
    filterset_class = CourseItemFilter
    pagination_class = CourseItemPagination

    def get_queryset(self):
        return (
            PlanCourseItem.objects.select_related("plan", "course__teacher")
            .order_by("class_date", "class_begin_time", "item_id")
        )

    def guarded_destroy(self, instance, *, force):
        return plan_admin.delete_course_item(instance, force=force)
