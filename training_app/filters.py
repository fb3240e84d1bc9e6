import django_filters as filters
from django.db.models import Q

from training_app.models import Course, PlanCourseItem, PlanStatus, TrainingPlan


class TrainingPlanFilter(filters.FilterSet):
    status    = filters.ChoiceFilter(field_name="plan_status", choices=PlanStatus.choices)
    startDate = filters.DateFilter(field_name="plan_start_datetime", lookup_expr="date__gte")
    endDate   = filters.DateFilter(field_name="plan_end_datetime", lookup_expr="date__lte")
    keyword   = filters.CharFilter(field_name="plan_name", lookup_expr="icontains")

    class Meta:
        model = TrainingPlan
        fields = ["status", "startDate", "endDate", "keyword"]


class CourseFilter(filters.FilterSet):
    courseClass = filters.CharFilter(field_name="course_class", lookup_expr="exact")
    teacherId   = filters.NumberFilter(field_name="teacher_id", lookup_expr="exact")
    keyword     = filters.CharFilter(method="filter_keyword")

    class Meta:
        model = Course
        fields = ["courseClass", "teacherId", "keyword"]

    def filter_keyword(self, queryset, name, value):
        return queryset.filter(Q(course_name__icontains=value) | Q(course_desc__icontains=value))


class CourseItemFilter(filters.FilterSet):
    planId    = filters.NumberFilter(field_name="plan_id", lookup_expr="exact")
    courseId  = filters.NumberFilter(field_name="course_id", lookup_expr="exact")
    startDate = filters.DateFilter(field_name="class_date", lookup_expr="gte")
    endDate   = filters.DateFilter(field_name="class_date", lookup_expr="lte")

    class Meta:
        model = PlanCourseItem
        fields = ["planId", "courseId", "startDate", "endDate"]
