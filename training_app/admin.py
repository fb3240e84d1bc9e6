from django.contrib import admin
from . import models as m


# ───────────────────────────────
#  Inline helpers
# ───────────────────────────────
class PlanEmployeeInline(admin.TabularInline):
    model = m.PlanEmployee
    extra = 0
    autocomplete_fields = ["person"]


class PlanCourseItemInline(admin.TabularInline):
    model = m.PlanCourseItem
    extra = 0
    autocomplete_fields = ["course"]


# ───────────────────────────────
#  TrainingPlan
# ───────────────────────────────
@admin.register(m.TrainingPlan)
class TrainingPlanAdmin(admin.ModelAdmin):
    list_display = ("plan_name", "plan_status", "plan_start_datetime", "plan_end_datetime", "creator")
    search_fields = ("plan_name",)
    list_filter = ("plan_status",)
    autocomplete_fields = ["creator"]
    inlines = [PlanCourseItemInline, PlanEmployeeInline]


# ───────────────────────────────
#  Course
# ───────────────────────────────
@admin.register(m.Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ("course_name", "course_class", "teacher")
    search_fields = ("course_name", "course_class", "teacher__name")
    list_filter = ("course_class",)
    autocomplete_fields = ["teacher"]


@admin.register(m.PlanCourseItem)
class PlanCourseItemAdmin(admin.ModelAdmin):
    list_display = ("course", "plan", "class_date", "class_begin_time", "class_end_time", "location")
    search_fields = ("course__course_name", "plan__plan_name", "location")
    list_filter = ("class_date",)
    date_hierarchy = "class_date"


# ───────────────────────────────
#  AttendanceEvaluation
# ───────────────────────────────
@admin.register(m.AttendanceEvaluation)
class AttendanceEvaluationAdmin(admin.ModelAdmin):
    list_display = ("person", "item", "self_score", "teacher_score", "score_ratio", "weighted_score")
    search_fields = ("person__name", "item__course__course_name")
    list_filter = ("item__course__course_class",)
    list_select_related = ("person", "item__course")
    readonly_fields = ("weighted_score",)
