from django.shortcuts import get_object_or_404
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError

from training_app.models import Course
from training_app.permissions import IsTeacher, TeachesCourse
from training_app.serializers.evaluation_serializers import GradingSerializer
from training_app.services import evaluation_store, statistics
from training_app.utils import envelope, parse_date_param, parse_int_param
from training_app.views.schedule import schedule_range

PENDING_STATUSES = ("pending", "all")


class TeacherViewSet(viewsets.ViewSet):
    permission_classes = [IsTeacher]

    @property
    def teacher(self):
        return self.request.user.person

    @action(detail=False, methods=["get"])
    def schedule(self, request):
        start, end = schedule_range(request.query_params)
        return envelope(statistics.teacher_schedule(self.teacher, start, end))

    @action(detail=False, methods=["get"], url_path="pending-evaluations")
    def pending_evaluations(self, request):
        params = request.query_params
        status = params.get("status") or "pending"
        if status not in PENDING_STATUSES:
            raise ValidationError({"status": [f"Use one of {', '.join(PENDING_STATUSES)}."]})
        course_id = parse_int_param(params, "courseId")
        return envelope(statistics.teacher_pending_evaluations(self.teacher, course_id=course_id, status=status))

    @action(detail=False, methods=["post"], url_path="submit-grading")
    def submit_grading(self, request):
        serializer = GradingSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        evaluation, result = evaluation_store.submit_grading(
            self.teacher,
            data["itemId"],
            data["personId"],
            teacher_score=data.get("teacherScore"),
            teacher_comment=data.get("teacherComment", ""),
            score_ratio=data["scoreRatio"],
        )
        return envelope({
            "itemId": evaluation.item_id,
            "personId": evaluation.person_id,
            "personName": evaluation.person.name,
            "selfScore": evaluation.self_score,
            "teacherScore": evaluation.teacher_score,
            "teacherComment": evaluation.teacher_comment,
            "scoreRatio": evaluation.score_ratio,
            "weightedScore": evaluation.weighted_score,
            "scoreSource": result.source,
        }, message="Grading saved.")

    @action(detail=False, methods=["get"], url_path="course-statistics", permission_classes=[IsTeacher, TeachesCourse])
    def course_statistics(self, request):
        course_id = parse_int_param(request.query_params, "courseId")
        if course_id is None:
            raise ValidationError({"courseId": ["This parameter is required."]})
        course = get_object_or_404(Course, pk=course_id)
        self.check_object_permissions(request, course)
        return envelope(statistics.teacher_course_statistics(course))

    @action(detail=False, methods=["get"], url_path="teaching-statistics")
    def teaching_statistics(self, request):
        params = request.query_params
        start = parse_date_param(params, "startDate")
        end = parse_date_param(params, "endDate")
        if start and end and start > end:
            raise ValidationError({"endDate": ["Must not be before startDate."]})
        return envelope(statistics.teacher_teaching_statistics(self.teacher, start_date=start, end_date=end))
