from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError

from training_app.permissions import IsEmployee
from training_app.serializers.evaluation_serializers import SelfEvaluationSerializer
from training_app.services import evaluation_store, statistics
from training_app.utils import envelope, fmt_datetime, parse_date_param, parse_int_param
from training_app.views.schedule import schedule_range

PENDING_STATUSES = ("pending", "all")


class EmployeeViewSet(viewsets.ViewSet):
    permission_classes = [IsEmployee]

    @property
    def employee(self):
        return self.request.user.person

    @action(detail=False, methods=["get"])
    def schedule(self, request):
        start, end = schedule_range(request.query_params)
        return envelope(statistics.employee_schedule(self.employee, start, end))

    @action(detail=False, methods=["get"], url_path="pending-evaluations")
    def pending_evaluations(self, request):
        params = request.query_params
        status = params.get("status") or "pending"
        if status not in PENDING_STATUSES:
            raise ValidationError({"status": [f"Use one of {', '.join(PENDING_STATUSES)}."]})
        limit = parse_int_param(params, "limit", minimum=1, maximum=100)
        return envelope(statistics.employee_pending_evaluations(self.employee, status=status, limit=limit))

    @action(detail=False, methods=["post"], url_path="submit-evaluation")
    def submit_evaluation(self, request):
        serializer = SelfEvaluationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        evaluation, result, created = evaluation_store.submit_self_evaluation(
            self.employee,
            data["itemId"],
            comment=data["selfComment"],
            understanding=data["understanding"],
            difficulty=data["difficulty"],
            satisfaction=data["satisfaction"],
        )
        course = evaluation.item.course
        return envelope({
            "itemId": evaluation.item_id,
            "courseId": course.course_id,
            "courseName": course.course_name,
            "selfScore": evaluation.self_score,
            "aiScore": result.score,
            "scoreSource": result.source,
            "selfComment": evaluation.self_comment,
            "teacherScore": evaluation.teacher_score,
            "weightedScore": evaluation.weighted_score,
            "evaluatedAt": fmt_datetime(evaluation.self_evaluated_at),
            "created": created,
        }, message="Evaluation submitted.")

    @action(detail=False, methods=["get"])
    def scores(self, request):
        params = request.query_params
        return envelope(statistics.employee_scores(
            self.employee,
            plan_id=parse_int_param(params, "planId"),
            course_class=params.get("courseClass") or None,
            start_date=parse_date_param(params, "startDate"),
            end_date=parse_date_param(params, "endDate"),
        ))

    @action(detail=False, methods=["get"], url_path="course-type-scores")
    def course_type_scores(self, request):
        return envelope(statistics.employee_course_type_scores(self.employee))

    @action(detail=False, methods=["get"], url_path="learning-progress")
    def learning_progress(self, request):
        return envelope(statistics.employee_learning_progress(self.employee))
