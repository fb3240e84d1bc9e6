import logging

from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied

from training_app.exceptions import BusinessRuleViolation
from training_app.models import AttendanceEvaluation, PlanCourseItem, PlanEmployee
from training_app.services import scoring_oracle
from training_app.services.scoring_oracle import ScoreResult

logger = logging.getLogger(__name__)

TEACHER_FIELDS = ("teacher_score", "teacher_comment", "score_ratio", "graded_at")


def _get_item(item_id) -> PlanCourseItem:
    try:
        return PlanCourseItem.objects.select_related("course__teacher", "plan").get(pk=item_id)
    except PlanCourseItem.DoesNotExist:
        raise NotFound("Course session not found.")


def submit_self_evaluation(
    person,
    item_id,
    *,
    comment: str,
    understanding: int = 3,
    difficulty: int = 3,
    satisfaction: int = 3,
    now=None,
    oracle=None,
) -> tuple[AttendanceEvaluation, ScoreResult, bool]:
    """
    Record (or replace) an employee's self-evaluation of an ended session.

    Only self fields are written; an existing teacher grade is kept.
    Returns ``(evaluation, score_result, created)``.
    """
    now = now or timezone.now()
    item = _get_item(item_id)

    if not PlanEmployee.objects.filter(plan_id=item.plan_id, person=person).exists():
        raise PermissionDenied("You are not enrolled in the plan of this session.")
    if not item.has_ended(now):
        raise BusinessRuleViolation("The session has not ended yet.")

    # the oracle call happens outside the transaction
    result = scoring_oracle.score_self_evaluation(
        comment, understanding, difficulty, satisfaction, item.course.course_name,
        oracle=oracle,
    )

    with transaction.atomic():
        evaluation, created = AttendanceEvaluation.objects.update_or_create(
            person=person,
            item=item,
            defaults={
                "self_score": result.score,
                "self_comment": comment,
                "understanding": understanding,
                "difficulty": difficulty,
                "satisfaction": satisfaction,
                "self_evaluated_at": now,
            },
        )
    logger.info(
        f"Self-evaluation {'created' if created else 'updated'} for person {person.pk} "
        f"item {item.pk}: {result.score} ({result.source})"
    )
    return evaluation, result, created


def submit_grading(
    teacher,
    item_id,
    person_id,
    *,
    score_ratio: float,
    teacher_score: float | None = None,
    teacher_comment: str = "",
    now=None,
    oracle=None,
) -> tuple[AttendanceEvaluation, ScoreResult]:
    """
    Grade a student's self-evaluated session.

    Without an explicit ``teacher_score`` the comment is scored by the
    oracle (default score on failure). Only teacher fields are written.
    """
    now = now or timezone.now()
    item = _get_item(item_id)

    if item.course.teacher_id != teacher.pk:
        raise PermissionDenied("You do not teach this course.")

    evaluation = (
        AttendanceEvaluation.objects.select_related("person")
        .filter(item=item, person_id=person_id)
        .first()
    )
    if evaluation is None:
        raise NotFound("The student has not submitted a self-evaluation for this session.")

    if teacher_score is None:
        result = scoring_oracle.score_teacher_comment(teacher_comment, item.course.course_name, oracle=oracle)
    else:
        result = ScoreResult(float(teacher_score), "teacher")

    with transaction.atomic():
        AttendanceEvaluation.objects.filter(pk=evaluation.pk).update(
            teacher_score=result.score,
            teacher_comment=teacher_comment or "",
            score_ratio=score_ratio,
            graded_at=now,
        )
    evaluation.refresh_from_db(fields=TEACHER_FIELDS)
    logger.info(f"Teacher {teacher.pk} graded person {person_id} item {item.pk}: {result.score} ({result.source})")
    return evaluation, result
