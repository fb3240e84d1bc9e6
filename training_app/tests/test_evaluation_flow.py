from datetime import datetime, time, timedelta

import pytest
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied

from training_app.exceptions import BusinessRuleViolation
from training_app.models import AttendanceEvaluation
from training_app.services.evaluation_store import submit_grading, submit_self_evaluation

COMMENT = "I learned how to structure modules and write tests. " * 2 + "Great session overall!!"  # 127 chars


@pytest.fixture
def enrolled_item(create_plan, create_item, enroll, employee):
    plan = create_plan()
    enroll(plan, employee)
    return create_item(plan=plan)


@pytest.mark.django_db
class TestSelfEvaluation:
    def test_fallback_score_when_oracle_offline(self, employee, enrolled_item):
        ev, result, created = submit_self_evaluation(
            employee, enrolled_item.pk, comment=COMMENT, understanding=4, difficulty=3, satisfaction=5,
        )
        assert created is True
        assert result.source == "fallback"
        assert ev.self_score == 77.5
        assert ev.teacher_score is None
        assert ev.weighted_score is None

    def test_resubmission_updates_in_place_and_keeps_grade(self, employee, teacher, enrolled_item):
        submit_self_evaluation(employee, enrolled_item.pk, comment=COMMENT, understanding=4, difficulty=3, satisfaction=5)
        submit_grading(teacher, enrolled_item.pk, employee.pk, teacher_score=90, score_ratio=0.5)

        ev, _, created = submit_self_evaluation(
            employee, enrolled_item.pk, comment="x" * 30 + COMMENT, understanding=5, difficulty=5, satisfaction=5,
        )
        assert created is False
        assert AttendanceEvaluation.objects.count() == 1
        ev.refresh_from_db()
        assert ev.teacher_score == 90
        assert ev.understanding == 5
        # 157 chars -> base 75: 37.5 + 30 + 10 + 10
        assert ev.self_score == 87.5

    def test_not_enrolled_is_forbidden(self, create_person, enrolled_item):
        outsider = create_person("employee", "Outsider")
        with pytest.raises(PermissionDenied):
            submit_self_evaluation(outsider, enrolled_item.pk, comment=COMMENT)

    def test_unknown_item_is_not_found(self, employee):
        with pytest.raises(NotFound):
            submit_self_evaluation(employee, 424242, comment=COMMENT)

    def test_future_session_is_rejected(self, employee, create_plan, create_item, enroll, future_day):
        plan = create_plan()
        enroll(plan, employee)
        item = create_item(plan=plan, class_date=future_day)
        with pytest.raises(BusinessRuleViolation):
            submit_self_evaluation(employee, item.pk, comment=COMMENT)
        assert not AttendanceEvaluation.objects.exists()

    def test_session_ending_today_needs_end_time_passed(self, create_item):
        item = create_item(class_begin_time=time(9), class_end_time=time(11))
        day = timezone.make_aware(datetime.combine(item.class_date, time(11)))
        assert item.has_ended(day)
        assert not item.has_ended(day - timedelta(minutes=1))
        assert item.has_ended(day + timedelta(days=1))


@pytest.mark.django_db
class TestGrading:
    def test_weighted_score_after_grading(self, employee, teacher, enrolled_item):
        submit_self_evaluation(employee, enrolled_item.pk, comment=COMMENT, understanding=4, difficulty=3, satisfaction=5)
        ev, result = submit_grading(
            teacher, enrolled_item.pk, employee.pk, teacher_score=90, teacher_comment="Well done", score_ratio=0.5,
        )
        assert result.source == "teacher"
        assert ev.teacher_score == 90
        assert ev.self_score == 77.5
        assert ev.weighted_score == 83.75
        assert ev.graded_at is not None

    def test_comment_only_uses_default_score_offline(self, employee, teacher, create_evaluation, enrolled_item):
        create_evaluation(employee, enrolled_item, self_score=70)
        ev, result = submit_grading(teacher, enrolled_item.pk, employee.pk, teacher_comment="Solid work", score_ratio=0.4)
        assert result.source == "fallback"
        assert ev.teacher_score == 75
        assert ev.weighted_score == 72.0

    def test_other_teacher_is_forbidden(self, employee, create_person, create_evaluation, enrolled_item):
        create_evaluation(employee, enrolled_item)
        stranger = create_person("teacher", "Stranger")
        with pytest.raises(PermissionDenied):
            submit_grading(stranger, enrolled_item.pk, employee.pk, teacher_score=80, score_ratio=0.5)

    def test_missing_self_evaluation_is_not_found(self, employee, teacher, enrolled_item):
        with pytest.raises(NotFound):
            submit_grading(teacher, enrolled_item.pk, employee.pk, teacher_score=80, score_ratio=0.5)

    def test_regrading_keeps_self_fields(self, employee, teacher, create_evaluation, enrolled_item):
        create_evaluation(employee, enrolled_item, self_score=64, understanding=2)
        submit_grading(teacher, enrolled_item.pk, employee.pk, teacher_score=80, score_ratio=0.5)
        ev, _ = submit_grading(teacher, enrolled_item.pk, employee.pk, teacher_score=100, score_ratio=0.25)
        ev.refresh_from_db()
        assert (ev.self_score, ev.understanding) == (64, 2)
        assert ev.weighted_score == 73.0


@pytest.mark.django_db
class TestEvaluationApi:
    def test_employee_submits_and_teacher_grades(self, client_for, employee, teacher, enrolled_item):
        res = client_for(employee).post("/api/employee/submit-evaluation", {
            "itemId": enrolled_item.pk, "selfComment": COMMENT,
            "understanding": 4, "difficulty": 3, "satisfaction": 5,
        }, format="json")
        assert res.status_code == 200
        data = res.json()["data"]
        assert data["selfScore"] == 77.5
        assert data["scoreSource"] == "fallback"
        assert data["weightedScore"] is None

        res = client_for(teacher).post("/api/teacher/submit-grading", {
            "itemId": enrolled_item.pk, "personId": employee.pk, "teacherScore": 90, "scoreRatio": 0.5,
        }, format="json")
        assert res.status_code == 200
        assert res.json()["data"]["weightedScore"] == 83.75

    def test_zero_ratings_count_as_three(self, client_for, employee, enrolled_item):
        res = client_for(employee).post("/api/employee/submit-evaluation", {
            "itemId": enrolled_item.pk, "selfComment": COMMENT, "understanding": 0,
        }, format="json")
        assert res.status_code == 200
        ev = AttendanceEvaluation.objects.get()
        assert (ev.understanding, ev.difficulty, ev.satisfaction) == (3, 3, 3)

    def test_short_comment_is_rejected(self, client_for, employee, enrolled_item):
        res = client_for(employee).post("/api/employee/submit-evaluation", {
            "itemId": enrolled_item.pk, "selfComment": "too short",
        }, format="json")
        assert res.status_code == 400
        assert res.json()["message"].startswith("selfComment")

    @pytest.mark.parametrize("payload", [
        {"teacherScore": 101, "scoreRatio": 0.5},
        {"teacherScore": 80, "scoreRatio": 1.5},
        {"teacherScore": 80, "scoreRatio": -0.1},
        {"scoreRatio": 0.5},
    ])
    def test_grading_bounds(self, client_for, employee, teacher, create_evaluation, enrolled_item, payload):
        create_evaluation(employee, enrolled_item)
        res = client_for(teacher).post("/api/teacher/submit-grading", {
            "itemId": enrolled_item.pk, "personId": employee.pk, **payload,
        }, format="json")
        assert res.status_code == 400
        assert AttendanceEvaluation.objects.get().teacher_score is None

    def test_teacher_cannot_submit_self_evaluation(self, client_for, teacher, enrolled_item):
        res = client_for(teacher).post("/api/employee/submit-evaluation", {
            "itemId": enrolled_item.pk, "selfComment": COMMENT,
        }, format="json")
        assert res.status_code == 403
        assert res.json()["code"] == 403

    def test_not_enrolled_answers_403_envelope(self, client_for, create_person, enrolled_item):
        outsider = create_person("employee", "Outsider")
        res = client_for(outsider).post("/api/employee/submit-evaluation", {
            "itemId": enrolled_item.pk, "selfComment": COMMENT,
        }, format="json")
        assert res.status_code == 403
        assert res.json()["message"] == "You are not enrolled in the plan of this session."
