from datetime import date, time

import pytest

from training_app.models import PlanStatus
from training_app.services import statistics
from training_app.tests.conftest import PAST_DAY


@pytest.fixture
def graded_world(create_person, teacher, create_plan, create_course, create_item, enroll, create_evaluation):
    """
    One plan, two courses of one teacher, two employees.

    Eve: Python graded (80/90 at 0.5 -> 85), SQL self only (70).
    Sam: Python graded (60/70 at 0.5 -> 65).
    """
    eve = create_person("employee", "Eve")
    sam = create_person("employee", "Sam")
    plan = create_plan(plan_name="Backend Track")
    enroll(plan, eve)
    enroll(plan, sam)
    python = create_course(course_name="Python", course_class="Technical")
    sql = create_course(course_name="SQL", course_class="Data")
    python_item = create_item(plan=plan, course=python)
    sql_item = create_item(plan=plan, course=sql, class_begin_time=time(13), class_end_time=time(15))

    create_evaluation(eve, python_item, self_score=80, teacher_score=90, score_ratio=0.5)
    create_evaluation(eve, sql_item, self_score=70)
    create_evaluation(sam, python_item, self_score=60, teacher_score=70, score_ratio=0.5)
    return {"eve": eve, "sam": sam, "plan": plan, "python": python, "sql": sql,
            "python_item": python_item, "sql_item": sql_item}


@pytest.mark.django_db
class TestEmptyStatistics:
    def test_platform_is_all_zero(self):
        data = statistics.platform_statistics()
        assert data["averageScore"] == 0.0
        assert data["planCount"] == 0 and data["classCount"] == 0

    def test_employee_views_are_empty(self, employee):
        scores = statistics.employee_scores(employee)
        assert scores["list"] == []
        assert scores["statistics"]["averageScore"] == 0.0
        assert statistics.employee_course_type_scores(employee)["courseTypes"] == []
        progress = statistics.employee_learning_progress(employee)
        assert progress["overall"]["progressPercentage"] == 0.0
        assert progress["planProgress"] == []

    def test_teacher_course_without_records(self, create_course):
        data = statistics.teacher_course_statistics(create_course())
        assert data["overview"]["passRate"] == 0.0
        assert data["overview"]["averageScore"] == 0.0
        assert all(bucket["count"] == 0 for bucket in data["scoreDistribution"])
        assert data["studentScores"] == []

    def test_analytics_lists_every_status(self):
        data = statistics.planner_analytics(top_n=5)
        assert [row["status"] for row in data["planStatusStatistics"]] == [s.value for s in PlanStatus]
        assert data["courseRankings"] == [] and data["employeeRankings"] == []


@pytest.mark.django_db
class TestEmployeeStatistics:
    def test_scores_split_graded_and_self_only(self, graded_world):
        data = statistics.employee_scores(graded_world["eve"])
        summary = data["statistics"]
        assert len(data["list"]) == 2
        assert summary["gradedCount"] == 1
        assert summary["selfOnlyCount"] == 1
        # effective scores 85 and 70
        assert summary["averageScore"] == 77.5
        assert summary["averageGradedScore"] == 85.0
        assert summary["highestScore"] == 85.0

    def test_scores_filter_by_course_class(self, graded_world):
        data = statistics.employee_scores(graded_world["eve"], course_class="Data")
        assert [row["courseName"] for row in data["list"]] == ["SQL"]
        assert data["list"][0]["weightedScore"] is None

    def test_scores_include_unevaluated_sessions(self, employee, create_plan, create_item, enroll,
                                                 create_evaluation, future_day):
        plan = create_plan()
        enroll(plan, employee)
        evaluated = create_item(plan=plan)
        skipped = create_item(plan=plan, class_begin_time=time(13), class_end_time=time(15))
        create_item(plan=plan, class_date=future_day)
        create_evaluation(employee, evaluated, self_score=80)

        data = statistics.employee_scores(employee)
        summary = data["statistics"]
        assert summary["totalCourses"] == 2
        assert summary["completedCourses"] == 1
        assert summary["pendingEvaluation"] == 1
        assert summary["averageScore"] == 80.0
        rows = {row["itemId"]: row for row in data["list"]}
        assert rows.keys() == {evaluated.pk, skipped.pk}
        assert rows[evaluated.pk]["hasEvaluated"] is True
        assert rows[skipped.pk]["hasEvaluated"] is False
        assert rows[skipped.pk]["selfScore"] is None
        assert rows[skipped.pk]["personName"] == "Employee Eve"

    def test_course_type_radar(self, graded_world):
        data = statistics.employee_course_type_scores(graded_world["eve"])
        by_class = {t["courseClass"]: t for t in data["courseTypes"]}
        assert by_class["Technical"]["averageScore"] == 85.0
        assert by_class["Data"]["selfOnlyCount"] == 1
        assert data["radarData"]["values"] == [85.0, 70.0]
        assert data["radarData"]["indicators"][0] == {"name": "Technical", "max": 100}

    def test_learning_progress(self, graded_world, create_item, future_day):
        create_item(plan=graded_world["plan"], course=graded_world["sql"], class_date=future_day)
        data = statistics.employee_learning_progress(graded_world["sam"])
        overall = data["overall"]
        assert overall["totalCourses"] == 3
        assert overall["endedCourses"] == 2
        assert overall["completedCourses"] == 1
        assert overall["progressPercentage"] == 33.33
        assert data["planProgress"][0]["planName"] == "Backend Track"
        assert {row["courseName"]: row["hasEvaluated"] for row in data["recentCourses"]} == {"Python": True, "SQL": False}

    def test_pending_evaluations(self, graded_world):
        pending = statistics.employee_pending_evaluations(graded_world["sam"])
        assert pending["total"] == 1
        assert pending["list"][0]["courseName"] == "SQL"
        everything = statistics.employee_pending_evaluations(graded_world["sam"], status="all")
        assert everything["total"] == 2

    def test_schedule_days(self, graded_world):
        data = statistics.employee_schedule(graded_world["eve"], PAST_DAY, date(2024, 1, 21))
        assert len(data["days"]) == 7
        assert data["totalClasses"] == 2
        assert data["days"][0]["weekday"] == "Monday"
        assert sorted(c["courseName"] for c in data["days"][0]["courses"]) == ["Python", "SQL"]


@pytest.mark.django_db
class TestTeacherStatistics:
    def test_course_statistics_use_graded_only(self, graded_world):
        data = statistics.teacher_course_statistics(graded_world["python"])
        overview = data["overview"]
        assert overview["gradedCount"] == 2
        assert overview["averageScore"] == 75.0
        assert overview["passRate"] == 100.0
        assert overview["excellentRate"] == 50.0
        assert {d["range"]: d["count"] for d in data["scoreDistribution"]}["80-89"] == 1
        assert [s["personName"] for s in data["studentScores"]] == ["Eve", "Sam"]

    def test_pending_groups_students_by_session(self, graded_world, teacher):
        pending = statistics.teacher_pending_evaluations(teacher)
        assert pending["totalCount"] == 1
        assert pending["courseItems"][0]["courseName"] == "SQL"
        everything = statistics.teacher_pending_evaluations(teacher, status="all")
        assert everything["totalCount"] == 3
        assert everything["pendingCount"] == 1

    def test_teaching_statistics(self, graded_world, teacher):
        data = statistics.teacher_teaching_statistics(teacher, start_date=date(2024, 1, 1), end_date=date(2024, 12, 31))
        assert data["classCount"] == 2
        assert data["studentCount"] == 2
        assert data["totalHours"] == 4.0
        assert data["averageTeacherScore"] == 80.0
        assert data["evaluationRate"] == 66.67


@pytest.mark.django_db
class TestPlannerStatistics:
    def test_rankings(self, graded_world):
        data = statistics.planner_analytics(top_n=10)
        assert [c["courseName"] for c in data["courseRankings"]] == ["Python"]
        assert data["courseRankings"][0]["averageScore"] == 75.0
        assert data["planRankings"][0]["employeeCount"] == 2
        assert [e["personName"] for e in data["employeeRankings"]] == ["Eve", "Sam"]
        assert data["overview"]["averageScore"] == 75.0

    def test_top_n_limits(self, graded_world):
        assert len(statistics.planner_analytics(top_n=1)["employeeRankings"]) == 1

    def test_course_class_distribution(self, graded_world):
        rows = {r["courseClass"]: r for r in statistics.course_class_distribution()}
        assert rows["Technical"]["gradedCount"] == 2
        assert rows["Data"]["averageScore"] == 0.0

    def test_personal_statistics_per_role(self, graded_world, teacher, planner):
        assert statistics.personal_statistics(graded_world["eve"])["gradedCourseCount"] == 1
        assert statistics.personal_statistics(teacher)["courseCount"] == 2
        assert statistics.personal_statistics(planner)["totalStudentCount"] == 2


@pytest.mark.django_db
class TestStatisticsApi:
    def test_home_is_public(self, api_client):
        res = api_client.get("/api/home/statistics")
        assert res.status_code == 200
        assert "personal" not in res.json()["data"]

    def test_home_with_stale_token_still_answers(self, api_client):
        api_client.credentials(HTTP_SESSION_ID="deadbeef")
        res = api_client.get("/api/home/statistics")
        assert res.status_code == 200

    def test_home_adds_personal_block(self, session_client_for, graded_world):
        res = session_client_for(graded_world["eve"]).get("/api/home/statistics")
        assert res.json()["data"]["personal"]["completedCourseCount"] == 2

    def test_course_statistics_owner_only(self, client_for, graded_world, teacher, create_person):
        url = f"/api/teacher/course-statistics?courseId={graded_world['python'].pk}"
        assert client_for(teacher).get(url).status_code == 200
        other = create_person("teacher", "Other")
        res = client_for(other).get(url)
        assert res.status_code == 403
        assert res.json()["message"] == "You do not teach this course."

    def test_employee_schedule_range(self, client_for, graded_world):
        res = client_for(graded_world["eve"]).get("/api/employee/schedule?startDate=2024-01-15&endDate=2024-01-16")
        assert res.status_code == 200
        assert res.json()["data"]["totalClasses"] == 2

    def test_analytics_top_n_bounds(self, client_for, planner):
        assert client_for(planner).get("/api/planner/analytics?topN=0").status_code == 400
        assert client_for(planner).get("/api/planner/analytics?topN=3").status_code == 200
