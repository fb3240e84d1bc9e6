import pytest
from datetime import date, datetime, time, timedelta
from uuid import uuid4
from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework.test import APIClient

from accounts.models import AuthSession, Person, Role
from training_app.models import (
    AttendanceEvaluation, Course, PlanCourseItem, PlanEmployee, PlanStatus, TrainingPlan,
)

PAST_DAY = date(2024, 1, 15)


@pytest.fixture(autouse=True)
def offline_oracle(settings):
    # no API key: every oracle call fails fast and takes the fallback path
    settings.SCORING_ORACLE = {**settings.SCORING_ORACLE, "API_KEY": ""}


@pytest.fixture
def create_person(db):
    def _create_person(role=Role.EMPLOYEE, name=None, *, password="pass12345", username=None):
        person = Person.objects.create(name=name or f"P {uuid4().hex[:6]}", role=role)
        get_user_model().objects.create_user(
            username=username or f"u_{uuid4().hex[:8]}",
            password=password,
            person=person,
        )
        return person
    return _create_person


@pytest.fixture
def planner(create_person):
    return create_person(Role.PLANNER, "Planner Pat")


@pytest.fixture
def teacher(create_person):
    return create_person(Role.TEACHER, "Teacher T")


@pytest.fixture
def employee(create_person):
    return create_person(Role.EMPLOYEE, "Employee Eve")


@pytest.fixture
def create_plan(db, planner):
    def _create_plan(**kw):
        defaults = dict(
            plan_name="Onboarding",
            plan_status=PlanStatus.IN_PROGRESS,
            plan_start_datetime=timezone.make_aware(datetime(2024, 1, 1, 9)),
            plan_end_datetime=timezone.make_aware(datetime(2030, 12, 31, 18)),
            creator=planner,
        )
        defaults.update(kw)
        return TrainingPlan.objects.create(**defaults)
    return _create_plan


@pytest.fixture
def create_course(db, teacher):
    def _create_course(**kw):
        defaults = dict(
            course_name="Python Basics",
            course_desc="Intro",
            course_class="Technical",
            teacher=teacher,
        )
        defaults.update(kw)
        return Course.objects.create(**defaults)
    return _create_course


@pytest.fixture
def create_item(db, create_plan, create_course):
    def _create_item(**kw):
        if "plan" not in kw:
            kw["plan"] = create_plan()
        if "course" not in kw:
            kw["course"] = create_course()
        defaults = dict(
            class_date=PAST_DAY,
            class_begin_time=time(9),
            class_end_time=time(11),
            location="Room 1",
        )
        defaults.update(kw)
        return PlanCourseItem.objects.create(**defaults)
    return _create_item


@pytest.fixture
def future_day():
    return timezone.localdate() + timedelta(days=3)


@pytest.fixture
def enroll(db):
    def _enroll(plan, person):
        return PlanEmployee.objects.create(plan=plan, person=person)
    return _enroll


@pytest.fixture
def create_evaluation(db):
    def _create_evaluation(person, item, **kw):
        defaults = dict(self_score=80.0, self_comment="c" * 60, self_evaluated_at=timezone.now())
        defaults.update(kw)
        return AttendanceEvaluation.objects.create(person=person, item=item, **defaults)
    return _create_evaluation


@pytest.fixture
def client_for():
    """APIClient authenticated as the account of a person."""
    def _client_for(person):
        client = APIClient()
        client.force_authenticate(user=person.account)
        return client
    return _client_for


@pytest.fixture
def session_client_for():
    """APIClient sending a real Session-ID header."""
    def _session_client_for(person):
        session = AuthSession.open_for(person)
        client = APIClient()
        client.credentials(HTTP_SESSION_ID=session.session_id)
        return client
    return _session_client_for


@pytest.fixture
def api_client():
    return APIClient()
