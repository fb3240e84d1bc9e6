from datetime import time, timedelta

import openpyxl
import pytest
from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.core.management.base import CommandError
from django.utils import timezone

from accounts.models import AuthSession
from training_app.models import PlanCourseItem, TrainingPlan


@pytest.mark.django_db
class TestSeedTraining:
    def test_accounts_are_idempotent(self):
        call_command("seed_training")
        call_command("seed_training")
        User = get_user_model()
        assert User.objects.filter(username__in=["planner", "teacher", "teacher2", "employee", "employee2"]).count() == 5
        assert User.objects.get(username="teacher").check_password("123456")

    def test_with_data(self):
        call_command("seed_training", "--with-data")
        call_command("seed_training", "--with-data")
        assert TrainingPlan.objects.filter(plan_name="Onboarding 101").count() == 1
        assert PlanCourseItem.objects.count() == 3


@pytest.mark.django_db
def test_purge_sessions(employee):
    AuthSession.open_for(employee, now=timezone.now() - timedelta(days=30))
    live = AuthSession.open_for(employee)
    call_command("purge_sessions")
    assert list(AuthSession.objects.values_list("pk", flat=True)) == [live.pk]


@pytest.mark.django_db
class TestExportScores:
    def test_writes_workbook(self, tmp_path, create_plan, create_item, employee, create_evaluation):
        plan = create_plan(plan_name="Q1: Sales/Ops")
        create_evaluation(employee, create_item(plan=plan), self_score=70, teacher_score=90, score_ratio=0.5)
        create_evaluation(employee, create_item(class_begin_time=time(13), class_end_time=time(14)))
        output = tmp_path / "scores.xlsx"

        call_command("export_scores", str(output), "--plan", str(plan.pk))

        ws = openpyxl.load_workbook(output).active
        assert ws.title == "Q1  Sales Ops"
        rows = list(ws.iter_rows(values_only=True))
        assert rows[0][0] == "Plan"
        assert len(rows) == 2
        assert rows[1][7] == "Employee Eve"
        assert rows[1][11] == 80.0

    def test_rejects_other_extensions(self, tmp_path):
        with pytest.raises(CommandError):
            call_command("export_scores", str(tmp_path / "scores.csv"))

    def test_unknown_plan(self, tmp_path):
        with pytest.raises(CommandError):
            call_command("export_scores", str(tmp_path / "scores.xlsx"), "--plan", "999")
