# training_app/management/commands/seed_training.py

from datetime import datetime, time, timedelta

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from accounts.models import Person, Role
from training_app import models as tr
from training_app.services.scheduling import schedule_course_item

DEMO_PASSWORD = "123456"

DEMO_ACCOUNTS = [
    ("planner",   "Zhang Planner",  Role.PLANNER),
    ("teacher",   "Li Teacher",     Role.TEACHER),
    ("teacher2",  "Wang Teacher",   Role.TEACHER),
    ("employee",  "Zhao Employee",  Role.EMPLOYEE),
    ("employee2", "Qian Employee",  Role.EMPLOYEE),
]


class Command(BaseCommand):
    help = """
    Seed the demo accounts (password 123456):
    planner, teacher, teacher2, employee, employee2.
    --with-data also adds a plan, two courses, sessions and enrollments.
    """

    def add_arguments(self, parser):
        parser.add_argument("--with-data", action="store_true", help="Also create a sample plan with sessions.")

    def handle(self, *args, **options):
        User = get_user_model()
        people = {}

        with transaction.atomic():
            # ─── 1) ACCOUNTS ─────────────────────────────────
            for username, name, role in DEMO_ACCOUNTS:
                user = User.objects.select_related("person").filter(username=username).first()
                if user is None:
                    person = Person.objects.create(name=name, role=role)
                    user = User.objects.create_user(username=username, password=DEMO_PASSWORD, person=person)
                    self.stdout.write(f"  created {username} ({role})")
                people[username] = user.person

            if not options["with_data"]:
                self.stdout.write(self.style.SUCCESS("Demo accounts ready."))
                return

            if tr.TrainingPlan.objects.filter(plan_name="Onboarding 101").exists():
                self.stdout.write(self.style.WARNING("Sample data already present, skipped."))
                return

            # ─── 2) PLAN ─────────────────────────────────────
            today = timezone.localdate()
            tz = timezone.get_current_timezone()
            plan = tr.TrainingPlan.objects.create(
                plan_name           = "Onboarding 101",
                plan_status         = tr.PlanStatus.IN_PROGRESS,
                plan_start_datetime = datetime.combine(today - timedelta(days=14), time(9), tzinfo=tz),
                plan_end_datetime   = datetime.combine(today + timedelta(days=14), time(18), tzinfo=tz),
                creator             = people["planner"],
            )

            # ─── 3) COURSES ──────────────────────────────────
            python = tr.Course.objects.create(
                course_name  = "Python Basics",
                course_desc  = "Syntax, data types and the standard library.",
                course_class = "Technical",
                teacher      = people["teacher"],
            )
            comms = tr.Course.objects.create(
                course_name  = "Effective Communication",
                course_desc  = "Meetings, writing and feedback.",
                course_class = "Soft skills",
                teacher      = people["teacher2"],
            )

            # ─── 4) SESSIONS ─────────────────────────────────
            for offset, course in ((-7, python), (-3, comms), (2, python)):
                schedule_course_item(
                    plan=plan,
                    course=course,
                    class_date=today + timedelta(days=offset),
                    class_begin_time=time(9),
                    class_end_time=time(11),
                    location="Room 301",
                )

            # ─── 5) ENROLLMENTS ──────────────────────────────
            for username in ("employee", "employee2"):
                tr.PlanEmployee.objects.create(plan=plan, person=people[username])

        self.stdout.write(self.style.SUCCESS("Demo accounts and sample plan ready."))
