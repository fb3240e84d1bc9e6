import re
from pathlib import Path

import openpyxl
from django.core.management.base import BaseCommand, CommandError

from training_app.models import AttendanceEvaluation, TrainingPlan
from training_app.services.statistics import evaluation_row

COLUMNS = [
    ("Plan", "planName"),
    ("Course", "courseName"),
    ("Category", "courseClass"),
    ("Teacher", "teacherName"),
    ("Date", "classDate"),
    ("Begin", "classBeginTime"),
    ("End", "classEndTime"),
    ("Employee", "personName"),
    ("Self score", "selfScore"),
    ("Teacher score", "teacherScore"),
    ("Ratio", "scoreRatio"),
    ("Weighted score", "weightedScore"),
    ("Self comment", "selfComment"),
    ("Teacher comment", "teacherComment"),
]


class Command(BaseCommand):
    help = "Export evaluation records (optionally of one plan) to an .xlsx workbook."

    def add_arguments(self, parser):
        parser.add_argument("output", help="Path of the .xlsx file to write.")
        parser.add_argument("--plan", type=int, help="Only export this plan id.")

    def handle(self, *args, **options):
        output = Path(options["output"])
        if output.suffix.lower() != ".xlsx":
            raise CommandError("Output file must end in .xlsx")

        qs = AttendanceEvaluation.objects.select_related("person", "item__plan", "item__course__teacher")
        title = "Scores"
        if options["plan"] is not None:
            plan = TrainingPlan.objects.filter(pk=options["plan"]).first()
            if plan is None:
                raise CommandError(f"Plan {options['plan']} does not exist.")
            qs = qs.filter(item__plan=plan)
            title = re.sub(r"[\[\]:*?/\\]", " ", plan.plan_name)[:31].strip() or title

        wb = openpyxl.Workbook()
        ws = wb.active
        ws.title = title
        ws.append([header for header, _ in COLUMNS])
        count = 0
        for ev in qs.order_by("item__class_date", "item__class_begin_time", "person__name"):
            row = evaluation_row(ev)
            ws.append([row[key] for _, key in COLUMNS])
            count += 1
        wb.save(output)

        self.stdout.write(self.style.SUCCESS(f"Exported {count} record(s) to {output}."))
