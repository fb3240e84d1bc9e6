import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


SCORE_VALIDATORS = [django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(100)]
RATING_VALIDATORS = [django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(5)]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("accounts", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Course",
            fields=[
                ("course_id", models.BigAutoField(primary_key=True, serialize=False)),
                ("course_name", models.CharField(max_length=50)),
                ("course_desc", models.CharField(blank=True, max_length=100)),
                ("course_require", models.CharField(blank=True, max_length=500)),
                ("course_class", models.CharField(blank=True, max_length=20)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("teacher", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="courses", to="accounts.person")),
            ],
            options={
                "ordering": ["course_id"],
            },
        ),
        migrations.CreateModel(
            name="TrainingPlan",
            fields=[
                ("plan_id", models.BigAutoField(primary_key=True, serialize=False)),
                ("plan_name", models.CharField(max_length=50)),
                ("plan_status", models.CharField(choices=[("planning", "Planning"), ("in_progress", "In progress"), ("completed", "Completed")], default="planning", max_length=12)),
                ("plan_start_datetime", models.DateTimeField()),
                ("plan_end_datetime", models.DateTimeField()),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("creator", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="created_plans", to="accounts.person")),
            ],
            options={
                "ordering": ["-plan_start_datetime", "-plan_id"],
            },
        ),
        migrations.CreateModel(
            name="PlanCourseItem",
            fields=[
                ("item_id", models.BigAutoField(primary_key=True, serialize=False)),
                ("class_date", models.DateField()),
                ("class_begin_time", models.TimeField()),
                ("class_end_time", models.TimeField()),
                ("location", models.CharField(blank=True, max_length=100)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("course", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="course_items", to="training_app.course")),
                ("plan", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="course_items", to="training_app.trainingplan")),
            ],
            options={
                "ordering": ["class_date", "class_begin_time", "item_id"],
            },
        ),
        migrations.CreateModel(
            name="PlanEmployee",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("person", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="plan_memberships", to="accounts.person")),
                ("plan", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="plan_employees", to="training_app.trainingplan")),
            ],
        ),
        migrations.AddField(
            model_name="trainingplan",
            name="employees",
            field=models.ManyToManyField(related_name="training_plans", through="training_app.PlanEmployee", to="accounts.person"),
        ),
        migrations.CreateModel(
            name="AttendanceEvaluation",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("self_score", models.FloatField(blank=True, null=True, validators=SCORE_VALIDATORS)),
                ("self_comment", models.TextField(blank=True, default="")),
                ("understanding", models.PositiveSmallIntegerField(default=3, validators=RATING_VALIDATORS)),
                ("difficulty", models.PositiveSmallIntegerField(default=3, validators=RATING_VALIDATORS)),
                ("satisfaction", models.PositiveSmallIntegerField(default=3, validators=RATING_VALIDATORS)),
                ("self_evaluated_at", models.DateTimeField(blank=True, null=True)),
                ("teacher_score", models.FloatField(blank=True, null=True, validators=SCORE_VALIDATORS)),
                ("teacher_comment", models.TextField(blank=True, default="")),
                ("score_ratio", models.FloatField(default=0.5, validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(1)])),
                ("graded_at", models.DateTimeField(blank=True, null=True)),
                ("item", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="evaluations", to="training_app.plancourseitem")),
                ("person", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="evaluations", to="accounts.person")),
            ],
            options={
                "ordering": ["item__class_date", "item_id", "person_id"],
            },
        ),
        migrations.AddConstraint(
            model_name="trainingplan",
            constraint=models.CheckConstraint(condition=models.Q(("plan_start_datetime__lt", models.F("plan_end_datetime"))), name="plan_start_before_end"),
        ),
        migrations.AddIndex(
            model_name="plancourseitem",
            index=models.Index(fields=["class_date", "course"], name="item_date_course_idx"),
        ),
        migrations.AddConstraint(
            model_name="plancourseitem",
            constraint=models.CheckConstraint(condition=models.Q(("class_begin_time__lt", models.F("class_end_time"))), name="item_begin_before_end"),
        ),
        migrations.AddConstraint(
            model_name="planemployee",
            constraint=models.UniqueConstraint(fields=("plan", "person"), name="unique_plan_employee"),
        ),
        migrations.AddConstraint(
            model_name="attendanceevaluation",
            constraint=models.UniqueConstraint(fields=("person", "item"), name="unique_person_item_evaluation"),
        ),
        migrations.AddConstraint(
            model_name="attendanceevaluation",
            constraint=models.CheckConstraint(condition=models.Q(("self_score__isnull", True), models.Q(("self_score__gte", 0), ("self_score__lte", 100)), _connector="OR"), name="self_score_range"),
        ),
        migrations.AddConstraint(
            model_name="attendanceevaluation",
            constraint=models.CheckConstraint(condition=models.Q(("teacher_score__isnull", True), models.Q(("teacher_score__gte", 0), ("teacher_score__lte", 100)), _connector="OR"), name="teacher_score_range"),
        ),
        migrations.AddConstraint(
            model_name="attendanceevaluation",
            constraint=models.CheckConstraint(condition=models.Q(("score_ratio__gte", 0), ("score_ratio__lte", 1)), name="score_ratio_range"),
        ),
    ]
