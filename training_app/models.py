from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from accounts.models import Person
from training_app.services import score_math


class PlanStatus(models.TextChoices):
    PLANNING    = "planning",    "Planning"
    IN_PROGRESS = "in_progress", "In progress"
    COMPLETED   = "completed",   "Completed"


SCORE_VALIDATORS = [MinValueValidator(0), MaxValueValidator(100)]
RATIO_VALIDATORS = [MinValueValidator(0), MaxValueValidator(1)]
RATING_VALIDATORS = [MinValueValidator(1), MaxValueValidator(5)]


class TrainingPlan(models.Model):
    plan_id             = models.BigAutoField(primary_key=True)
    plan_name           = models.CharField(max_length=50)
    plan_status         = models.CharField(max_length=12, choices=PlanStatus.choices, default=PlanStatus.PLANNING)
    plan_start_datetime = models.DateTimeField()
    plan_end_datetime   = models.DateTimeField()
    creator             = models.ForeignKey(Person, on_delete=models.PROTECT, related_name="created_plans")
    employees           = models.ManyToManyField(Person, through="PlanEmployee", related_name="training_plans")
    created_at          = models.DateTimeField(default=timezone.now)
    updated_at          = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-plan_start_datetime", "-plan_id"]
        constraints = [
            models.CheckConstraint(
                condition=Q(plan_start_datetime__lt=F("plan_end_datetime")),
                name="plan_start_before_end",
            ),
        ]

    def __str__(self):
        return self.plan_name


class Course(models.Model):
    course_id      = models.BigAutoField(primary_key=True)
    course_name    = models.CharField(max_length=50)
    course_desc    = models.CharField(max_length=100, blank=True)
    course_require = models.CharField(max_length=500, blank=True)
    course_class   = models.CharField(max_length=20, blank=True)
    teacher        = models.ForeignKey(Person, on_delete=models.PROTECT, related_name="courses")
    created_at     = models.DateTimeField(default=timezone.now)
    updated_at     = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["course_id"]

    def __str__(self):
        return self.course_name


class PlanCourseItem(models.Model):
    """One scheduled session of a course inside a plan."""
    item_id          = models.BigAutoField(primary_key=True)
    plan             = models.ForeignKey(TrainingPlan, on_delete=models.CASCADE, related_name="course_items")
    course           = models.ForeignKey(Course, on_delete=models.CASCADE, related_name="course_items")
    class_date       = models.DateField()
    class_begin_time = models.TimeField()
    class_end_time   = models.TimeField()
    location         = models.CharField(max_length=100, blank=True)
    created_at       = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["class_date", "class_begin_time", "item_id"]
        indexes = [models.Index(fields=["class_date", "course"], name="item_date_course_idx")]
        constraints = [
            models.CheckConstraint(
                condition=Q(class_begin_time__lt=F("class_end_time")),
                name="item_begin_before_end",
            ),
        ]

    def __str__(self):
        return f"{self.course} @ {self.class_date} {self.class_begin_time:%H:%M}-{self.class_end_time:%H:%M}"

    @property
    def duration_hours(self):
        begin = self.class_begin_time.hour * 60 + self.class_begin_time.minute
        end = self.class_end_time.hour * 60 + self.class_end_time.minute
        return (end - begin) / 60

    def has_ended(self, now=None):
        now = timezone.localtime(now or timezone.now())
        if self.class_date < now.date():
            return True
        return self.class_date == now.date() and self.class_end_time <= now.time()


class PlanEmployee(models.Model):
    plan       = models.ForeignKey(TrainingPlan, on_delete=models.CASCADE, related_name="plan_employees")
    person     = models.ForeignKey(Person, on_delete=models.CASCADE, related_name="plan_memberships")
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["plan", "person"], name="unique_plan_employee"),
        ]

    def __str__(self):
        return f"{self.person} in {self.plan}"


class AttendanceEvaluation(models.Model):
    """
    Attendance + evaluation of one person for one scheduled session.

    Self fields are written by the employee, teacher fields by the
    course teacher; the two writers never touch each other's columns.
    ``teacher_score`` NULL means the record has not been graded yet.
    """
    person            = models.ForeignKey(Person, on_delete=models.CASCADE, related_name="evaluations")
    item              = models.ForeignKey(PlanCourseItem, on_delete=models.CASCADE, related_name="evaluations")

    # ── self evaluation ──
    self_score        = models.FloatField(null=True, blank=True, validators=SCORE_VALIDATORS)
    self_comment      = models.TextField(blank=True, default="")
    understanding     = models.PositiveSmallIntegerField(default=3, validators=RATING_VALIDATORS)
    difficulty        = models.PositiveSmallIntegerField(default=3, validators=RATING_VALIDATORS)
    satisfaction      = models.PositiveSmallIntegerField(default=3, validators=RATING_VALIDATORS)
    self_evaluated_at = models.DateTimeField(null=True, blank=True)

    # ── teacher grading ──
    teacher_score     = models.FloatField(null=True, blank=True, validators=SCORE_VALIDATORS)
    teacher_comment   = models.TextField(blank=True, default="")
    score_ratio       = models.FloatField(default=0.5, validators=RATIO_VALIDATORS)
    graded_at         = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["item__class_date", "item_id", "person_id"]
        constraints = [
            models.UniqueConstraint(fields=["person", "item"], name="unique_person_item_evaluation"),
            models.CheckConstraint(
                condition=Q(self_score__isnull=True) | Q(self_score__gte=0, self_score__lte=100),
                name="self_score_range",
            ),
            models.CheckConstraint(
                condition=Q(teacher_score__isnull=True) | Q(teacher_score__gte=0, teacher_score__lte=100),
                name="teacher_score_range",
            ),
            models.CheckConstraint(
                condition=Q(score_ratio__gte=0, score_ratio__lte=1),
                name="score_ratio_range",
            ),
        ]

    def __str__(self):
        return f"{self.person_id}@{self.item_id}"

    @property
    def is_graded(self):
        return self.teacher_score is not None

    @property
    def weighted_score(self):
        return score_math.weighted_score(self.self_score, self.teacher_score, self.score_ratio)
