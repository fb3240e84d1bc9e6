"""
Read-only reporting over attendance evaluations.

Conventions shared by every view here:

* a record is *self-evaluated* once ``self_score`` is set, and *graded*
  once ``teacher_score`` is set;
* teacher and planner views only average graded records, using the
  weighted score;
* employee views average the effective score (weighted when graded,
  self score otherwise) and report graded / self-only counts separately;
* nothing matching means zeros and empty lists, never an error.
"""

import logging
from collections import OrderedDict, defaultdict
from datetime import date, timedelta

from django.db.models import Avg, Count, Max, Min, Q
from django.utils import timezone

from accounts.models import Person, Role
from training_app.models import (
    AttendanceEvaluation,
    Course,
    PlanCourseItem,
    PlanEmployee,
    PlanStatus,
    TrainingPlan,
)
from training_app.services.score_math import (
    EXCELLENT_SCORE,
    PASS_SCORE,
    _round2,
    effective_score,
    effective_score_expr,
    percentage,
    round_or_none,
    score_distribution,
    summarize,
    trend_of,
    weighted_score_expr,
)
from training_app.services.scheduling import ended_q
from training_app.utils import fmt_date, fmt_datetime, fmt_time

logger = logging.getLogger(__name__)

UNCATEGORIZED = "Uncategorized"
GRADED = Q(teacher_score__isnull=False)
SELF_EVALUATED = Q(self_score__isnull=False)


def _today(now=None) -> date:
    return timezone.localtime(now or timezone.now()).date()


def _item_row(item: PlanCourseItem) -> dict:
    course = item.course
    return {
        "itemId": item.item_id,
        "planId": item.plan_id,
        "planName": item.plan.plan_name,
        "courseId": course.course_id,
        "courseName": course.course_name,
        "courseClass": course.course_class,
        "teacherId": course.teacher_id,
        "teacherName": course.teacher.name,
        "classDate": fmt_date(item.class_date),
        "classBeginTime": fmt_time(item.class_begin_time),
        "classEndTime": fmt_time(item.class_end_time),
        "location": item.location,
    }


def evaluation_row(ev: AttendanceEvaluation) -> dict:
    """One evaluation joined with its session, as shown in score lists."""
    row = _item_row(ev.item)
    row.update({
        "personId": ev.person_id,
        "personName": ev.person.name,
        "selfScore": round_or_none(ev.self_score),
        "selfComment": ev.self_comment,
        "understanding": ev.understanding,
        "difficulty": ev.difficulty,
        "satisfaction": ev.satisfaction,
        "teacherScore": round_or_none(ev.teacher_score),
        "teacherComment": ev.teacher_comment,
        "scoreRatio": ev.score_ratio,
        "weightedScore": ev.weighted_score,
        "hasTeacherScore": ev.is_graded,
        "evaluatedAt": fmt_datetime(ev.self_evaluated_at),
        "gradedAt": fmt_datetime(ev.graded_at),
    })
    return row


def _evaluations():
    return AttendanceEvaluation.objects.select_related(
        "person", "item__plan", "item__course__teacher",
    )


def _session_row(item: PlanCourseItem, person, ev: AttendanceEvaluation | None) -> dict:
    """An assigned session with the person's evaluation, null score fields when there is none."""
    if ev is not None:
        row = evaluation_row(ev)
    else:
        row = _item_row(item)
        row.update({
            "personId": person.person_id,
            "personName": person.name,
            "selfScore": None,
            "selfComment": "",
            "understanding": None,
            "difficulty": None,
            "satisfaction": None,
            "teacherScore": None,
            "teacherComment": "",
            "scoreRatio": None,
            "weightedScore": None,
            "hasTeacherScore": False,
            "evaluatedAt": None,
            "gradedAt": None,
        })
    row["hasEvaluated"] = ev is not None and ev.self_score is not None
    return row


def personal_summary(evaluations, total_sessions) -> dict:
    """
    Employee-facing summary over ``total_sessions`` assigned sessions.

    Only self-evaluated records are averaged; graded and self-only records
    are counted apart.
    """
    completed = [ev for ev in evaluations if ev.self_score is not None]
    graded = [ev for ev in completed if ev.is_graded]
    summary = {
        "totalCourses": total_sessions,
        "completedCourses": len(completed),
        "pendingEvaluation": total_sessions - len(completed),
        "gradedCount": len(graded),
        "selfOnlyCount": len(completed) - len(graded),
        "averageGradedScore": summarize([ev.weighted_score for ev in graded])["averageScore"],
    }
    summary.update(summarize(
        [effective_score(ev.self_score, ev.teacher_score, ev.score_ratio) for ev in completed]
    ))
    return summary


def graded_summary(evaluations) -> dict:
    """Teacher/planner summary over graded records only."""
    scores = [ev.weighted_score for ev in evaluations if ev.is_graded]
    summary = {
        "totalRecords": len(evaluations),
        "gradedCount": len(scores),
        "ungradedCount": len(evaluations) - len(scores),
    }
    summary.update(summarize(scores))
    return summary


# ─────────────────────────────── employee ───────────────────────────────

def _assigned_session_scores(person, items) -> dict:
    """Ended sessions of the person's plans joined with their evaluations, plus the summary."""
    items = list(items.select_related("plan", "course__teacher").order_by("-class_date", "-class_begin_time"))
    by_item = {
        ev.item_id: ev
        for ev in _evaluations().filter(person=person, item__in=[item.item_id for item in items])
    }
    return {
        "list": [_session_row(item, person, by_item.get(item.item_id)) for item in items],
        "statistics": personal_summary(list(by_item.values()), len(items)),
    }


def _assigned_ended_items(person, now=None):
    return PlanCourseItem.objects.filter(plan__plan_employees__person=person).filter(ended_q(now))


def employee_scores(person, *, plan_id=None, course_class=None, start_date=None, end_date=None, now=None) -> dict:
    items = _assigned_ended_items(person, now)
    if plan_id:
        items = items.filter(plan_id=plan_id)
    if course_class:
        items = items.filter(course__course_class=course_class)
    if start_date:
        items = items.filter(class_date__gte=start_date)
    if end_date:
        items = items.filter(class_date__lte=end_date)
    return _assigned_session_scores(person, items)


def employee_course_type_scores(person) -> dict:
    score = effective_score_expr()
    rows = (
        AttendanceEvaluation.objects.filter(person=person).filter(SELF_EVALUATED)
        .values("item__course__course_class")
        .annotate(
            course_count=Count("id"),
            graded_count=Count("id", filter=GRADED),
            avg_score=Avg(score),
            max_score=Max(score),
            min_score=Min(score),
        )
        .order_by("-avg_score", "item__course__course_class")
    )
    types = [
        {
            "courseClass": row["item__course__course_class"] or UNCATEGORIZED,
            "courseCount": row["course_count"],
            "gradedCount": row["graded_count"],
            "selfOnlyCount": row["course_count"] - row["graded_count"],
            "averageScore": _round2(row["avg_score"] or 0),
            "highestScore": _round2(row["max_score"] or 0),
            "lowestScore": _round2(row["min_score"] or 0),
        }
        for row in rows
    ]
    return {
        "courseTypes": types,
        "radarData": {
            "indicators": [{"name": t["courseClass"], "max": 100} for t in types],
            "values": [t["averageScore"] for t in types],
        },
    }


def employee_learning_progress(person, *, recent=5, now=None) -> dict:
    plans = list(TrainingPlan.objects.filter(plan_employees__person=person).order_by("-plan_start_datetime"))
    items = PlanCourseItem.objects.filter(plan__in=plans)
    evaluations = list(
        AttendanceEvaluation.objects.filter(person=person, item__plan__in=plans).filter(SELF_EVALUATED)
    )
    evaluated_ids = {ev.item_id for ev in evaluations}

    total = items.count()
    graded = [ev for ev in evaluations if ev.is_graded]
    overall = {
        "totalPlans": len(plans),
        "totalCourses": total,
        "endedCourses": items.filter(ended_q(now)).count(),
        "completedCourses": len(evaluations),
        "gradedCourses": len(graded),
        "selfOnlyCourses": len(evaluations) - len(graded),
        "progressPercentage": percentage(len(evaluations), total),
        "averageScore": summarize(
            [effective_score(ev.self_score, ev.teacher_score, ev.score_ratio) for ev in evaluations]
        )["averageScore"],
    }

    by_plan = defaultdict(list)
    plan_totals = dict(
        items.values("plan_id").annotate(n=Count("item_id")).order_by().values_list("plan_id", "n")
    )
    plan_of_item = dict(items.values_list("item_id", "plan_id"))
    for ev in evaluations:
        by_plan[plan_of_item.get(ev.item_id)].append(ev)

    plan_progress = []
    for plan in plans:
        plan_evals = by_plan.get(plan.plan_id, [])
        plan_total = plan_totals.get(plan.plan_id, 0)
        plan_progress.append({
            "planId": plan.plan_id,
            "planName": plan.plan_name,
            "planStatus": plan.plan_status,
            "totalCourses": plan_total,
            "completedCourses": len(plan_evals),
            "gradedCourses": sum(1 for ev in plan_evals if ev.is_graded),
            "progressPercentage": percentage(len(plan_evals), plan_total),
            "averageScore": summarize(
                [effective_score(ev.self_score, ev.teacher_score, ev.score_ratio) for ev in plan_evals]
            )["averageScore"],
        })

    recent_items = (
        items.filter(ended_q(now)).select_related("plan", "course__teacher")
        .order_by("-class_date", "-class_begin_time")[:recent]
    )
    recent_courses = []
    for item in recent_items:
        row = _item_row(item)
        row["hasEvaluated"] = item.item_id in evaluated_ids
        recent_courses.append(row)

    return {"overall": overall, "planProgress": plan_progress, "recentCourses": recent_courses}


def employee_pending_evaluations(person, *, status="pending", limit=None, now=None) -> dict:
    items = (
        PlanCourseItem.objects.filter(plan__plan_employees__person=person)
        .filter(ended_q(now))
        .select_related("plan", "course__teacher")
        .order_by("-class_date", "-class_begin_time")
    )
    done = dict(
        AttendanceEvaluation.objects.filter(person=person).filter(SELF_EVALUATED)
        .values_list("item_id", "self_score")
    )
    if status == "pending":
        items = items.exclude(item_id__in=list(done))
    total = items.count()
    if limit:
        items = items[:limit]

    rows = []
    for item in items:
        row = _item_row(item)
        row["hasEvaluated"] = item.item_id in done
        row["selfScore"] = round_or_none(done.get(item.item_id))
        rows.append(row)
    return {"total": total, "list": rows}


# ─────────────────────────────── schedules ──────────────────────────────

def build_schedule(items, start_date: date, end_date: date) -> dict:
    """Day-by-day calendar between two dates (inclusive)."""
    by_date = defaultdict(list)
    for item in items:
        by_date[item.class_date].append(_item_row(item))

    days = []
    day = start_date
    while day <= end_date:
        days.append({
            "date": fmt_date(day),
            "weekday": day.strftime("%A"),
            "courses": by_date.get(day, []),
        })
        day += timedelta(days=1)
    return {
        "startDate": fmt_date(start_date),
        "endDate": fmt_date(end_date),
        "totalClasses": sum(len(v) for v in by_date.values()),
        "days": days,
    }


def employee_schedule(person, start_date, end_date) -> dict:
    items = (
        PlanCourseItem.objects.filter(plan__plan_employees__person=person, class_date__range=(start_date, end_date))
        .select_related("plan", "course__teacher")
    )
    return build_schedule(items, start_date, end_date)


def teacher_schedule(teacher, start_date, end_date) -> dict:
    items = (
        PlanCourseItem.objects.filter(course__teacher=teacher, class_date__range=(start_date, end_date))
        .select_related("plan", "course__teacher")
    )
    return build_schedule(items, start_date, end_date)


# ─────────────────────────────── teacher ────────────────────────────────

def teacher_pending_evaluations(teacher, *, course_id=None, status="pending", now=None) -> dict:
    """Ended sessions of the teacher's courses with the students' self-evaluations."""
    qs = (
        _evaluations()
        .filter(item__course__teacher=teacher)
        .filter(SELF_EVALUATED)
        .filter(ended_q(now, "item__"))
    )
    if course_id:
        qs = qs.filter(item__course_id=course_id)
    if status == "pending":
        qs = qs.filter(teacher_score__isnull=True)

    grouped = OrderedDict()
    for ev in qs.order_by("-item__class_date", "-item__class_begin_time", "person__name"):
        entry = grouped.get(ev.item_id)
        if entry is None:
            entry = grouped[ev.item_id] = _item_row(ev.item)
            entry["students"] = []
        entry["students"].append({
            "personId": ev.person_id,
            "personName": ev.person.name,
            "selfScore": round_or_none(ev.self_score),
            "selfComment": ev.self_comment,
            "understanding": ev.understanding,
            "difficulty": ev.difficulty,
            "satisfaction": ev.satisfaction,
            "teacherScore": round_or_none(ev.teacher_score),
            "teacherComment": ev.teacher_comment,
            "scoreRatio": ev.score_ratio,
            "weightedScore": ev.weighted_score,
            "status": "graded" if ev.is_graded else "pending",
        })

    students = [s for entry in grouped.values() for s in entry["students"]]
    return {
        "totalCount": len(students),
        "pendingCount": sum(1 for s in students if s["status"] == "pending"),
        "courseItems": list(grouped.values()),
    }


def teacher_course_statistics(course) -> dict:
    items = list(course.course_items.select_related("plan").order_by("class_date", "class_begin_time"))
    evaluations = list(
        AttendanceEvaluation.objects.filter(item__course=course)
        .select_related("person", "item")
        .order_by("item__class_date", "item__class_begin_time", "person_id")
    )
    graded = [ev for ev in evaluations if ev.is_graded]
    scores = [ev.weighted_score for ev in graded]

    overview = {
        "courseId": course.course_id,
        "courseName": course.course_name,
        "courseClass": course.course_class,
        "totalClasses": len(items),
        "totalStudents": len({ev.person_id for ev in evaluations}),
        "totalRecords": len(evaluations),
        "gradedCount": len(graded),
        "passRate": percentage(sum(1 for s in scores if s >= PASS_SCORE), len(scores)),
        "excellentRate": percentage(sum(1 for s in scores if s >= EXCELLENT_SCORE), len(scores)),
    }
    overview.update(summarize(scores))

    by_item = defaultdict(list)
    for ev in evaluations:
        by_item[ev.item_id].append(ev)
    class_stats = []
    for item in items:
        item_evals = by_item.get(item.item_id, [])
        item_scores = [ev.weighted_score for ev in item_evals if ev.is_graded]
        class_stats.append({
            "itemId": item.item_id,
            "planName": item.plan.plan_name,
            "classDate": fmt_date(item.class_date),
            "classBeginTime": fmt_time(item.class_begin_time),
            "classEndTime": fmt_time(item.class_end_time),
            "location": item.location,
            "studentCount": len(item_evals),
            "evaluatedCount": len(item_scores),
            "averageScore": summarize(item_scores)["averageScore"],
        })

    by_student = OrderedDict()
    for ev in graded:
        by_student.setdefault(ev.person_id, (ev.person, []))[1].append(ev.weighted_score)
    student_scores = []
    for person, person_scores in by_student.values():
        student_scores.append({
            "personId": person.person_id,
            "personName": person.name,
            "classCount": len(person_scores),
            "averageScore": summarize(person_scores)["averageScore"],
            "latestScore": person_scores[-1],
            "trend": trend_of(person_scores),
        })
    student_scores.sort(key=lambda s: (-s["averageScore"], s["personName"]))

    return {
        "overview": overview,
        "scoreDistribution": score_distribution(scores),
        "classStats": class_stats,
        "studentScores": student_scores,
    }


def teacher_teaching_statistics(teacher, *, start_date=None, end_date=None, now=None, recent=5) -> dict:
    today = _today(now)
    start_date = start_date or date(today.year, 1, 1)
    end_date = end_date or today

    items = list(
        PlanCourseItem.objects.filter(course__teacher=teacher, class_date__range=(start_date, end_date))
        .select_related("plan", "course__teacher")
        .order_by("-class_date", "-class_begin_time")
    )
    evaluations = list(AttendanceEvaluation.objects.filter(item__in=[i.item_id for i in items]))
    graded = [ev for ev in evaluations if ev.is_graded]

    per_class = OrderedDict()
    for item in items:
        entry = per_class.setdefault(item.course.course_class or UNCATEGORIZED, {"classCount": 0, "courses": set()})
        entry["classCount"] += 1
        entry["courses"].add(item.course_id)

    return {
        "startDate": fmt_date(start_date),
        "endDate": fmt_date(end_date),
        "courseCount": len({item.course_id for item in items}),
        "classCount": len(items),
        "studentCount": len({ev.person_id for ev in evaluations}),
        "totalHours": _round2(sum(item.duration_hours for item in items)),
        "averageTeacherScore": summarize([ev.teacher_score for ev in graded])["averageScore"],
        "averageWeightedScore": summarize([ev.weighted_score for ev in graded])["averageScore"],
        "evaluationRate": percentage(len(graded), len(evaluations)),
        "courseTypeDistribution": [
            {"courseClass": name, "classCount": v["classCount"], "courseCount": len(v["courses"])}
            for name, v in per_class.items()
        ],
        "recentClasses": [_item_row(item) for item in items[:recent]],
    }


# ─────────────────────────────── planner ────────────────────────────────

def course_class_distribution() -> list[dict]:
    """Platform-wide per-category breakdown over graded records."""
    expr = weighted_score_expr("course_items__evaluations__")
    graded = Q(course_items__evaluations__teacher_score__isnull=False)
    rows = (
        Course.objects.values("course_class")
        .annotate(
            course_count=Count("course_id", distinct=True),
            class_count=Count("course_items", distinct=True),
            graded_count=Count("course_items__evaluations", filter=graded),
            avg_score=Avg(expr),
            max_score=Max(expr),
            min_score=Min(expr),
        )
        .order_by("course_class")
    )
    return [
        {
            "courseClass": row["course_class"] or UNCATEGORIZED,
            "courseCount": row["course_count"],
            "classCount": row["class_count"],
            "gradedCount": row["graded_count"],
            "averageScore": _round2(row["avg_score"] or 0),
            "highestScore": _round2(row["max_score"] or 0),
            "lowestScore": _round2(row["min_score"] or 0),
        }
        for row in rows
    ]


def _course_rankings(top_n):
    graded = Q(course_items__evaluations__teacher_score__isnull=False)
    courses = (
        Course.objects.select_related("teacher")
        .annotate(
            graded_count=Count("course_items__evaluations", filter=graded),
            student_count=Count("course_items__evaluations__person", distinct=True),
            class_count=Count("course_items", distinct=True),
            avg_score=Avg(weighted_score_expr("course_items__evaluations__")),
        )
        .filter(graded_count__gt=0)
        .order_by("-avg_score", "course_id")[:top_n]
    )
    return [
        {
            "rank": rank,
            "courseId": c.course_id,
            "courseName": c.course_name,
            "courseClass": c.course_class,
            "teacherName": c.teacher.name,
            "classCount": c.class_count,
            "studentCount": c.student_count,
            "gradedCount": c.graded_count,
            "averageScore": _round2(c.avg_score),
        }
        for rank, c in enumerate(courses, start=1)
    ]


def _plan_rankings(top_n):
    graded = Q(course_items__evaluations__teacher_score__isnull=False)
    plans = (
        TrainingPlan.objects.annotate(
            graded_count=Count("course_items__evaluations", filter=graded),
            class_count=Count("course_items", distinct=True),
            avg_score=Avg(weighted_score_expr("course_items__evaluations__")),
        )
        .filter(graded_count__gt=0)
        .order_by("-avg_score", "plan_id")[:top_n]
    )
    plans = list(plans)
    # counted separately so the enrollment join does not multiply the evaluation rows
    employee_counts = dict(
        PlanEmployee.objects.filter(plan__in=plans)
        .values("plan_id").annotate(n=Count("id")).order_by()
        .values_list("plan_id", "n")
    )
    return [
        {
            "rank": rank,
            "planId": p.plan_id,
            "planName": p.plan_name,
            "planStatus": p.plan_status,
            "classCount": p.class_count,
            "employeeCount": employee_counts.get(p.plan_id, 0),
            "gradedCount": p.graded_count,
            "averageScore": _round2(p.avg_score),
        }
        for rank, p in enumerate(plans, start=1)
    ]


def _employee_rankings(top_n):
    graded = Q(evaluations__teacher_score__isnull=False)
    people = (
        Person.objects.filter(role=Role.EMPLOYEE)
        .annotate(
            graded_count=Count("evaluations", filter=graded),
            avg_score=Avg(weighted_score_expr("evaluations__")),
        )
        .filter(graded_count__gt=0)
        .order_by("-avg_score", "person_id")[:top_n]
    )
    return [
        {
            "rank": rank,
            "personId": p.person_id,
            "personName": p.name,
            "gradedCount": p.graded_count,
            "averageScore": _round2(p.avg_score),
        }
        for rank, p in enumerate(people, start=1)
    ]


def plan_status_statistics() -> list[dict]:
    counts = dict(
        TrainingPlan.objects.values("plan_status").annotate(n=Count("plan_id")).order_by()
        .values_list("plan_status", "n")
    )
    return [
        {"status": value, "label": label, "count": counts.get(value, 0)}
        for value, label in PlanStatus.choices
    ]


def teacher_statistics() -> list[dict]:
    graded = Q(courses__course_items__evaluations__teacher_score__isnull=False)
    teachers = (
        Person.objects.filter(role=Role.TEACHER)
        .annotate(
            course_count=Count("courses", distinct=True),
            class_count=Count("courses__course_items", distinct=True),
            graded_count=Count("courses__course_items__evaluations", filter=graded),
            avg_teacher_score=Avg("courses__course_items__evaluations__teacher_score"),
            avg_score=Avg(weighted_score_expr("courses__course_items__evaluations__")),
        )
        .order_by("name", "person_id")
    )
    return [
        {
            "teacherId": t.person_id,
            "teacherName": t.name,
            "courseCount": t.course_count,
            "classCount": t.class_count,
            "gradedCount": t.graded_count,
            "averageTeacherScore": _round2(t.avg_teacher_score or 0),
            "averageWeightedScore": _round2(t.avg_score or 0),
        }
        for t in teachers
    ]


def planner_analytics(*, top_n=10) -> dict:
    return {
        "overview": platform_statistics(),
        "courseRankings": _course_rankings(top_n),
        "planRankings": _plan_rankings(top_n),
        "employeeRankings": _employee_rankings(top_n),
        "courseClassDistribution": course_class_distribution(),
        "planStatusStatistics": plan_status_statistics(),
        "teacherStatistics": teacher_statistics(),
    }


def planner_employee_scores(employee, *, now=None) -> dict:
    data = {
        "personId": employee.person_id,
        "personName": employee.name,
        "planCount": employee.plan_memberships.count(),
    }
    data.update(_assigned_session_scores(employee, _assigned_ended_items(employee, now)))
    return data


def planner_course_evaluations(course) -> dict:
    evaluations = list(
        _evaluations().filter(item__course=course)
        .order_by("-item__class_date", "-item__class_begin_time", "person__name")
    )
    scores = [ev.weighted_score for ev in evaluations if ev.is_graded]
    summary = graded_summary(evaluations)
    summary["scoreDistribution"] = score_distribution(scores)
    return {
        "courseId": course.course_id,
        "courseName": course.course_name,
        "courseClass": course.course_class,
        "teacherName": course.teacher.name,
        "list": [evaluation_row(ev) for ev in evaluations],
        "statistics": summary,
    }


# ─────────────────────────────── home ───────────────────────────────────

def platform_statistics() -> dict:
    plan_counts = {row["status"]: row["count"] for row in plan_status_statistics()}
    avg = (
        AttendanceEvaluation.objects.filter(GRADED)
        .aggregate(avg=Avg(weighted_score_expr()))["avg"]
    )
    return {
        "courseCount": Course.objects.count(),
        "teacherCount": Person.objects.filter(role=Role.TEACHER).count(),
        "employeeCount": Person.objects.filter(role=Role.EMPLOYEE).count(),
        "planCount": sum(plan_counts.values()),
        "classCount": PlanCourseItem.objects.count(),
        "ongoingPlanCount": plan_counts[PlanStatus.IN_PROGRESS],
        "completedPlanCount": plan_counts[PlanStatus.COMPLETED],
        "averageScore": _round2(avg or 0),
    }


def _week_bounds(today):
    start = today - timedelta(days=today.weekday())
    return start, start + timedelta(days=6)


def personal_statistics(person, *, now=None) -> dict:
    today = _today(now)
    week_start, week_end = _week_bounds(today)

    if person.role == Role.EMPLOYEE:
        items = PlanCourseItem.objects.filter(plan__plan_employees__person=person)
        evaluations = list(AttendanceEvaluation.objects.filter(person=person).filter(SELF_EVALUATED))
        graded = [ev for ev in evaluations if ev.is_graded]
        return {
            "trainingPlanCount": person.plan_memberships.count(),
            "totalCourseCount": items.count(),
            "completedCourseCount": len(evaluations),
            "gradedCourseCount": len(graded),
            "averageScore": summarize(
                [effective_score(ev.self_score, ev.teacher_score, ev.score_ratio) for ev in evaluations]
            )["averageScore"],
            "todayCourseCount": items.filter(class_date=today).count(),
            "weekCourseCount": items.filter(class_date__range=(week_start, week_end)).count(),
        }

    if person.role == Role.TEACHER:
        items = PlanCourseItem.objects.filter(course__teacher=person)
        evaluations = AttendanceEvaluation.objects.filter(item__course__teacher=person)
        agg = evaluations.filter(GRADED).aggregate(
            avg_teacher=Avg("teacher_score"), avg_weighted=Avg(weighted_score_expr()),
        )
        return {
            "courseCount": person.courses.count(),
            "classCount": items.count(),
            "studentCount": evaluations.values("person_id").distinct().count(),
            "averageTeacherScore": _round2(agg["avg_teacher"] or 0),
            "averageWeightedScore": _round2(agg["avg_weighted"] or 0),
            "todayClassCount": items.filter(class_date=today).count(),
            "weekClassCount": items.filter(class_date__range=(week_start, week_end)).count(),
        }

    plans = TrainingPlan.objects.filter(creator=person)
    avg = (
        AttendanceEvaluation.objects.filter(item__plan__creator=person).filter(GRADED)
        .aggregate(avg=Avg(weighted_score_expr()))["avg"]
    )
    return {
        "planCount": plans.count(),
        "totalCourseCount": PlanCourseItem.objects.filter(plan__creator=person).count(),
        "totalStudentCount": (
            PlanEmployee.objects.filter(plan__creator=person).values("person_id").distinct().count()
        ),
        "averageScore": _round2(avg or 0),
    }
