import logging
from datetime import time

from django.db import transaction
from django.db.models import Q
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from accounts.models import Person
from training_app.exceptions import ScheduleConflict
from training_app.models import PlanCourseItem
from training_app.utils import fmt_date, fmt_time

logger = logging.getLogger(__name__)


def intervals_overlap(a_begin: time, a_end: time, b_begin: time, b_end: time) -> bool:
    """Half-open [begin, end) overlap; touching endpoints do not overlap."""
    return a_begin < b_end and a_end > b_begin


def ended_q(now=None, prefix: str = "") -> Q:
    """Sessions that are over: an earlier day, or today with the end time passed."""
    now = timezone.localtime(now or timezone.now())
    today = now.date()
    return (
        Q(**{f"{prefix}class_date__lt": today})
        | Q(**{f"{prefix}class_date": today, f"{prefix}class_end_time__lte": now.time()})
    )


def find_conflicts(teacher_id, class_date, begin: time, end: time, *, exclude_item_id=None):
    """Sessions of the teacher on ``class_date`` overlapping [begin, end)."""
    qs = PlanCourseItem.objects.filter(
        course__teacher_id=teacher_id,
        class_date=class_date,
        class_begin_time__lt=end,
        class_end_time__gt=begin,
    )
    if exclude_item_id is not None:
        qs = qs.exclude(pk=exclude_item_id)
    return qs.select_related("course")


def _check_interval(begin, end):
    if begin >= end:
        raise ValidationError({"classEndTime": ["End time must be after begin time."]})


def _conflict_rows(conflicts):
    return [
        {
            "itemId": c.item_id,
            "courseName": c.course.course_name,
            "classDate": fmt_date(c.class_date),
            "classBeginTime": fmt_time(c.class_begin_time),
            "classEndTime": fmt_time(c.class_end_time),
        }
        for c in conflicts
    ]


def _assert_teacher_free(teacher: Person, class_date, begin, end, *, exclude_item_id=None):
    conflicts = list(find_conflicts(teacher.pk, class_date, begin, end, exclude_item_id=exclude_item_id))
    if not conflicts:
        return
    logger.info(f"Schedule conflict for teacher {teacher.pk} on {class_date}: {[c.pk for c in conflicts]}")
    raise ScheduleConflict(
        f"Teacher {teacher.name} already has a session on {fmt_date(class_date)} "
        f"overlapping {fmt_time(begin)}-{fmt_time(end)}.",
        data={
            "teacherId": teacher.pk,
            "teacherName": teacher.name,
            "conflicts": _conflict_rows(conflicts),
        },
    )


def schedule_course_item(*, plan, course, class_date, class_begin_time, class_end_time, location="") -> PlanCourseItem:
    """
    Create a session after checking the teacher is free.

    The teacher's row is locked for the duration of the check and the
    insert, so two planners scheduling the same teacher are serialised.
    """
    _check_interval(class_begin_time, class_end_time)
    with transaction.atomic():
        teacher = Person.objects.select_for_update().get(pk=course.teacher_id)
        _assert_teacher_free(teacher, class_date, class_begin_time, class_end_time)
        item = PlanCourseItem.objects.create(
            plan=plan,
            course=course,
            class_date=class_date,
            class_begin_time=class_begin_time,
            class_end_time=class_end_time,
            location=location or "",
        )
    logger.info(f"Scheduled item {item.pk}: course {course.pk} on {class_date} {class_begin_time}-{class_end_time}")
    return item


def reschedule_course_item(item: PlanCourseItem, **changes) -> PlanCourseItem:
    """Apply partial changes to a session, re-running the conflict check against its new slot."""
    for field, value in changes.items():
        setattr(item, field, value)
    _check_interval(item.class_begin_time, item.class_end_time)

    with transaction.atomic():
        teacher = Person.objects.select_for_update().get(pk=item.course.teacher_id)
        _assert_teacher_free(
            teacher, item.class_date, item.class_begin_time, item.class_end_time,
            exclude_item_id=item.pk,
        )
        item.save()
    return item


def update_course(course, **changes):
    """
    Apply changes to a course. Moving it to another teacher checks every
    scheduled session of the course against that teacher's timetable.
    """
    new_teacher_id = changes.get("teacher_id", course.teacher_id)
    with transaction.atomic():
        if new_teacher_id != course.teacher_id:
            teacher = Person.objects.select_for_update().get(pk=new_teacher_id)
            conflicts = {}
            for item in course.course_items.all():
                overlapping = find_conflicts(
                    teacher.pk, item.class_date, item.class_begin_time, item.class_end_time,
                ).exclude(course_id=course.pk)
                conflicts.update((c.pk, c) for c in overlapping)
            conflicts = list(conflicts.values())
            if conflicts:
                logger.info(f"Refused to move course {course.pk} to teacher {teacher.pk}: {[c.pk for c in conflicts]}")
                raise ScheduleConflict(
                    f"Teacher {teacher.name} already has sessions overlapping the schedule of "
                    f"{course.course_name}.",
                    data={
                        "teacherId": teacher.pk,
                        "teacherName": teacher.name,
                        "conflicts": _conflict_rows(conflicts),
                    },
                )
        for field, value in changes.items():
            setattr(course, field, value)
        course.save()
    return course
