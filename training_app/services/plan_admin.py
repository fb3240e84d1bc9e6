"""Guarded deletes: refuse when dependent rows exist unless forced."""

import logging

from django.db import transaction

from training_app.exceptions import DependentRowsExist
from training_app.models import AttendanceEvaluation, PlanEmployee

logger = logging.getLogger(__name__)


def delete_plan(plan, *, force=False) -> dict:
    item_count = plan.course_items.count()
    employee_count = plan.plan_employees.count()
    evaluation_count = AttendanceEvaluation.objects.filter(item__plan=plan).count()
    counts = {
        "itemCount": item_count,
        "employeeCount": employee_count,
        "evaluationCount": evaluation_count,
    }
    if (item_count or employee_count) and not force:
        logger.warning(f"Refused to delete plan {plan.pk}: {counts}")
        raise DependentRowsExist(
            f"Plan has {item_count} scheduled session(s) and {employee_count} enrolled employee(s); "
            "pass force=true to delete them too.",
            data=counts,
        )
    with transaction.atomic():
        # sessions cascade to their evaluations
        plan.course_items.all().delete()
        plan.plan_employees.all().delete()
        plan.delete()
    return counts


def remove_plan_employee(plan, person, *, force=False) -> dict:
    membership = PlanEmployee.objects.get(plan=plan, person=person)
    evaluations = AttendanceEvaluation.objects.filter(item__plan=plan, person=person)
    counts = {"evaluationCount": evaluations.count()}
    if counts["evaluationCount"] and not force:
        logger.warning(f"Refused to remove person {person.pk} from plan {plan.pk}: {counts}")
        raise DependentRowsExist(
            f"The employee has {counts['evaluationCount']} evaluation record(s) in this plan; "
            "pass force=true to delete them too.",
            data=counts,
        )
    with transaction.atomic():
        evaluations.delete()
        membership.delete()
    return counts


def delete_course(course, *, force=False) -> dict:
    counts = {
        "scheduledCount": course.course_items.count(),
        "evaluationCount": AttendanceEvaluation.objects.filter(item__course=course).count(),
    }
    if counts["scheduledCount"] and not force:
        logger.warning(f"Refused to delete course {course.pk}: {counts}")
        raise DependentRowsExist(
            f"Course is scheduled {counts['scheduledCount']} time(s); pass force=true to delete the sessions too.",
            data=counts,
        )
    with transaction.atomic():
        course.course_items.all().delete()
        course.delete()
    return counts


def delete_course_item(item, *, force=False) -> dict:
    counts = {"evaluationCount": item.evaluations.count()}
    if counts["evaluationCount"] and not force:
        logger.warning(f"Refused to delete item {item.pk}: {counts}")
        raise DependentRowsExist(
            f"Session has {counts['evaluationCount']} evaluation record(s); pass force=true to delete them too.",
            data=counts,
        )
    with transaction.atomic():
        item.delete()
    return counts
