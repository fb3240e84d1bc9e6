from datetime import time

import pytest
from rest_framework.exceptions import ValidationError

from training_app.exceptions import ScheduleConflict
from training_app.models import PlanCourseItem
from training_app.services.scheduling import (
    find_conflicts,
    intervals_overlap,
    reschedule_course_item,
    schedule_course_item,
    update_course,
)
from training_app.tests.conftest import PAST_DAY


@pytest.mark.parametrize("a,b,expected", [
    ((9, 11), (10, 12), True),
    ((9, 11), (11, 12), False),   # touching endpoints
    ((9, 11), (8, 9), False),
    ((9, 11), (9, 11), True),
    ((9, 12), (10, 11), True),    # containment
    ((14, 16), (15, 17), True),
])
def test_intervals_overlap(a, b, expected):
    assert intervals_overlap(time(a[0]), time(a[1]), time(b[0]), time(b[1])) is expected
    assert intervals_overlap(time(b[0]), time(b[1]), time(a[0]), time(a[1])) is expected


@pytest.mark.django_db
class TestScheduleCourseItem:
    def test_overlap_for_same_teacher_is_rejected(self, create_plan, create_course, create_item):
        course = create_course()
        create_item(course=course, class_begin_time=time(15), class_end_time=time(17))

        with pytest.raises(ScheduleConflict) as excinfo:
            schedule_course_item(
                plan=create_plan(), course=course, class_date=PAST_DAY,
                class_begin_time=time(14), class_end_time=time(16), location="Room 2",
            )
        assert "Teacher T" in str(excinfo.value.detail)
        assert excinfo.value.data["teacherName"] == "Teacher T"
        assert len(excinfo.value.data["conflicts"]) == 1
        assert PlanCourseItem.objects.count() == 1

    def test_adjacent_slot_is_accepted(self, create_plan, create_course, create_item):
        course = create_course()
        create_item(course=course)  # 09:00-11:00
        item = schedule_course_item(
            plan=create_plan(), course=course, class_date=PAST_DAY,
            class_begin_time=time(11), class_end_time=time(12),
        )
        assert item.pk is not None

    def test_other_teacher_or_other_day_is_free(self, create_plan, create_course, create_item, create_person):
        create_item()
        other_teacher = create_person("teacher", "Other Teacher")
        other_course = create_course(course_name="SQL", teacher=other_teacher)
        plan = create_plan()
        schedule_course_item(
            plan=plan, course=other_course, class_date=PAST_DAY,
            class_begin_time=time(9), class_end_time=time(11),
        )
        same_teacher_course = create_course(course_name="Git")
        schedule_course_item(
            plan=plan, course=same_teacher_course, class_date=PAST_DAY.replace(day=16),
            class_begin_time=time(9), class_end_time=time(11),
        )
        assert PlanCourseItem.objects.count() == 3

    def test_conflict_spans_courses_of_one_teacher(self, create_plan, create_course, create_item):
        create_item()
        second_course = create_course(course_name="Advanced Python")
        with pytest.raises(ScheduleConflict):
            schedule_course_item(
                plan=create_plan(), course=second_course, class_date=PAST_DAY,
                class_begin_time=time(10), class_end_time=time(12),
            )

    def test_begin_after_end_is_invalid(self, create_plan, create_course):
        with pytest.raises(ValidationError):
            schedule_course_item(
                plan=create_plan(), course=create_course(), class_date=PAST_DAY,
                class_begin_time=time(12), class_end_time=time(10),
            )


@pytest.mark.django_db
class TestReschedule:
    def test_moving_within_own_slot_ignores_itself(self, create_item):
        item = create_item()
        reschedule_course_item(item, class_end_time=time(12))
        item.refresh_from_db()
        assert item.class_end_time == time(12)

    def test_moving_onto_another_session_conflicts(self, create_course, create_item):
        course = create_course()
        create_item(course=course, class_begin_time=time(13), class_end_time=time(15))
        item = create_item(course=course)
        with pytest.raises(ScheduleConflict):
            reschedule_course_item(item, class_begin_time=time(14), class_end_time=time(16))
        item.refresh_from_db()
        assert item.class_begin_time == time(9)

    def test_find_conflicts_excludes_item(self, create_item, teacher):
        item = create_item()
        assert list(find_conflicts(teacher.pk, PAST_DAY, time(10), time(10, 30))) == [item]
        assert not find_conflicts(teacher.pk, PAST_DAY, time(10), time(10, 30), exclude_item_id=item.pk).exists()


@pytest.mark.django_db
class TestCourseItemApi:
    def test_conflicting_create_answers_400_envelope(self, client_for, planner, create_plan, create_course, create_item):
        course = create_course()
        create_item(course=course, class_begin_time=time(15), class_end_time=time(17))
        plan = create_plan()

        res = client_for(planner).post("/api/planner/course-items", {
            "planId": plan.pk, "courseId": course.pk, "classDate": "2024-01-15",
            "classBeginTime": "14:00:00", "classEndTime": "16:00:00", "location": "Room 2",
        }, format="json")

        assert res.status_code == 400
        body = res.json()
        assert body["code"] == 400
        assert "Teacher T" in body["message"]
        assert body["data"]["conflicts"][0]["classBeginTime"] == "15:00:00"

    def test_create_and_patch(self, client_for, planner, create_plan, create_course):
        client = client_for(planner)
        plan, course = create_plan(), create_course()
        res = client.post("/api/planner/course-items", {
            "planId": plan.pk, "courseId": course.pk, "classDate": "2024-01-15",
            "classBeginTime": "09:00", "classEndTime": "10:30",
        }, format="json")
        assert res.status_code == 200
        data = res.json()["data"]
        assert data["teacherName"] == "Teacher T"
        assert data["classEndTime"] == "10:30:00"

        res = client.patch(f"/api/planner/course-items/{data['itemId']}", {"location": "Lab"}, format="json")
        assert res.status_code == 200
        assert res.json()["data"]["location"] == "Lab"

    def test_unknown_course_is_404(self, client_for, planner, create_plan):
        res = client_for(planner).post("/api/planner/course-items", {
            "planId": create_plan().pk, "courseId": 9999, "classDate": "2024-01-15",
            "classBeginTime": "09:00", "classEndTime": "10:00",
        }, format="json")
        assert res.status_code == 404
        assert res.json()["code"] == 404


@pytest.mark.django_db
class TestCourseTeacherChange:
    def test_new_teacher_with_overlapping_session_is_rejected(self, create_person, create_course, create_item):
        course = create_course()
        create_item(course=course)  # 09:00-11:00
        other = create_person("teacher", "Teacher U")
        create_item(course=create_course(course_name="SQL", teacher=other),
                    class_begin_time=time(10), class_end_time=time(12))

        with pytest.raises(ScheduleConflict) as excinfo:
            update_course(course, teacher_id=other.pk)
        assert excinfo.value.data["teacherName"] == "Teacher U"
        assert [c["courseName"] for c in excinfo.value.data["conflicts"]] == ["SQL"]
        course.refresh_from_db()
        assert course.teacher.name == "Teacher T"

    def test_free_teacher_takes_over(self, create_person, create_course, create_item):
        course = create_course()
        create_item(course=course)
        other = create_person("teacher", "Teacher U")
        create_item(course=create_course(course_name="SQL", teacher=other),
                    class_begin_time=time(11), class_end_time=time(12))

        update_course(course, teacher_id=other.pk, course_desc="Moved")
        course.refresh_from_db()
        assert (course.teacher_id, course.course_desc) == (other.pk, "Moved")
