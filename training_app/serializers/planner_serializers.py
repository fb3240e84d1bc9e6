from rest_framework import serializers
from rest_framework.exceptions import NotFound

from accounts.models import Person, Role
from training_app.models import Course, PlanCourseItem, PlanStatus, TrainingPlan
from training_app.services import scheduling
from training_app.utils import DATE_FORMAT, DATETIME_FORMAT, TIME_FORMAT, LabelChoiceField


def resolve(model, pk, message):
    """Fetch a referenced row or answer 404."""
    try:
        return model.objects.get(pk=pk)
    except model.DoesNotExist:
        raise NotFound(message)


class PersonBriefSerializer(serializers.ModelSerializer):
    personId = serializers.IntegerField(source="person_id", read_only=True)

    class Meta:
        model = Person
        fields = ["personId", "name", "role"]


# ───────────────────────────── plans ─────────────────────────────

class TrainingPlanSerializer(serializers.ModelSerializer):
    planId            = serializers.IntegerField(source="plan_id", read_only=True)
    planName          = serializers.CharField(source="plan_name", max_length=50)
    planStatus        = LabelChoiceField(source="plan_status", choices=PlanStatus.choices, required=False)
    planStartDatetime = serializers.DateTimeField(
        source="plan_start_datetime", format=DATETIME_FORMAT, input_formats=[DATETIME_FORMAT, "iso-8601"],
    )
    planEndDatetime   = serializers.DateTimeField(
        source="plan_end_datetime", format=DATETIME_FORMAT, input_formats=[DATETIME_FORMAT, "iso-8601"],
    )
    creatorId         = serializers.IntegerField(source="creator_id", read_only=True)
    creatorName       = serializers.CharField(source="creator.name", read_only=True)
    employeeCount     = serializers.SerializerMethodField()
    courseCount       = serializers.SerializerMethodField()

    class Meta:
        model = TrainingPlan
        fields = [
            "planId", "planName", "planStatus", "planStartDatetime", "planEndDatetime",
            "creatorId", "creatorName", "employeeCount", "courseCount",
        ]

    def get_employeeCount(self, obj):
        count = getattr(obj, "employee_count", None)
        return obj.plan_employees.count() if count is None else count

    def get_courseCount(self, obj):
        count = getattr(obj, "course_count", None)
        return obj.course_items.count() if count is None else count

    def validate(self, attrs):
        start = attrs.get("plan_start_datetime", getattr(self.instance, "plan_start_datetime", None))
        end = attrs.get("plan_end_datetime", getattr(self.instance, "plan_end_datetime", None))
        if start and end and start >= end:
            raise serializers.ValidationError({"planEndDatetime": ["End must be after start."]})
        return attrs


class TrainingPlanDetailSerializer(TrainingPlanSerializer):
    courseItems = serializers.SerializerMethodField()
    employees   = serializers.SerializerMethodField()

    class Meta(TrainingPlanSerializer.Meta):
        fields = TrainingPlanSerializer.Meta.fields + ["courseItems", "employees"]

    def get_courseItems(self, obj):
        items = obj.course_items.select_related("plan", "course__teacher").order_by("class_date", "class_begin_time")
        return CourseItemSerializer(items, many=True).data

    def get_employees(self, obj):
        people = Person.objects.filter(plan_memberships__plan=obj).order_by("person_id")
        return PersonBriefSerializer(people, many=True).data


class AddPlanEmployeesSerializer(serializers.Serializer):
    employeeIds = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)

    def validate_employeeIds(self, value):
        ids = list(dict.fromkeys(value))
        found = set(Person.objects.filter(pk__in=ids, role=Role.EMPLOYEE).values_list("person_id", flat=True))
        invalid = [pk for pk in ids if pk not in found]
        if invalid:
            raise serializers.ValidationError(f"Not employees or unknown: {invalid}")
        return ids


# ───────────────────────────── courses ───────────────────────────

class CourseSerializer(serializers.ModelSerializer):
    courseId      = serializers.IntegerField(source="course_id", read_only=True)
    courseName    = serializers.CharField(source="course_name", max_length=50)
    courseDesc    = serializers.CharField(source="course_desc", max_length=100, required=False, allow_blank=True)
    courseRequire = serializers.CharField(source="course_require", max_length=500, required=False, allow_blank=True)
    courseClass   = serializers.CharField(source="course_class", max_length=20, required=False, allow_blank=True)
    teacherId     = serializers.IntegerField(source="teacher_id")
    teacherName   = serializers.CharField(source="teacher.name", read_only=True)

    class Meta:
        model = Course
        fields = ["courseId", "courseName", "courseDesc", "courseRequire", "courseClass", "teacherId", "teacherName"]

    def validate_teacherId(self, value):
        teacher = resolve(Person, value, "Teacher not found.")
        if teacher.role != Role.TEACHER:
            raise serializers.ValidationError("The selected person is not a teacher.")
        return value

    def update(self, instance, validated_data):
        return scheduling.update_course(instance, **validated_data)


# ───────────────────────────── sessions ──────────────────────────

class CourseItemSerializer(serializers.ModelSerializer):
    itemId         = serializers.IntegerField(source="item_id", read_only=True)
    planId         = serializers.IntegerField(source="plan_id")
    planName       = serializers.CharField(source="plan.plan_name", read_only=True)
    courseId       = serializers.IntegerField(source="course_id")
    courseName     = serializers.CharField(source="course.course_name", read_only=True)
    teacherId      = serializers.IntegerField(source="course.teacher_id", read_only=True)
    teacherName    = serializers.CharField(source="course.teacher.name", read_only=True)
    classDate      = serializers.DateField(source="class_date", format=DATE_FORMAT, input_formats=[DATE_FORMAT])
    classBeginTime = serializers.TimeField(
        source="class_begin_time", format=TIME_FORMAT, input_formats=[TIME_FORMAT, "%H:%M"],
    )
    classEndTime   = serializers.TimeField(
        source="class_end_time", format=TIME_FORMAT, input_formats=[TIME_FORMAT, "%H:%M"],
    )
    location       = serializers.CharField(max_length=100, required=False, allow_blank=True)

    class Meta:
        model = PlanCourseItem
        fields = [
            "itemId", "planId", "planName", "courseId", "courseName", "teacherId", "teacherName",
            "classDate", "classBeginTime", "classEndTime", "location",
        ]

    def validate(self, attrs):
        if "plan_id" in attrs:
            attrs["plan"] = resolve(TrainingPlan, attrs.pop("plan_id"), "Training plan not found.")
        if "course_id" in attrs:
            attrs["course"] = resolve(Course, attrs.pop("course_id"), "Course not found.")
        begin = attrs.get("class_begin_time", getattr(self.instance, "class_begin_time", None))
        end = attrs.get("class_end_time", getattr(self.instance, "class_end_time", None))
        if begin and end and begin >= end:
            raise serializers.ValidationError({"classEndTime": ["End time must be after begin time."]})
        return attrs

    def create(self, validated_data):
        return scheduling.schedule_course_item(**validated_data)

    def update(self, instance, validated_data):
        return scheduling.reschedule_course_item(instance, **validated_data)

