from rest_framework.permissions import BasePermission

from accounts.models import Role


def _role_of(request):
    user = request.user
    if not (user and user.is_authenticated):
        return None
    return getattr(user, "role", None)


class IsEmployee(BasePermission):
    message = "Only employees can access this resource."

    def has_permission(self, request, view):
        return _role_of(request) == Role.EMPLOYEE


class IsTeacher(BasePermission):
    message = "Only teachers can access this resource."

    def has_permission(self, request, view):
        return _role_of(request) == Role.TEACHER


class IsPlanner(BasePermission):
    message = "Only planners can access this resource."

    def has_permission(self, request, view):
        return _role_of(request) == Role.PLANNER


class TeachesCourse(BasePermission):
    """Teachers may only see the statistics of courses they own."""
    message = "You do not teach this course."

    def has_object_permission(self, request, view, obj):
        return obj.teacher_id == request.user.person_id
