# training_app/urls/api.py
from rest_framework.routers import DefaultRouter

from accounts.views import AuthViewSet
from training_app.views.courseItemViewSet import CourseItemViewSet
from training_app.views.courseViewSet import CourseViewSet
from training_app.views.employeeViewSet import EmployeeViewSet
from training_app.views.home import HomeViewSet
from training_app.views.plannerViewSet import PlannerViewSet
from training_app.views.planViewSet import TrainingPlanViewSet
from training_app.views.teacherViewSet import TeacherViewSet

router = DefaultRouter(trailing_slash=False)

router.register("auth", AuthViewSet, basename="auth")                 # /api/auth/login, /register, /logout, /current-user
router.register("home", HomeViewSet, basename="home")                 # /api/home/statistics
router.register("employee", EmployeeViewSet, basename="employee")     # /api/employee/...
router.register("teacher", TeacherViewSet, basename="teacher")        # /api/teacher/...

# planner CRUD
router.register("planner/plans", TrainingPlanViewSet, basename="plans")
router.register("planner/courses", CourseViewSet, basename="courses")
router.register("planner/course-items", CourseItemViewSet, basename="course-items")
# planner lookups + analytics: /api/planner/teachers, /employees, /employees/{id}/scores, /analytics
router.register("planner", PlannerViewSet, basename="planner")

urlpatterns = [
    *router.urls
]
