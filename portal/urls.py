"""
Student Portal URL Configuration

URL Structure (mounted under /api/):
- /api/auth/: Authentication endpoints (JWT cookies, self-registration, me)
- /api/courses/: Course catalogue and the Registration Ledger

The explicit registration paths are listed before the course router so that
``courses/register/`` or ``courses/stats/`` never resolve as a course detail.

Author: Student Portal Development Team
Version: 1.0.0
"""

from typing import List

from django.urls import URLPattern, include, path
from rest_framework.routers import SimpleRouter

from .courses import views as course_views
from .users import views as user_views

app_name = "portal"

# --- Authentication ---

auth_urlpatterns: List[URLPattern] = [
    path("token/", user_views.PortalTokenObtainPairView.as_view(), name="token_obtain_pair"),
    path("token/refresh/", user_views.PortalTokenRefreshView.as_view(), name="token_refresh"),
    path("logout/", user_views.LogoutView.as_view(), name="logout"),
    path("register/", user_views.StudentRegistrationView.as_view(), name="register"),
    path("me/", user_views.CurrentUserView.as_view(), name="me"),
]

# --- Courses & Registration Ledger ---


def _create_courses_router() -> SimpleRouter:
    router = SimpleRouter()
    router.register(r"", course_views.CourseViewSet, basename="course")
    return router


courses_router = _create_courses_router()

courses_urlpatterns: List[URLPattern] = [
    path("register/", course_views.RegisterForCourseView.as_view(), name="register"),
    path("my-registrations/", course_views.MyRegistrationsView.as_view(), name="my-registrations"),
    path("registrations/", course_views.RegistrationListView.as_view(), name="registration-list"),
    path(
        "registrations/stats/",
        course_views.RegistrationStatsView.as_view(),
        name="registration-stats",
    ),
    path(
        "registrations/<int:pk>/approve/",
        course_views.ApproveRegistrationView.as_view(),
        name="registration-approve",
    ),
    path(
        "registrations/<int:pk>/reject/",
        course_views.RejectRegistrationView.as_view(),
        name="registration-reject",
    ),
    path(
        "registrations/<int:pk>/drop/",
        course_views.DropRegistrationView.as_view(),
        name="registration-drop",
    ),
    # catalogue: list/create, stats, detail
    path("", include(courses_router.urls)),
]

urlpatterns: List[URLPattern] = [
    path("auth/", include((auth_urlpatterns, "auth"))),
    path("courses/", include((courses_urlpatterns, "courses"))),
]
