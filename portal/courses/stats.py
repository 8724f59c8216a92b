"""
Course and registration statistics for the admin views.

Both reports are grouped department -> program -> (level, semester).
"""

from typing import Any, Dict, List, Optional

from django.db.models import Count, Q, Sum

from core.stats import nest_rows

from .models import Course, CourseRegistration, RegistrationStatus


def course_stats() -> List[Dict[str, Any]]:
    rows = (
        Course.objects.values("department", "program", "level", "semester")
        .annotate(
            total_courses=Count("id"),
            total_credits=Sum("credits"),
            total_enrollment=Sum("current_enrollment"),
            max_capacity=Sum("max_students"),
        )
        .order_by("department", "program", "level", "semester")
    )
    return nest_rows(rows, "department", "program", "programs", "levels")


def registration_stats(
    semester: Optional[str] = None,
    academic_year: Optional[str] = None,
    status: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    Registration counts per status, optionally restricted to one semester,
    academic year or status. The semester grouped on is the registration's.
    """
    qs = CourseRegistration.objects.all()
    if semester:
        qs = qs.filter(semester=semester)
    if academic_year:
        qs = qs.filter(academic_year=academic_year)
    if status:
        qs = qs.filter(status=status)

    rows = (
        qs.values(
            "course__department", "course__program", "course__level", "semester"
        )
        .annotate(
            total_registrations=Count("id"),
            pending_registrations=Count("id", filter=Q(status=RegistrationStatus.PENDING)),
            approved_registrations=Count("id", filter=Q(status=RegistrationStatus.APPROVED)),
            rejected_registrations=Count("id", filter=Q(status=RegistrationStatus.REJECTED)),
            dropped_registrations=Count("id", filter=Q(status=RegistrationStatus.DROPPED)),
            total_credits=Sum("course__credits"),
        )
        .order_by("course__department", "course__program", "course__level", "semester")
    )
    flat = [
        {
            "department": row.pop("course__department"),
            "program": row.pop("course__program"),
            "level": row.pop("course__level"),
            **row,
        }
        for row in rows
    ]
    return nest_rows(flat, "department", "program", "programs", "levels")
