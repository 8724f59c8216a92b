"""
Admin Dashboard Views

API Endpoints:
- GET /api/admin/dashboard/ - Portal-wide statistics for administrators

The payload is computed from aggregate queries only and cached for
``DASHBOARD_CACHE_TIMEOUT`` seconds, so figures may lag behind writes by
that much. Pass ``?refresh=true`` to bypass the cache.

Response Schema:
    {
        "students": {"total": int, "by_department": [{"department": str, "count": int}]},
        "courses": {"total": int, "active": int, "by_department": [...]},
        "registrations": {"total": int, "by_status": {...}, "by_department": [...]},
        "payments": {"total": int, "by_status": {...}, "by_department": [...]},
        "revenue_by_department": [{"department": str, "count": int, "total_amount": int}],
        "generated_at": str (ISO timestamp)
    }

Author: Student Portal Development Team
Version: 1.0.0
"""

import logging
from typing import Any, Dict

from django.conf import settings
from django.contrib.auth.models import User
from django.core.cache import cache
from django.db.models import Count
from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from core.paystack_integration.models import Payment
from core.paystack_integration.stats import payment_stats, successful_totals_by_department
from portal.courses.models import Course, CourseRegistration
from portal.courses.stats import course_stats, registration_stats
from portal.permissions import IsPortalAdmin
from portal.users.models import Profile

logger = logging.getLogger(__name__)

CACHE_KEY = "admin_dashboard_stats"


def _count_by(qs, field: str) -> Dict[str, int]:
    return {row[field]: row["count"] for row in qs.values(field).annotate(count=Count("id")).order_by(field)}


def _student_totals() -> Dict[str, Any]:
    students = User.objects.filter(profile__role=Profile.STUDENT, is_staff=False)
    by_department = (
        students.values("profile__department")
        .annotate(count=Count("id"))
        .order_by("profile__department")
    )
    return {
        "total": students.count(),
        "by_department": [
            {"department": row["profile__department"], "count": row["count"]} for row in by_department
        ],
    }


def build_dashboard() -> Dict[str, Any]:
    """Compute the dashboard payload from aggregate queries."""
    return {
        "students": _student_totals(),
        "courses": {
            "total": Course.objects.count(),
            "active": Course.objects.filter(is_active=True).count(),
            "by_department": course_stats(),
        },
        "registrations": {
            "total": CourseRegistration.objects.count(),
            "by_status": _count_by(CourseRegistration.objects.all(), "status"),
            "by_department": registration_stats(),
        },
        "payments": {
            "total": Payment.objects.count(),
            "by_status": _count_by(Payment.objects.all(), "status"),
            "by_department": payment_stats(),
        },
        "revenue_by_department": successful_totals_by_department(),
        "generated_at": timezone.now().isoformat(),
    }


@api_view(["GET"])
@permission_classes([IsPortalAdmin])
def get_dashboard(request):
    refresh = request.query_params.get("refresh", "").lower() in ("1", "true", "yes")

    data = None if refresh else cache.get(CACHE_KEY)
    if data is None:
        data = build_dashboard()
        cache.set(CACHE_KEY, data, timeout=settings.DASHBOARD_CACHE_TIMEOUT)
        logger.debug("Dashboard statistics recomputed")
    return Response(data)
