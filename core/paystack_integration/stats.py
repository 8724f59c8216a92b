"""
Payment statistics, grouped department -> payment type -> status.
"""

from typing import Any, Dict, List, Optional

from django.db.models import Count, QuerySet, Sum

from core.stats import nest_rows

from .models import Payment, PaymentStatus


def filter_payments(
    qs: QuerySet,
    status: Optional[str] = None,
    payment_type: Optional[str] = None,
    department: Optional[str] = None,
    start_date=None,
    end_date=None,
) -> QuerySet:
    if status:
        qs = qs.filter(status=status)
    if payment_type:
        qs = qs.filter(payment_type=payment_type)
    if department:
        qs = qs.filter(department=department)
    if start_date:
        qs = qs.filter(created_at__date__gte=start_date)
    if end_date:
        qs = qs.filter(created_at__date__lte=end_date)
    return qs


def payment_stats(**filters) -> List[Dict[str, Any]]:
    rows = (
        filter_payments(Payment.objects.all(), **filters)
        .values("department", "payment_type", "status")
        .annotate(count=Count("id"), total_amount=Sum("amount"))
        .order_by("department", "payment_type", "status")
    )
    return nest_rows(rows, "department", "payment_type", "payment_types", "statuses")


def successful_totals_by_department() -> List[Dict[str, Any]]:
    return list(
        Payment.objects.filter(status=PaymentStatus.SUCCESSFUL)
        .values("department")
        .annotate(count=Count("id"), total_amount=Sum("amount"))
        .order_by("-total_amount")
    )
