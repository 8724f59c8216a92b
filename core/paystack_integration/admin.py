"""
Payments in the Django admin are read-only; Paystack is the source of truth.
"""

from django.contrib import admin
from django.http import HttpRequest

from .models import Payment, PaymentEvent


class PaymentEventInline(admin.TabularInline):
    model = PaymentEvent
    extra = 0
    can_delete = False
    fields = ("created_at", "source", "outcome", "applied", "anomaly", "detail")
    readonly_fields = fields

    def has_add_permission(self, request: HttpRequest, obj=None) -> bool:
        return False


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    inlines = (PaymentEventInline,)
    list_display = (
        "reference",
        "student",
        "amount",
        "currency",
        "payment_type",
        "department",
        "status",
        "paid_at",
        "created_at",
    )
    list_filter = ("status", "payment_type", "currency", "department")
    search_fields = ("reference", "gateway_reference", "student__username", "student__email")
    list_select_related = ("student",)
    date_hierarchy = "created_at"

    def get_readonly_fields(self, request: HttpRequest, obj=None):
        return [f.name for f in self.model._meta.fields]

    def has_add_permission(self, request: HttpRequest) -> bool:
        return False

    def has_delete_permission(self, request: HttpRequest, obj=None) -> bool:
        return False


@admin.register(PaymentEvent)
class PaymentEventAdmin(admin.ModelAdmin):
    list_display = ("payment", "source", "outcome", "applied", "anomaly", "created_at")
    list_filter = ("source", "outcome", "applied", "anomaly")
    search_fields = ("payment__reference",)
    list_select_related = ("payment",)

    def get_readonly_fields(self, request: HttpRequest, obj=None):
        return [f.name for f in self.model._meta.fields]

    def has_add_permission(self, request: HttpRequest) -> bool:
        return False
