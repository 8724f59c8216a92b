"""
Payment Models
==============

Models:
- Payment: A student's payment collected through Paystack
- PaymentEvent: Append-only audit trail of reconciler decisions

A payment is created ``pending`` and moved to ``successful``, ``failed`` or
``abandoned`` exactly once by ``core.paystack_integration.reconciler``. The
``outcome_applied_at`` column marks that the single transition happened.
Nothing else writes ``status``.

Amounts are integers in the currency's minor unit (kobo, pesewas, cents).

Author: Student Portal Development Team
Version: 1.0.0
"""

import uuid
from typing import Optional

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

from portal.choices import DEPARTMENT_CHOICES


class PaymentStatus(models.TextChoices):
    PENDING = "pending", _("Pending")
    SUCCESSFUL = "successful", _("Successful")
    FAILED = "failed", _("Failed")
    ABANDONED = "abandoned", _("Abandoned")


class PaymentType(models.TextChoices):
    TUITION = "tuition", _("Tuition")
    ACCOMMODATION = "accommodation", _("Accommodation")
    LIBRARY = "library", _("Library")
    OTHER = "other", _("Other")


class Currency(models.TextChoices):
    NGN = "NGN", "NGN"
    USD = "USD", "USD"
    EUR = "EUR", "EUR"
    GBP = "GBP", "GBP"


class Payment(models.Model):
    """
    A payment of a student, correlated with a Paystack transaction.

    Attributes:
        reference: Locally generated reference, sent to Paystack on initialization
        gateway_reference: Reference Paystack acknowledged; unique once assigned
        access_code / authorization_url: Checkout handle returned by Paystack
        metadata: Correlation data sent with the initialization call
        outcome_applied_at: Set together with the terminal status, never cleared
    """

    Status = PaymentStatus

    student = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="payments",
        verbose_name=_("Student"),
    )
    amount = models.PositiveBigIntegerField(
        validators=[MinValueValidator(0)],
        verbose_name=_("Amount (minor units)"),
    )
    currency = models.CharField(
        max_length=3, choices=Currency.choices, default=Currency.NGN, verbose_name=_("Currency")
    )
    payment_type = models.CharField(
        max_length=20, choices=PaymentType.choices, verbose_name=_("Payment Type")
    )
    department = models.CharField(
        max_length=64, choices=DEPARTMENT_CHOICES, blank=True, verbose_name=_("Department")
    )
    description = models.TextField(max_length=500, blank=True, verbose_name=_("Description"))

    reference = models.CharField(max_length=64, unique=True, editable=False, verbose_name=_("Reference"))
    gateway_reference = models.CharField(
        max_length=100, unique=True, null=True, blank=True, verbose_name=_("Gateway Reference")
    )
    access_code = models.CharField(max_length=100, blank=True, verbose_name=_("Access Code"))
    authorization_url = models.URLField(max_length=500, blank=True, verbose_name=_("Authorization URL"))

    status = models.CharField(
        max_length=12,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
        verbose_name=_("Status"),
    )
    metadata = models.JSONField(default=dict, blank=True, verbose_name=_("Metadata"))

    # gateway details recorded with the outcome
    gateway_response = models.CharField(max_length=255, blank=True)
    channel = models.CharField(max_length=50, blank=True)
    ip_address = models.CharField(max_length=45, blank=True)
    user_agent = models.CharField(max_length=255, blank=True)
    failure_reason = models.CharField(max_length=255, blank=True)

    paid_at = models.DateTimeField(null=True, blank=True)
    outcome_applied_at = models.DateTimeField(null=True, blank=True, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Payment")
        verbose_name_plural = _("Payments")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["student", "status", "-created_at"], name="paystack_pa_student_3c81d0_idx"),
            models.Index(fields=["department", "status", "-created_at"], name="paystack_pa_departm_9e0b27_idx"),
            models.Index(fields=["payment_type", "status"], name="paystack_pa_payment_71fa4c_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.reference} ({self.status}) {self.amount} {self.currency}"

    @staticmethod
    def generate_reference(prefix: Optional[str] = None) -> str:
        prefix = prefix or settings.PAYMENT_REFERENCE_PREFIX
        return f"{prefix}_{uuid.uuid4().hex}"

    def save(self, *args, **kwargs):
        if not self.reference:
            self.reference = self.generate_reference()
        super().save(*args, **kwargs)

    @property
    def is_terminal(self) -> bool:
        return self.status != PaymentStatus.PENDING


class PaymentEvent(models.Model):
    """
    One row per reconciler decision that changed a payment or contradicted
    its recorded outcome. Repeated identical outcomes are not logged.
    """

    SOURCE_INITIALIZE = "initialize"
    SOURCE_VERIFY = "verify"
    SOURCE_WEBHOOK = "webhook"
    SOURCE_CHOICES = [
        (SOURCE_INITIALIZE, _("Initialize")),
        (SOURCE_VERIFY, _("Verify")),
        (SOURCE_WEBHOOK, _("Webhook")),
    ]

    payment = models.ForeignKey(Payment, on_delete=models.CASCADE, related_name="events")
    source = models.CharField(max_length=12, choices=SOURCE_CHOICES)
    outcome = models.CharField(max_length=12, choices=PaymentStatus.choices)
    applied = models.BooleanField(default=False)
    anomaly = models.BooleanField(default=False)
    detail = models.CharField(max_length=255, blank=True)
    payload = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Payment Event")
        verbose_name_plural = _("Payment Events")
        ordering = ["created_at", "id"]

    def __str__(self) -> str:
        flag = "anomaly" if self.anomaly else ("applied" if self.applied else "recorded")
        return f"{self.payment.reference} {self.source}:{self.outcome} ({flag})"
