"""
Payment Reconciler
==================

Drives a ``Payment`` from ``pending`` to its outcome. Outcomes reach us from
two independent channels that can arrive in any order and more than once:

- the student's browser calling ``verify`` after the Paystack checkout
- Paystack's signed webhook

Rules
-----
- A payment leaves ``pending`` exactly once. ``apply_outcome`` is a single
  conditional UPDATE guarded on ``status='pending'``, so concurrent verify and
  webhook deliveries cannot both apply.
- Repeating the outcome that was applied is a no-op: no write, no audit row.
- A different outcome after the transition is recorded as an anomaly in
  ``PaymentEvent`` and does not change the payment. Success is therefore
  sticky.
- Webhook bodies are authenticated with HMAC-SHA512 over the raw bytes before
  anything is parsed or written.

Author: Student Portal Development Team
Version: 1.0.0
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from core.exceptions import (
    GatewayError,
    GatewayInitError,
    GatewayReferenceConflict,
    InvalidPayload,
    InvalidSignature,
    PaymentNotFound,
)

from .client import PaystackClient
from .models import Payment, PaymentEvent, PaymentStatus
from .signature import verify_signature

logger = logging.getLogger(__name__)
security_logger = logging.getLogger("portal.security")

WEBHOOK_EVENT_OUTCOMES: Dict[str, str] = {
    "charge.success": PaymentStatus.SUCCESSFUL,
    "charge.failed": PaymentStatus.FAILED,
    "transfer.failed": PaymentStatus.FAILED,
}

GATEWAY_STATUS_OUTCOMES: Dict[str, str] = {
    "success": PaymentStatus.SUCCESSFUL,
    "failed": PaymentStatus.FAILED,
    "abandoned": PaymentStatus.ABANDONED,
}


def outcome_from_gateway_status(gateway_status: Optional[str]) -> Optional[str]:
    """
    Map a Paystack transaction status to a payment outcome.

    Returns None for statuses that are not final yet (``ongoing``, ``pending``,
    ``processing``, ...).
    """
    return GATEWAY_STATUS_OUTCOMES.get((gateway_status or "").lower())


# ---------- results ----------


@dataclass
class ApplyResult:
    payment: Payment
    outcome: str
    applied: bool = False
    anomaly: bool = False


@dataclass
class InitializeResult:
    payment: Payment
    gateway: Dict[str, Any] = field(default_factory=dict)


@dataclass
class VerifyResult:
    payment: Payment
    gateway: Dict[str, Any] = field(default_factory=dict)
    result: Optional[ApplyResult] = None


@dataclass
class WebhookResult:
    event: str
    handled: bool = False
    result: Optional[ApplyResult] = None


# ---------- helpers ----------


def _clip(value: Any, length: int) -> str:
    return str(value or "")[:length]


def _gateway_fields(outcome: str, data: Dict[str, Any], now) -> Dict[str, Any]:
    """Columns recorded together with the outcome."""
    fields: Dict[str, Any] = {}
    if data.get("gateway_response"):
        fields["gateway_response"] = _clip(data["gateway_response"], 255)
    if data.get("channel"):
        fields["channel"] = _clip(data["channel"], 50)
    if data.get("ip_address"):
        fields["ip_address"] = _clip(data["ip_address"], 45)
    metadata = data.get("metadata")
    if isinstance(metadata, dict) and metadata.get("user_agent"):
        fields["user_agent"] = _clip(metadata["user_agent"], 255)

    if outcome == PaymentStatus.SUCCESSFUL:
        paid_at = data.get("paid_at") or data.get("paidAt")
        fields["paid_at"] = (parse_datetime(paid_at) if isinstance(paid_at, str) else None) or now
    elif outcome == PaymentStatus.FAILED:
        fields["failure_reason"] = _clip(
            data.get("gateway_response") or data.get("message") or "Payment failed", 255
        )
    return fields


class PaymentReconciler:
    """
    Owner of every payment status change.

    Example:
        >>> reconciler = PaymentReconciler()
        >>> started = reconciler.initialize(student, 50000, "tuition", "Semester 1 fees")
        >>> started.gateway["authorization_url"]
        >>> reconciler.verify(started.payment.gateway_reference).payment.status
        'successful'
    """

    def __init__(
        self,
        client: Optional[PaystackClient] = None,
        webhook_secret: Optional[str] = None,
    ) -> None:
        self.client = client or PaystackClient()
        self.webhook_secret = (
            webhook_secret if webhook_secret is not None else settings.PAYSTACK_WEBHOOK_SECRET
        )

    # --- initialize ---

    def initialize(
        self,
        student,
        amount: int,
        payment_type: str,
        description: str = "",
        currency: Optional[str] = None,
    ) -> InitializeResult:
        """
        Create a pending payment and open a Paystack transaction for it.

        The payment row is committed before Paystack is called, so a gateway
        failure leaves it ``pending`` for a later sweep.

        Raises:
            GatewayInitError: Paystack unreachable or refused the transaction
            GatewayReferenceConflict: Paystack returned a reference already in use
        """
        profile = getattr(student, "profile", None)
        department = getattr(profile, "department", "") or ""

        payment = Payment.objects.create(
            student=student,
            amount=amount,
            currency=currency or settings.DEFAULT_CURRENCY,
            payment_type=payment_type,
            description=description or "",
            department=department,
        )
        payment.metadata = {
            "payment_id": payment.pk,
            "student_id": student.pk,
            "payment_type": payment_type,
            "department": department,
            "reference": payment.reference,
        }
        payment.save(update_fields=["metadata", "updated_at"])

        try:
            data = self.client.initialize_transaction(
                email=student.email,
                amount=payment.amount,
                reference=payment.reference,
                currency=payment.currency,
                metadata=payment.metadata,
            )
        except GatewayError as e:
            logger.exception("Paystack initialization failed for payment %s", payment.reference)
            raise GatewayInitError(
                e.message,
                gateway_status=e.gateway_status,
                details={**e.details, "payment_id": payment.pk, "reference": payment.reference},
            ) from e

        payment.gateway_reference = data.get("reference") or payment.reference
        payment.access_code = _clip(data.get("access_code"), 100)
        payment.authorization_url = _clip(data.get("authorization_url"), 500)
        try:
            with transaction.atomic():
                payment.save(
                    update_fields=["gateway_reference", "access_code", "authorization_url", "updated_at"]
                )
                PaymentEvent.objects.create(
                    payment=payment,
                    source=PaymentEvent.SOURCE_INITIALIZE,
                    outcome=PaymentStatus.PENDING,
                    detail="Transaction opened",
                    payload=data,
                )
        except IntegrityError:
            logger.error(
                "Gateway reference %s of payment %s is already assigned",
                payment.gateway_reference,
                payment.reference,
            )
            raise GatewayReferenceConflict(
                details={"payment_id": payment.pk, "gateway_reference": payment.gateway_reference}
            ) from None

        logger.info(
            "Payment %s initialized for student %s (%s %s, %s)",
            payment.reference,
            student.pk,
            payment.amount,
            payment.currency,
            payment.payment_type,
        )
        return InitializeResult(payment=payment, gateway=data)

    # --- verify ---

    def verify(self, gateway_reference: str) -> VerifyResult:
        """
        Ask Paystack for the transaction state and apply it.

        Raises:
            PaymentNotFound: no payment carries this gateway reference
            GatewayError: Paystack unreachable or refused the request
        """
        try:
            payment = Payment.objects.get(gateway_reference=gateway_reference)
        except Payment.DoesNotExist:
            raise PaymentNotFound(details={"reference": gateway_reference}) from None

        data = self.client.verify_transaction(gateway_reference)

        outcome = outcome_from_gateway_status(data.get("status"))
        if outcome is None:
            logger.info(
                "Payment %s still open at Paystack (status=%s)", payment.reference, data.get("status")
            )
            return VerifyResult(payment=payment, gateway=data)

        if outcome == PaymentStatus.SUCCESSFUL and data.get("amount") not in (None, payment.amount):
            logger.warning(
                "Payment %s: Paystack reports amount %s, expected %s",
                payment.reference,
                data.get("amount"),
                payment.amount,
            )

        result = self.apply_outcome(payment, outcome, source=PaymentEvent.SOURCE_VERIFY, gateway_data=data)
        return VerifyResult(payment=result.payment, gateway=data, result=result)

    # --- webhook ---

    def handle_webhook(self, raw_body: bytes, signature: Optional[str]) -> WebhookResult:
        """
        Authenticate and apply a Paystack webhook delivery.

        Unknown event kinds are acknowledged without touching any payment.

        Raises:
            InvalidSignature: signature missing or wrong (nothing is written)
            InvalidPayload: body is not a JSON object
            PaymentNotFound: the referenced payment does not exist
        """
        if not verify_signature(raw_body, self.webhook_secret, signature or ""):
            security_logger.warning("Rejected Paystack webhook with invalid signature")
            raise InvalidSignature()

        try:
            body = json.loads(raw_body)
        except (TypeError, ValueError):
            raise InvalidPayload("Webhook body is not valid JSON") from None
        if not isinstance(body, dict):
            raise InvalidPayload("Webhook body must be a JSON object")

        event = str(body.get("event") or "")
        outcome = WEBHOOK_EVENT_OUTCOMES.get(event)
        if outcome is None:
            logger.info("Ignoring Paystack webhook event %r", event)
            return WebhookResult(event=event)

        data = body.get("data") if isinstance(body.get("data"), dict) else {}
        reference = data.get("reference")
        payment = None
        if reference:
            payment = (
                Payment.objects.filter(Q(gateway_reference=reference) | Q(reference=reference))
                .order_by("pk")
                .first()
            )
        if payment is None:
            logger.warning("Paystack webhook %s for unknown reference %r", event, reference)
            raise PaymentNotFound(details={"reference": reference, "event": event})

        result = self.apply_outcome(payment, outcome, source=PaymentEvent.SOURCE_WEBHOOK, gateway_data=data)
        return WebhookResult(event=event, handled=True, result=result)

    # --- outcome ---

    def apply_outcome(
        self,
        payment: Payment,
        outcome: str,
        *,
        source: str,
        gateway_data: Optional[Dict[str, Any]] = None,
    ) -> ApplyResult:
        """
        Move ``payment`` from pending to ``outcome``, at most once.

        Returns:
            ApplyResult with ``applied`` True when this call made the
            transition, ``anomaly`` True when the payment already carries a
            different outcome.
        """
        gateway_data = gateway_data or {}
        now = timezone.now()

        with transaction.atomic():
            updated = Payment.objects.filter(pk=payment.pk, status=PaymentStatus.PENDING).update(
                status=outcome,
                outcome_applied_at=now,
                updated_at=now,
                **_gateway_fields(outcome, gateway_data, now),
            )
            if updated:
                PaymentEvent.objects.create(
                    payment_id=payment.pk,
                    source=source,
                    outcome=outcome,
                    applied=True,
                    payload=gateway_data,
                )
                payment.refresh_from_db()
                logger.info("Payment %s -> %s (via %s)", payment.reference, outcome, source)
                return ApplyResult(payment=payment, outcome=outcome, applied=True)

            payment.refresh_from_db()
            if payment.status == outcome:
                logger.debug(
                    "Payment %s already %s; %s delivery ignored", payment.reference, outcome, source
                )
                return ApplyResult(payment=payment, outcome=outcome)

            PaymentEvent.objects.create(
                payment_id=payment.pk,
                source=source,
                outcome=outcome,
                anomaly=True,
                detail=_clip(f"Payment is {payment.status}; conflicting outcome {outcome} ignored", 255),
                payload=gateway_data,
            )
        logger.warning(
            "Payment %s is %s but %s reported %s; keeping %s",
            payment.reference,
            payment.status,
            source,
            outcome,
            payment.status,
        )
        return ApplyResult(payment=payment, outcome=outcome, anomaly=True)
