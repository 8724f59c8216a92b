"""
Paystack Payment Views (core.paystack_integration)
==================================================

Endpoints
---------

1. InitializePaymentView
   - URL: /api/payments/initialize/
   - Method: POST
   - Auth: Student
   - Body: {"amount": 50000, "paymentType": "tuition", "description": "...", "currency": "NGN"}
   - Purpose:
       Creates a pending payment and opens a Paystack transaction. Returns
       the payment and the Paystack checkout handle (authorization_url,
       access_code, reference).

2. VerifyPaymentView
   - URL: /api/payments/verify/<reference>/
   - Method: GET
   - Auth: Owner or admin
   - Purpose:
       Asks Paystack for the transaction state and applies it.

3. PaystackWebhookView
   - URL: /api/payments/webhook/
   - Method: POST
   - Auth: None (HMAC-SHA512 signature in ``x-signature`` or
     ``x-paystack-signature``)

4. MyPaymentsView, PaymentsByDepartmentView, PaymentStatsView, PaymentDetailView
   - Read-side listings and statistics.

Author: Student Portal Development Team
Version: 1.0.0
"""

import logging

from rest_framework import generics, status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import PaymentNotFound, PortalException
from portal.permissions import IsOwnerOrAdmin, IsPortalAdmin, IsStudent, is_portal_admin

from .models import Payment
from .reconciler import PaymentReconciler
from .serializers import (
    InitializePaymentSerializer,
    PaymentDetailSerializer,
    PaymentFilterSerializer,
    PaymentSerializer,
)
from .stats import filter_payments, payment_stats

logger = logging.getLogger(__name__)

SIGNATURE_HEADERS = ("HTTP_X_SIGNATURE", "HTTP_X_PAYSTACK_SIGNATURE")


def get_reconciler() -> PaymentReconciler:
    return PaymentReconciler()


def _parse_filters(params) -> dict:
    serializer = PaymentFilterSerializer(data=params)
    serializer.is_valid(raise_exception=True)
    return dict(serializer.validated_data)


class InitializePaymentView(APIView):
    permission_classes = [IsStudent]

    def post(self, request: Request) -> Response:
        serializer = InitializePaymentSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            started = get_reconciler().initialize(
                request.user,
                data["amount"],
                data["payment_type"],
                description=data.get("description", ""),
                currency=data.get("currency"),
            )
        except PortalException as e:
            return Response(e.to_dict(), status=e.status_code)

        return Response(
            {"payment": PaymentSerializer(started.payment).data, "gateway": started.gateway},
            status=status.HTTP_201_CREATED,
        )


class VerifyPaymentView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request: Request, reference: str) -> Response:
        # ownership is checked before Paystack is contacted
        payment = Payment.objects.filter(gateway_reference=reference).only("student_id").first()
        if payment is not None and not (
            is_portal_admin(request.user) or payment.student_id == request.user.pk
        ):
            e = PaymentNotFound(details={"reference": reference})
            return Response(e.to_dict(), status=e.status_code)

        try:
            verified = get_reconciler().verify(reference)
        except PortalException as e:
            return Response(e.to_dict(), status=e.status_code)

        return Response(
            {
                "payment": PaymentSerializer(verified.payment).data,
                "gateway": verified.gateway,
                "applied": bool(verified.result and verified.result.applied),
            }
        )


class PaystackWebhookView(APIView):
    """
    Paystack webhook receiver.

    The raw body is read before DRF parses it; the signature covers those
    exact bytes.
    """

    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request: Request) -> Response:
        raw_body = request.body
        signature = next(
            (request.META[h] for h in SIGNATURE_HEADERS if request.META.get(h)), ""
        )

        try:
            outcome = get_reconciler().handle_webhook(raw_body, signature)
        except PortalException as e:
            return Response(e.to_dict(), status=e.status_code)

        return Response({"detail": "Webhook processed", "event": outcome.event, "handled": outcome.handled})


class MyPaymentsView(generics.ListAPIView):
    """Filters: status, paymentType, startDate, endDate."""

    serializer_class = PaymentSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        filters = _parse_filters(self.request.query_params)
        filters.pop("department", None)
        return filter_payments(
            Payment.objects.filter(student=self.request.user).select_related("student"), **filters
        )


class PaymentsByDepartmentView(generics.ListAPIView):
    """Admin listing. Filters: department, status, paymentType, startDate, endDate."""

    serializer_class = PaymentDetailSerializer
    permission_classes = [IsPortalAdmin]

    def get_queryset(self):
        filters = _parse_filters(self.request.query_params)
        return filter_payments(
            Payment.objects.select_related("student", "student__profile"), **filters
        )


class PaymentStatsView(APIView):
    permission_classes = [IsPortalAdmin]

    def get(self, request: Request) -> Response:
        return Response(payment_stats(**_parse_filters(request.query_params)))


class PaymentDetailView(generics.RetrieveAPIView):
    serializer_class = PaymentDetailSerializer
    permission_classes = [IsOwnerOrAdmin]
    queryset = Payment.objects.select_related("student", "student__profile")
