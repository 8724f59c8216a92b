from django.conf import settings
from django.utils.translation import gettext_lazy as _
from rest_framework import serializers

from .models import Currency, Payment, PaymentStatus, PaymentType


class PaymentSerializer(serializers.ModelSerializer):
    student_username = serializers.CharField(source="student.username", read_only=True)

    class Meta:
        model = Payment
        fields = [
            "id",
            "student",
            "student_username",
            "amount",
            "currency",
            "payment_type",
            "department",
            "description",
            "reference",
            "gateway_reference",
            "access_code",
            "authorization_url",
            "status",
            "gateway_response",
            "channel",
            "failure_reason",
            "paid_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class PaymentDetailSerializer(PaymentSerializer):
    """Detail view with the student's academic placement."""

    student_reference_number = serializers.CharField(
        source="student.profile.reference_number", read_only=True, default=None
    )
    student_program = serializers.CharField(source="student.profile.program", read_only=True, default=None)
    student_level = serializers.IntegerField(source="student.profile.level", read_only=True, default=None)

    class Meta(PaymentSerializer.Meta):
        fields = PaymentSerializer.Meta.fields + [
            "student_reference_number",
            "student_program",
            "student_level",
            "ip_address",
            "user_agent",
            "metadata",
            "outcome_applied_at",
        ]
        read_only_fields = fields


class InitializePaymentSerializer(serializers.Serializer):
    """
    Request Body:
        {"amount": 50000, "paymentType": "tuition", "description": "...", "currency": "NGN"}

    ``amount`` is in minor units (kobo).
    """

    amount = serializers.IntegerField()
    paymentType = serializers.ChoiceField(choices=PaymentType.choices, source="payment_type")
    description = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")
    currency = serializers.ChoiceField(choices=Currency.choices, required=False)

    def validate_amount(self, value: int) -> int:
        if value < settings.PAYMENT_MINIMUM_AMOUNT:
            raise serializers.ValidationError(
                _("Amount must be at least %(minimum)s (minor units).")
                % {"minimum": settings.PAYMENT_MINIMUM_AMOUNT}
            )
        return value

    def validate(self, attrs):
        request = self.context.get("request")
        if request is not None and not request.user.email:
            raise serializers.ValidationError(_("An email address is required to pay online."))
        return attrs


class PaymentFilterSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=PaymentStatus.choices, required=False)
    paymentType = serializers.ChoiceField(choices=PaymentType.choices, required=False, source="payment_type")
    department = serializers.CharField(required=False)
    startDate = serializers.DateField(required=False, source="start_date")
    endDate = serializers.DateField(required=False, source="end_date")
