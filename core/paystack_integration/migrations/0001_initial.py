import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import portal.choices


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Payment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "amount",
                    models.PositiveBigIntegerField(
                        validators=[django.core.validators.MinValueValidator(0)],
                        verbose_name="Amount (minor units)",
                    ),
                ),
                (
                    "currency",
                    models.CharField(
                        choices=[("NGN", "NGN"), ("USD", "USD"), ("EUR", "EUR"), ("GBP", "GBP")],
                        default="NGN",
                        max_length=3,
                        verbose_name="Currency",
                    ),
                ),
                (
                    "payment_type",
                    models.CharField(
                        choices=[
                            ("tuition", "Tuition"),
                            ("accommodation", "Accommodation"),
                            ("library", "Library"),
                            ("other", "Other"),
                        ],
                        max_length=20,
                        verbose_name="Payment Type",
                    ),
                ),
                (
                    "department",
                    models.CharField(
                        blank=True, choices=portal.choices.DEPARTMENT_CHOICES, max_length=64, verbose_name="Department"
                    ),
                ),
                ("description", models.TextField(blank=True, max_length=500, verbose_name="Description")),
                ("reference", models.CharField(editable=False, max_length=64, unique=True, verbose_name="Reference")),
                (
                    "gateway_reference",
                    models.CharField(
                        blank=True, max_length=100, null=True, unique=True, verbose_name="Gateway Reference"
                    ),
                ),
                ("access_code", models.CharField(blank=True, max_length=100, verbose_name="Access Code")),
                (
                    "authorization_url",
                    models.URLField(blank=True, max_length=500, verbose_name="Authorization URL"),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("successful", "Successful"),
                            ("failed", "Failed"),
                            ("abandoned", "Abandoned"),
                        ],
                        default="pending",
                        max_length=12,
                        verbose_name="Status",
                    ),
                ),
                ("metadata", models.JSONField(blank=True, default=dict, verbose_name="Metadata")),
                ("gateway_response", models.CharField(blank=True, max_length=255)),
                ("channel", models.CharField(blank=True, max_length=50)),
                ("ip_address", models.CharField(blank=True, max_length=45)),
                ("user_agent", models.CharField(blank=True, max_length=255)),
                ("failure_reason", models.CharField(blank=True, max_length=255)),
                ("paid_at", models.DateTimeField(blank=True, null=True)),
                ("outcome_applied_at", models.DateTimeField(blank=True, editable=False, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "student",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payments",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Student",
                    ),
                ),
            ],
            options={
                "verbose_name": "Payment",
                "verbose_name_plural": "Payments",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["student", "status", "-created_at"], name="paystack_pa_student_3c81d0_idx"),
                    models.Index(fields=["department", "status", "-created_at"], name="paystack_pa_departm_9e0b27_idx"),
                    models.Index(fields=["payment_type", "status"], name="paystack_pa_payment_71fa4c_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="PaymentEvent",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "source",
                    models.CharField(
                        choices=[("initialize", "Initialize"), ("verify", "Verify"), ("webhook", "Webhook")],
                        max_length=12,
                    ),
                ),
                (
                    "outcome",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("successful", "Successful"),
                            ("failed", "Failed"),
                            ("abandoned", "Abandoned"),
                        ],
                        max_length=12,
                    ),
                ),
                ("applied", models.BooleanField(default=False)),
                ("anomaly", models.BooleanField(default=False)),
                ("detail", models.CharField(blank=True, max_length=255)),
                ("payload", models.JSONField(blank=True, default=dict)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "payment",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="events",
                        to="paystack_integration.payment",
                    ),
                ),
            ],
            options={
                "verbose_name": "Payment Event",
                "verbose_name_plural": "Payment Events",
                "ordering": ["created_at", "id"],
            },
        ),
    ]
