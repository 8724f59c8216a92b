"""
Paystack Integration AppConfig
==============================

Registers ``core.paystack_integration`` under the ``paystack_integration``
label. No signal handlers: every payment state change goes through the
reconciler, called from the verify and webhook views.
"""

from django.apps import AppConfig


class PaystackIntegrationConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core.paystack_integration"
    label = "paystack_integration"
    verbose_name = "Paystack Integration"
