"""
Student Portal App Configuration

Course catalogue, the Registration Ledger and student accounts live in this
app. Payments are a separate app (``core.paystack_integration``).

Author: Student Portal Development Team
Version: 1.0.0
"""

from django.apps import AppConfig


class PortalConfig(AppConfig):
    """
    Django AppConfig for the student portal.

    Importing the models registers the profile signal handlers.
    """

    default_auto_field = "django.db.models.BigAutoField"
    name = "portal"
    verbose_name = "Student Portal"
