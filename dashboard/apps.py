"""
Admin Dashboard App Configuration

Provides the aggregate statistics endpoint of the admin dashboard. The app
has no models of its own; it reads from the portal and payment apps.

Author: Student Portal Development Team
Version: 1.0.0
"""

from django.apps import AppConfig


class DashboardConfig(AppConfig):
    """
    Django AppConfig for the admin dashboard.
    """

    default_auto_field = "django.db.models.BigAutoField"
    name = "dashboard"
    verbose_name = "Admin Dashboard"
