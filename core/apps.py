"""
Core App Configuration - Student Portal

This module contains the Django app configuration for the core application.
The core app holds functionality shared by all portal apps and hosts the
payment gateway integration as a sub-package.

Features:
- Shared domain exceptions
- Houses the Paystack integration (Payment Reconciler)

Author: Student Portal Development Team
Version: 1.0.0
"""

from django.apps import AppConfig


class CoreConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'core'
