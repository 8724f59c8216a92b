"""
Portal User Management Models

This module extends Django's built-in User model with the academic profile of
a portal user and keeps that profile in sync through Django signals.

Models:
- Profile: Role (student/admin) and academic placement of a user

Features:
- Automatic profile creation for new users
- Staff users are administrators regardless of their stored role
- Department recorded here is copied onto payments for reporting

Author: Student Portal Development Team
Version: 1.0.0
"""

from django.conf import settings
from django.core.validators import RegexValidator
from django.db import models
from django.db.models.signals import post_save
from django.dispatch import receiver
from django.utils.translation import gettext_lazy as _

from portal.choices import DEPARTMENT_CHOICES, PROGRAM_CHOICES, validate_level


class Profile(models.Model):
    """
    Academic profile attached one-to-one to every user.

    Attributes:
        user: One-to-one relationship with Django User model
        role: ``student`` or ``admin``
        reference_number: University reference number (8+ digits)
        phone_number: Ghanaian phone number
        department / program / level: Academic placement of a student
    """

    STUDENT = "student"
    ADMIN = "admin"
    ROLE_CHOICES = [
        (STUDENT, _("Student")),
        (ADMIN, _("Administrator")),
    ]

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="profile",
        verbose_name=_("User"),
    )
    role = models.CharField(
        max_length=10,
        choices=ROLE_CHOICES,
        default=STUDENT,
        verbose_name=_("Role"),
    )
    reference_number = models.CharField(
        max_length=20,
        unique=True,
        null=True,
        blank=True,
        validators=[
            RegexValidator(r"^[0-9]{8,}$", _("Reference number must be at least 8 digits"))
        ],
        verbose_name=_("Reference Number"),
    )
    phone_number = models.CharField(
        max_length=13,
        blank=True,
        validators=[
            RegexValidator(
                r"^(\+233|0)[0-9]{9}$", _("Please enter a valid Ghanaian phone number")
            )
        ],
        verbose_name=_("Phone Number"),
    )
    department = models.CharField(
        max_length=64,
        choices=DEPARTMENT_CHOICES,
        blank=True,
        verbose_name=_("Department"),
    )
    program = models.CharField(
        max_length=64,
        choices=PROGRAM_CHOICES,
        blank=True,
        verbose_name=_("Program"),
    )
    level = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[validate_level],
        verbose_name=_("Level"),
    )

    class Meta:
        verbose_name = _("User Profile")
        verbose_name_plural = _("User Profiles")
        db_table = "portal_profile"
        indexes = [
            models.Index(fields=["role", "department"], name="portal_prof_role_5e9a07_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.user.username} ({self.role})"

    @property
    def is_admin(self) -> bool:
        return self.role == self.ADMIN or self.user.is_staff

    @property
    def is_student(self) -> bool:
        return self.role == self.STUDENT and not self.user.is_staff


# --- Signal Handlers for Automatic Profile Management ---


@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def create_user_profile(sender, instance, created: bool, **kwargs) -> None:
    """
    Create the profile of a new user. Staff accounts start as administrators.
    """
    if created:
        Profile.objects.get_or_create(
            user=instance,
            defaults={"role": Profile.ADMIN if instance.is_staff else Profile.STUDENT},
        )
