"""
Course Registration Models

This module defines the two entities owned by the Registration Ledger:

Models:
- Course: A course offering with an optional seat limit
- CourseRegistration: A student's request for a seat in a course for one
  semester of one academic year

Invariants enforced at the database level:
- ``current_enrollment`` is never negative and never exceeds ``max_students``
- (student, course, semester, academic_year) is unique

``current_enrollment`` must always equal the number of approved registrations
of the course. It is only changed by ``portal.courses.ledger``.

Author: Student Portal Development Team
Version: 1.0.0
"""

from typing import Optional

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator, RegexValidator
from django.db import models
from django.db.models import F, Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from portal.choices import (
    ACADEMIC_YEAR_PATTERN,
    DEPARTMENT_CHOICES,
    PROGRAM_CHOICES,
    SEMESTER_CHOICES,
    validate_level,
)


class Course(models.Model):
    """
    A course offered by a department to a program at a given level.

    Attributes:
        course_code: Unique, upper-cased course code (e.g. "CE 277")
        credits: Credit hours (1-6)
        level: Academic level (100-500, multiples of 100)
        max_students: Optional seat limit; ``None`` means unlimited
        current_enrollment: Number of approved registrations (ledger-owned)
    """

    course_code = models.CharField(
        max_length=20,
        unique=True,
        verbose_name=_("Course Code"),
    )
    title = models.CharField(max_length=200, verbose_name=_("Title"))
    credits = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(6)],
        verbose_name=_("Credits"),
    )
    department = models.CharField(
        max_length=64, choices=DEPARTMENT_CHOICES, verbose_name=_("Department")
    )
    program = models.CharField(
        max_length=64, choices=PROGRAM_CHOICES, verbose_name=_("Program")
    )
    level = models.PositiveSmallIntegerField(
        validators=[validate_level], verbose_name=_("Level")
    )
    semester = models.CharField(
        max_length=6, choices=SEMESTER_CHOICES, verbose_name=_("Semester")
    )
    description = models.TextField(
        max_length=1000, blank=True, verbose_name=_("Description")
    )
    prerequisites = models.JSONField(
        default=list,
        blank=True,
        verbose_name=_("Prerequisites"),
        help_text=_("Course codes that should be completed first"),
    )
    is_active = models.BooleanField(default=True, verbose_name=_("Active"))
    max_students = models.PositiveIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1)],
        verbose_name=_("Maximum Students"),
    )
    current_enrollment = models.PositiveIntegerField(
        default=0,
        editable=False,
        verbose_name=_("Current Enrollment"),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Course")
        verbose_name_plural = _("Courses")
        ordering = ["course_code"]
        indexes = [
            models.Index(
                fields=["department", "program", "level", "semester"],
                name="portal_cour_departm_4b0c1e_idx",
            ),
            models.Index(fields=["is_active"], name="portal_cour_is_acti_8d2f31_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(current_enrollment__gte=0),
                name="course_enrollment_not_negative",
            ),
            models.CheckConstraint(
                condition=Q(max_students__isnull=True)
                | Q(current_enrollment__lte=F("max_students")),
                name="course_enrollment_within_capacity",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.course_code} - {self.title}"

    def save(self, *args, **kwargs):
        self.course_code = (self.course_code or "").strip().upper()
        self.prerequisites = [
            code.strip().upper() for code in (self.prerequisites or []) if code
        ]
        if self._state.adding:
            super().save(*args, **kwargs)
            return

        # the counter column belongs to the ledger; never write back a value read earlier
        update_fields = kwargs.get("update_fields")
        if update_fields is None:
            update_fields = [f.name for f in self._meta.concrete_fields if not f.primary_key]
        kwargs["update_fields"] = [name for name in update_fields if name != "current_enrollment"]
        super().save(*args, **kwargs)
        self.refresh_from_db(fields=["current_enrollment"])

    @property
    def is_full(self) -> bool:
        return self.max_students is not None and self.current_enrollment >= self.max_students

    @property
    def available_spots(self) -> Optional[int]:
        if self.max_students is None:
            return None
        return max(0, self.max_students - self.current_enrollment)


class RegistrationStatus(models.TextChoices):
    PENDING = "pending", _("Pending")
    APPROVED = "approved", _("Approved")
    REJECTED = "rejected", _("Rejected")
    DROPPED = "dropped", _("Dropped")


class CourseRegistration(models.Model):
    """
    A student's registration for a course in one semester of one academic year.

    Status changes go through ``portal.courses.ledger`` which applies the
    transition table in ``portal.courses.transitions``.
    """

    Status = RegistrationStatus

    student = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="course_registrations",
        verbose_name=_("Student"),
    )
    course = models.ForeignKey(
        Course,
        on_delete=models.PROTECT,
        related_name="registrations",
        verbose_name=_("Course"),
    )
    semester = models.CharField(
        max_length=6, choices=SEMESTER_CHOICES, verbose_name=_("Semester")
    )
    academic_year = models.CharField(
        max_length=9,
        validators=[
            RegexValidator(
                ACADEMIC_YEAR_PATTERN, _("Academic year must be in format YYYY/YYYY")
            )
        ],
        verbose_name=_("Academic Year"),
    )
    status = models.CharField(
        max_length=10,
        choices=RegistrationStatus.choices,
        default=RegistrationStatus.PENDING,
        verbose_name=_("Status"),
    )
    registered_at = models.DateTimeField(default=timezone.now)
    approved_at = models.DateTimeField(null=True, blank=True)
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="reviewed_registrations",
        verbose_name=_("Reviewed by"),
    )
    notes = models.TextField(max_length=500, blank=True, verbose_name=_("Notes"))
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Course Registration")
        verbose_name_plural = _("Course Registrations")
        ordering = ["-registered_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["student", "course", "semester", "academic_year"],
                name="unique_course_registration",
            ),
        ]
        indexes = [
            models.Index(fields=["student", "status"], name="portal_cour_student_a1c7e2_idx"),
            models.Index(fields=["course", "status"], name="portal_cour_course__6f3b94_idx"),
            models.Index(fields=["semester", "academic_year"], name="portal_cour_semeste_c2d815_idx"),
        ]

    def __str__(self) -> str:
        return (
            f"{self.student} - {self.course.course_code} "
            f"({self.semester} {self.academic_year}): {self.status}"
        )
