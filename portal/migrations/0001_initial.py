import django.core.validators
import django.db.models.deletion
import django.utils.timezone
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
            name="Course",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("course_code", models.CharField(max_length=20, unique=True, verbose_name="Course Code")),
                ("title", models.CharField(max_length=200, verbose_name="Title")),
                (
                    "credits",
                    models.PositiveSmallIntegerField(
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(6),
                        ],
                        verbose_name="Credits",
                    ),
                ),
                (
                    "department",
                    models.CharField(choices=portal.choices.DEPARTMENT_CHOICES, max_length=64, verbose_name="Department"),
                ),
                (
                    "program",
                    models.CharField(choices=portal.choices.PROGRAM_CHOICES, max_length=64, verbose_name="Program"),
                ),
                (
                    "level",
                    models.PositiveSmallIntegerField(
                        validators=[portal.choices.validate_level], verbose_name="Level"
                    ),
                ),
                (
                    "semester",
                    models.CharField(
                        choices=[("First", "First"), ("Second", "Second")], max_length=6, verbose_name="Semester"
                    ),
                ),
                ("description", models.TextField(blank=True, max_length=1000, verbose_name="Description")),
                (
                    "prerequisites",
                    models.JSONField(
                        blank=True,
                        default=list,
                        help_text="Course codes that should be completed first",
                        verbose_name="Prerequisites",
                    ),
                ),
                ("is_active", models.BooleanField(default=True, verbose_name="Active")),
                (
                    "max_students",
                    models.PositiveIntegerField(
                        blank=True,
                        null=True,
                        validators=[django.core.validators.MinValueValidator(1)],
                        verbose_name="Maximum Students",
                    ),
                ),
                (
                    "current_enrollment",
                    models.PositiveIntegerField(default=0, editable=False, verbose_name="Current Enrollment"),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Course",
                "verbose_name_plural": "Courses",
                "ordering": ["course_code"],
                "indexes": [
                    models.Index(
                        fields=["department", "program", "level", "semester"],
                        name="portal_cour_departm_4b0c1e_idx",
                    ),
                    models.Index(fields=["is_active"], name="portal_cour_is_acti_8d2f31_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("current_enrollment__gte", 0)),
                        name="course_enrollment_not_negative",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            ("max_students__isnull", True),
                            ("current_enrollment__lte", models.F("max_students")),
                            _connector="OR",
                        ),
                        name="course_enrollment_within_capacity",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Profile",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "role",
                    models.CharField(
                        choices=[("student", "Student"), ("admin", "Administrator")],
                        default="student",
                        max_length=10,
                        verbose_name="Role",
                    ),
                ),
                (
                    "reference_number",
                    models.CharField(
                        blank=True,
                        max_length=20,
                        null=True,
                        unique=True,
                        validators=[
                            django.core.validators.RegexValidator(
                                "^[0-9]{8,}$", "Reference number must be at least 8 digits"
                            )
                        ],
                        verbose_name="Reference Number",
                    ),
                ),
                (
                    "phone_number",
                    models.CharField(
                        blank=True,
                        max_length=13,
                        validators=[
                            django.core.validators.RegexValidator(
                                "^(\\+233|0)[0-9]{9}$", "Please enter a valid Ghanaian phone number"
                            )
                        ],
                        verbose_name="Phone Number",
                    ),
                ),
                (
                    "department",
                    models.CharField(
                        blank=True, choices=portal.choices.DEPARTMENT_CHOICES, max_length=64, verbose_name="Department"
                    ),
                ),
                (
                    "program",
                    models.CharField(
                        blank=True, choices=portal.choices.PROGRAM_CHOICES, max_length=64, verbose_name="Program"
                    ),
                ),
                (
                    "level",
                    models.PositiveSmallIntegerField(
                        blank=True, null=True, validators=[portal.choices.validate_level], verbose_name="Level"
                    ),
                ),
                (
                    "user",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="profile",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="User",
                    ),
                ),
            ],
            options={
                "verbose_name": "User Profile",
                "verbose_name_plural": "User Profiles",
                "db_table": "portal_profile",
                "indexes": [models.Index(fields=["role", "department"], name="portal_prof_role_5e9a07_idx")],
            },
        ),
        migrations.CreateModel(
            name="CourseRegistration",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "semester",
                    models.CharField(
                        choices=[("First", "First"), ("Second", "Second")], max_length=6, verbose_name="Semester"
                    ),
                ),
                (
                    "academic_year",
                    models.CharField(
                        max_length=9,
                        validators=[
                            django.core.validators.RegexValidator(
                                "^\\d{4}/\\d{4}$", "Academic year must be in format YYYY/YYYY"
                            )
                        ],
                        verbose_name="Academic Year",
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("approved", "Approved"),
                            ("rejected", "Rejected"),
                            ("dropped", "Dropped"),
                        ],
                        default="pending",
                        max_length=10,
                        verbose_name="Status",
                    ),
                ),
                ("registered_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("approved_at", models.DateTimeField(blank=True, null=True)),
                ("notes", models.TextField(blank=True, max_length=500, verbose_name="Notes")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "approved_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="reviewed_registrations",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Reviewed by",
                    ),
                ),
                (
                    "course",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="registrations",
                        to="portal.course",
                        verbose_name="Course",
                    ),
                ),
                (
                    "student",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="course_registrations",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Student",
                    ),
                ),
            ],
            options={
                "verbose_name": "Course Registration",
                "verbose_name_plural": "Course Registrations",
                "ordering": ["-registered_at"],
                "indexes": [
                    models.Index(fields=["student", "status"], name="portal_cour_student_a1c7e2_idx"),
                    models.Index(fields=["course", "status"], name="portal_cour_course__6f3b94_idx"),
                    models.Index(fields=["semester", "academic_year"], name="portal_cour_semeste_c2d815_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("student", "course", "semester", "academic_year"),
                        name="unique_course_registration",
                    )
                ],
            },
        ),
    ]
