"""
Academic reference data shared by students, courses and payments.
"""

from django.core.exceptions import ValidationError
from django.utils.translation import gettext_lazy as _

DEPARTMENTS = [
    "Mining Engineering",
    "Geological Engineering",
    "Minerals Engineering",
    "Petroleum Engineering",
    "Mechanical Engineering",
    "Electrical Engineering",
    "Civil Engineering",
    "Computer Science and Engineering",
    "Mathematics",
    "Physics",
    "Chemistry",
    "Environmental and Safety Engineering",
    "Liberal Studies",
]
DEPARTMENT_CHOICES = [(name, name) for name in DEPARTMENTS]

PROGRAMS = [f"BSc {name}" for name in DEPARTMENTS]
PROGRAM_CHOICES = [(name, name) for name in PROGRAMS]

FIRST_SEMESTER = "First"
SECOND_SEMESTER = "Second"
SEMESTER_CHOICES = [
    (FIRST_SEMESTER, _("First")),
    (SECOND_SEMESTER, _("Second")),
]

LEVELS = [100, 200, 300, 400, 500]
LEVEL_CHOICES = [(level, str(level)) for level in LEVELS]

ACADEMIC_YEAR_PATTERN = r"^\d{4}/\d{4}$"


def validate_level(value: int) -> None:
    """Levels run from 100 to 500 in steps of 100."""
    if value is None or value < 100 or value > 500 or value % 100 != 0:
        raise ValidationError(
            _("Level must be in increments of 100 (100, 200, 300, 400, 500)"),
            code="invalid_level",
        )
