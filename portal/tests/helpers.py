"""
Shared fixtures for the portal test suite.
"""

from django.contrib.auth.models import User

from portal.courses.models import Course
from portal.users.models import Profile

DEPARTMENT = "Computer Science and Engineering"
PROGRAM = "BSc Computer Science and Engineering"


def make_student(username: str, department: str = DEPARTMENT, **profile_fields) -> User:
    user = User.objects.create_user(
        username=username,
        password="Musterpassword1",
        email=f"{username}@example.com",
    )
    Profile.objects.filter(user=user).update(
        role=Profile.STUDENT,
        department=department,
        program=profile_fields.pop("program", PROGRAM),
        level=profile_fields.pop("level", 100),
        **profile_fields,
    )
    user.refresh_from_db()
    return user


def make_admin(username: str = "registrar") -> User:
    return User.objects.create_user(
        username=username,
        password="Musterpassword1",
        email=f"{username}@example.com",
        is_staff=True,
    )


def make_course(course_code: str = "CE 277", **fields) -> Course:
    defaults = {
        "title": "Data Structures",
        "credits": 3,
        "department": DEPARTMENT,
        "program": PROGRAM,
        "level": 200,
        "semester": "First",
        "max_students": None,
    }
    defaults.update(fields)
    return Course.objects.create(course_code=course_code, **defaults)
