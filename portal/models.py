"""
Model registry of the portal app.

The models are defined in their feature packages and imported here so that
Django picks them up under the ``portal`` app label.
"""

from .courses.models import Course, CourseRegistration, RegistrationStatus  # noqa: F401
from .users.models import Profile  # noqa: F401
