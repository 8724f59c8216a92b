"""
Registration Ledger

The only code allowed to create course registrations, change their status or
touch ``Course.current_enrollment``.

Concurrency model
-----------------
Requests run in parallel, possibly on several server instances, so all
coordination goes through the database:

- Seats are reserved and released with single conditional UPDATE statements
  (``try_reserve_seat`` / ``release_seat``). Two approvals racing for the
  last seat cannot both succeed because the ``current_enrollment < max_students``
  guard is evaluated by the database inside the UPDATE.
- A status transition locks the registration row (``select_for_update``) and
  performs the seat change and the status write in one ``transaction.atomic()``
  block, so an approve racing a reject on the same registration serializes.
- Duplicate registrations are rejected by the unique constraint on
  (student, course, semester, academic_year); the pre-check only produces a
  friendlier error.

Author: Student Portal Development Team
Version: 1.0.0
"""

import logging

from django.db import IntegrityError, transaction
from django.db.models import F, Q
from django.utils import timezone

from core.exceptions import (
    CourseFull,
    CourseInactive,
    CourseNotFound,
    DuplicateRegistration,
    RegistrationForbidden,
    RegistrationNotFound,
)

from .models import Course, CourseRegistration, RegistrationStatus
from .transitions import RegistrationEvent, Transition, resolve_transition

logger = logging.getLogger(__name__)


# ---------- seat accounting ----------


def try_reserve_seat(course_id: int) -> bool:
    """
    Atomically take one seat of the course if one is free.

    Returns:
        True if the seat was taken, False if the course is at capacity.
    """
    updated = (
        Course.objects.filter(pk=course_id)
        .filter(Q(max_students__isnull=True) | Q(current_enrollment__lt=F("max_students")))
        .update(current_enrollment=F("current_enrollment") + 1, updated_at=timezone.now())
    )
    return updated == 1


def release_seat(course_id: int) -> bool:
    """
    Atomically give back one seat. Never drives the counter below zero.

    Returns:
        True if a seat was released.
    """
    updated = Course.objects.filter(pk=course_id, current_enrollment__gt=0).update(
        current_enrollment=F("current_enrollment") - 1, updated_at=timezone.now()
    )
    if not updated:
        logger.error(
            "Enrollment counter of course %s was already zero while releasing a seat",
            course_id,
        )
    return updated == 1


# ---------- registration ----------


def register_student(student, course_id: int, semester: str, academic_year: str) -> CourseRegistration:
    """
    Create a pending registration for ``student``.

    Enrollment is not touched; seats are taken on approval.

    Raises:
        CourseNotFound, CourseInactive, CourseFull, DuplicateRegistration
    """
    try:
        course = Course.objects.get(pk=course_id)
    except Course.DoesNotExist:
        raise CourseNotFound(details={"course_id": course_id}) from None

    if not course.is_active:
        raise CourseInactive(details={"course_id": course.pk})

    if course.is_full:
        raise CourseFull(details={"course_id": course.pk, "max_students": course.max_students})

    tuple_key = {
        "student": student,
        "course": course,
        "semester": semester,
        "academic_year": academic_year,
    }
    if CourseRegistration.objects.filter(**tuple_key).exists():
        raise DuplicateRegistration(details={"course_id": course.pk})

    try:
        with transaction.atomic():
            registration = CourseRegistration.objects.create(
                status=RegistrationStatus.PENDING, **tuple_key
            )
    except IntegrityError:
        # lost the race against a concurrent identical request
        raise DuplicateRegistration(details={"course_id": course.pk}) from None

    logger.info(
        "Student %s registered for course %s (%s %s), registration %s pending",
        student.pk,
        course.course_code,
        semester,
        academic_year,
        registration.pk,
    )
    return registration


# ---------- status transitions ----------


def _lock_registration(registration_id: int) -> CourseRegistration:
    try:
        return CourseRegistration.objects.select_for_update().get(pk=registration_id)
    except CourseRegistration.DoesNotExist:
        raise RegistrationNotFound(details={"registration_id": registration_id}) from None


def _apply_enrollment_delta(registration: CourseRegistration, transition: Transition) -> None:
    if transition.enrollment_delta > 0:
        if not try_reserve_seat(registration.course_id):
            # capacity race lost at approval time
            raise CourseFull(
                status_code=409,
                details={"course_id": registration.course_id, "registration_id": registration.pk},
            )
    elif transition.enrollment_delta < 0:
        release_seat(registration.course_id)


def approve(registration_id: int, admin) -> CourseRegistration:
    """
    pending -> approved, taking one seat. Re-approving is a logged no-op.

    Raises:
        RegistrationNotFound, CourseFull (409), RegistrationTransitionError
    """
    with transaction.atomic():
        registration = _lock_registration(registration_id)
        transition = resolve_transition(registration.status, RegistrationEvent.APPROVE)
        if transition.is_noop:
            logger.warning(
                "Registration %s is already approved; approval by %s ignored",
                registration.pk,
                getattr(admin, "pk", None),
            )
            return registration

        _apply_enrollment_delta(registration, transition)
        registration.status = transition.target
        registration.approved_at = timezone.now()
        registration.approved_by = admin
        registration.save(update_fields=["status", "approved_at", "approved_by", "updated_at"])

    logger.info(
        "Registration %s approved by %s (course %s)",
        registration.pk,
        getattr(admin, "pk", None),
        registration.course_id,
    )
    return registration


def reject(registration_id: int, admin, notes: str = "") -> CourseRegistration:
    """
    pending|approved -> rejected, releasing the seat of an approved registration.

    Raises:
        RegistrationNotFound, RegistrationTransitionError
    """
    with transaction.atomic():
        registration = _lock_registration(registration_id)
        transition = resolve_transition(registration.status, RegistrationEvent.REJECT)
        if transition.is_noop:
            logger.warning("Registration %s is already rejected; rejection ignored", registration.pk)
            return registration

        _apply_enrollment_delta(registration, transition)
        registration.status = transition.target
        registration.approved_at = timezone.now()
        registration.approved_by = admin
        if notes:
            registration.notes = notes
        registration.save(
            update_fields=["status", "approved_at", "approved_by", "notes", "updated_at"]
        )

    logger.info(
        "Registration %s rejected by %s (seat released: %s)",
        registration.pk,
        getattr(admin, "pk", None),
        transition.enrollment_delta < 0,
    )
    return registration


def drop(registration_id: int, student=None) -> CourseRegistration:
    """
    pending|approved -> dropped, releasing the seat of an approved registration.

    When ``student`` is given the registration must belong to that student;
    administrators call this without one.

    Raises:
        RegistrationNotFound, RegistrationForbidden, RegistrationTransitionError
    """
    with transaction.atomic():
        registration = _lock_registration(registration_id)
        if student is not None and registration.student_id != student.pk:
            raise RegistrationForbidden(details={"registration_id": registration.pk})
        transition = resolve_transition(registration.status, RegistrationEvent.DROP)
        if transition.is_noop:
            logger.warning("Registration %s is already dropped; drop ignored", registration.pk)
            return registration

        _apply_enrollment_delta(registration, transition)
        registration.status = transition.target
        registration.save(update_fields=["status", "updated_at"])

    logger.info(
        "Registration %s dropped (seat released: %s)",
        registration.pk,
        transition.enrollment_delta < 0,
    )
    return registration
