"""
Registration Ledger Tests

Covers registration, the approve/reject/drop transitions and the invariant
that ``current_enrollment`` equals the number of approved registrations.
"""

from django.contrib.admin import site
from django.test import TestCase

from core.exceptions import (
    CourseFull,
    CourseInactive,
    CourseNotFound,
    DuplicateRegistration,
    RegistrationForbidden,
    RegistrationNotFound,
    RegistrationTransitionError,
)
from portal.admin import CourseRegistrationAdmin
from portal.courses import ledger
from portal.courses.models import Course, CourseRegistration, RegistrationStatus
from portal.courses.serializers import CourseSerializer
from portal.tests.helpers import make_admin, make_course, make_student

YEAR = "2024/2025"


class LedgerTestBase(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.admin = make_admin()
        cls.ama = make_student("ama")
        cls.kofi = make_student("kofi")
        cls.course = make_course("CE 277", max_students=1)
        cls.open_course = make_course("MA 171", title="Calculus", max_students=None)

    def enrollment(self, course=None) -> int:
        return Course.objects.get(pk=(course or self.course).pk).current_enrollment

    def assertEnrollmentMatchesApproved(self, course=None):
        course = course or self.course
        approved = CourseRegistration.objects.filter(
            course=course, status=RegistrationStatus.APPROVED
        ).count()
        self.assertEqual(self.enrollment(course), approved)


class RegisterStudentTests(LedgerTestBase):
    def test_register_creates_pending_without_taking_a_seat(self):
        registration = ledger.register_student(self.ama, self.course.pk, "First", YEAR)

        self.assertEqual(registration.status, RegistrationStatus.PENDING)
        self.assertIsNone(registration.approved_at)
        self.assertEqual(self.enrollment(), 0)

    def test_second_registration_for_same_tuple_conflicts(self):
        ledger.register_student(self.ama, self.course.pk, "First", YEAR)

        with self.assertRaises(DuplicateRegistration) as ctx:
            ledger.register_student(self.ama, self.course.pk, "First", YEAR)
        self.assertEqual(ctx.exception.status_code, 409)
        self.assertEqual(CourseRegistration.objects.filter(student=self.ama).count(), 1)

    def test_other_semester_or_year_is_a_different_tuple(self):
        ledger.register_student(self.ama, self.open_course.pk, "First", YEAR)
        ledger.register_student(self.ama, self.open_course.pk, "Second", YEAR)
        ledger.register_student(self.ama, self.open_course.pk, "First", "2025/2026")

        self.assertEqual(CourseRegistration.objects.filter(student=self.ama).count(), 3)

    def test_reregistering_after_rejection_is_blocked(self):
        registration = ledger.register_student(self.ama, self.course.pk, "First", YEAR)
        ledger.reject(registration.pk, self.admin, "Prerequisite missing")

        with self.assertRaises(DuplicateRegistration):
            ledger.register_student(self.ama, self.course.pk, "First", YEAR)

    def test_unknown_course(self):
        with self.assertRaises(CourseNotFound) as ctx:
            ledger.register_student(self.ama, 999999, "First", YEAR)
        self.assertEqual(ctx.exception.status_code, 404)

    def test_inactive_course(self):
        inactive = make_course("PH 151", title="Physics", is_active=False)

        with self.assertRaises(CourseInactive) as ctx:
            ledger.register_student(self.ama, inactive.pk, "First", YEAR)
        self.assertEqual(ctx.exception.status_code, 400)

    def test_full_course_refuses_registration(self):
        registration = ledger.register_student(self.ama, self.course.pk, "First", YEAR)
        ledger.approve(registration.pk, self.admin)

        with self.assertRaises(CourseFull) as ctx:
            ledger.register_student(self.kofi, self.course.pk, "First", YEAR)
        self.assertEqual(ctx.exception.status_code, 400)


class ApproveTests(LedgerTestBase):
    def test_approve_takes_exactly_one_seat(self):
        registration = ledger.register_student(self.ama, self.course.pk, "First", YEAR)

        approved = ledger.approve(registration.pk, self.admin)

        self.assertEqual(approved.status, RegistrationStatus.APPROVED)
        self.assertEqual(approved.approved_by, self.admin)
        self.assertIsNotNone(approved.approved_at)
        self.assertEqual(self.enrollment(), 1)

    def test_reapproval_is_a_noop(self):
        registration = ledger.register_student(self.ama, self.open_course.pk, "First", YEAR)
        first = ledger.approve(registration.pk, self.admin)

        second = ledger.approve(registration.pk, self.admin)

        self.assertEqual(self.enrollment(self.open_course), 1)
        self.assertEqual(second.approved_at, first.approved_at)

    def test_capacity_race_lost_at_approval(self):
        # both fit at registration time, only one seat exists
        first = ledger.register_student(self.ama, self.course.pk, "First", YEAR)
        second = ledger.register_student(self.kofi, self.course.pk, "First", YEAR)

        ledger.approve(first.pk, self.admin)
        with self.assertRaises(CourseFull) as ctx:
            ledger.approve(second.pk, self.admin)

        self.assertEqual(ctx.exception.status_code, 409)
        self.assertEqual(self.enrollment(), 1)
        second.refresh_from_db()
        self.assertEqual(second.status, RegistrationStatus.PENDING)
        self.assertIsNone(second.approved_by)

    def test_approving_rejected_registration_is_invalid(self):
        registration = ledger.register_student(self.ama, self.course.pk, "First", YEAR)
        ledger.reject(registration.pk, self.admin)

        with self.assertRaises(RegistrationTransitionError) as ctx:
            ledger.approve(registration.pk, self.admin)
        self.assertEqual(ctx.exception.status_code, 409)
        self.assertEqual(self.enrollment(), 0)

    def test_approving_dropped_registration_is_invalid(self):
        registration = ledger.register_student(self.ama, self.course.pk, "First", YEAR)
        ledger.drop(registration.pk, self.ama)

        with self.assertRaises(RegistrationTransitionError):
            ledger.approve(registration.pk, self.admin)

    def test_unknown_registration(self):
        with self.assertRaises(RegistrationNotFound) as ctx:
            ledger.approve(424242, self.admin)
        self.assertEqual(ctx.exception.status_code, 404)


class RejectAndDropTests(LedgerTestBase):
    def test_reject_after_approve_releases_the_seat_and_keeps_notes(self):
        registration = ledger.register_student(self.ama, self.course.pk, "First", YEAR)
        ledger.approve(registration.pk, self.admin)

        rejected = ledger.reject(registration.pk, self.admin, "Timetable clash")

        self.assertEqual(rejected.status, RegistrationStatus.REJECTED)
        self.assertEqual(rejected.notes, "Timetable clash")
        self.assertEqual(self.enrollment(), 0)
        self.assertEnrollmentMatchesApproved()

    def test_reject_pending_leaves_enrollment(self):
        registration = ledger.register_student(self.ama, self.course.pk, "First", YEAR)

        ledger.reject(registration.pk, self.admin)

        self.assertEqual(self.enrollment(), 0)

    def test_rejecting_twice_is_a_noop(self):
        registration = ledger.register_student(self.ama, self.course.pk, "First", YEAR)
        ledger.approve(registration.pk, self.admin)
        ledger.reject(registration.pk, self.admin, "first")

        again = ledger.reject(registration.pk, self.admin, "second")

        self.assertEqual(again.notes, "first")
        self.assertEqual(self.enrollment(), 0)

    def test_drop_approved_releases_the_seat(self):
        registration = ledger.register_student(self.ama, self.course.pk, "First", YEAR)
        ledger.approve(registration.pk, self.admin)

        dropped = ledger.drop(registration.pk, self.ama)

        self.assertEqual(dropped.status, RegistrationStatus.DROPPED)
        self.assertEqual(self.enrollment(), 0)

    def test_freed_seat_can_be_approved_for_someone_else(self):
        first = ledger.register_student(self.ama, self.course.pk, "First", YEAR)
        second = ledger.register_student(self.kofi, self.course.pk, "First", YEAR)
        ledger.approve(first.pk, self.admin)
        ledger.drop(first.pk, self.ama)

        ledger.approve(second.pk, self.admin)

        self.assertEqual(self.enrollment(), 1)
        self.assertEnrollmentMatchesApproved()

    def test_dropping_twice_is_a_noop(self):
        registration = ledger.register_student(self.ama, self.open_course.pk, "First", YEAR)
        ledger.approve(registration.pk, self.admin)
        ledger.drop(registration.pk, self.ama)

        ledger.drop(registration.pk, self.ama)

        self.assertEqual(self.enrollment(self.open_course), 0)

    def test_only_the_owner_may_drop(self):
        registration = ledger.register_student(self.ama, self.course.pk, "First", YEAR)

        with self.assertRaises(RegistrationForbidden) as ctx:
            ledger.drop(registration.pk, self.kofi)
        self.assertEqual(ctx.exception.status_code, 403)
        registration.refresh_from_db()
        self.assertEqual(registration.status, RegistrationStatus.PENDING)

    def test_admin_drop_without_owner(self):
        registration = ledger.register_student(self.ama, self.course.pk, "First", YEAR)

        self.assertEqual(ledger.drop(registration.pk).status, RegistrationStatus.DROPPED)

    def test_dropping_rejected_registration_is_invalid(self):
        registration = ledger.register_student(self.ama, self.course.pk, "First", YEAR)
        ledger.reject(registration.pk, self.admin)

        with self.assertRaises(RegistrationTransitionError):
            ledger.drop(registration.pk, self.ama)


class SeatAccountingTests(LedgerTestBase):
    def test_reserve_respects_the_ceiling(self):
        self.assertTrue(ledger.try_reserve_seat(self.course.pk))
        self.assertFalse(ledger.try_reserve_seat(self.course.pk))
        self.assertEqual(self.enrollment(), 1)

    def test_unlimited_course_always_has_a_seat(self):
        for _ in range(5):
            self.assertTrue(ledger.try_reserve_seat(self.open_course.pk))
        self.assertEqual(self.enrollment(self.open_course), 5)

    def test_release_never_goes_below_zero(self):
        with self.assertLogs("portal.courses.ledger", level="ERROR"):
            self.assertFalse(ledger.release_seat(self.course.pk))
        self.assertEqual(self.enrollment(), 0)

    def test_mixed_sequence_keeps_counter_equal_to_approved(self):
        students = [make_student(f"student{i}") for i in range(4)]
        regs = [
            ledger.register_student(s, self.open_course.pk, "First", YEAR) for s in students
        ]

        ledger.approve(regs[0].pk, self.admin)
        ledger.approve(regs[1].pk, self.admin)
        ledger.approve(regs[2].pk, self.admin)
        ledger.reject(regs[1].pk, self.admin, "Capacity review")
        ledger.drop(regs[2].pk, students[2])
        ledger.drop(regs[3].pk, students[3])
        ledger.approve(regs[0].pk, self.admin)

        self.assertEnrollmentMatchesApproved(self.open_course)
        self.assertEqual(self.enrollment(self.open_course), 1)


class CourseEditTests(LedgerTestBase):
    """Edits made from a copy loaded before a ledger change must not touch the counter."""

    def test_stale_course_save_keeps_ledger_count(self):
        stale = Course.objects.get(pk=self.course.pk)
        registration = ledger.register_student(self.ama, self.course.pk, "First", YEAR)
        ledger.approve(registration.pk, self.admin)

        stale.title = "Reinforced Concrete"
        stale.save()

        self.assertEqual(self.enrollment(), 1)
        self.assertEqual(stale.current_enrollment, 1)
        self.assertEqual(Course.objects.get(pk=self.course.pk).title, "Reinforced Concrete")
        self.assertEnrollmentMatchesApproved()

    def test_stale_serializer_update_keeps_ledger_count(self):
        stale = Course.objects.get(pk=self.open_course.pk)
        registration = ledger.register_student(self.ama, self.open_course.pk, "First", YEAR)
        ledger.approve(registration.pk, self.admin)

        serializer = CourseSerializer(stale, data={"title": "Calculus I"}, partial=True)
        self.assertTrue(serializer.is_valid(), serializer.errors)
        serializer.save()

        self.assertEqual(self.enrollment(self.open_course), 1)
        self.assertEqual(serializer.data["current_enrollment"], 1)
        self.assertEnrollmentMatchesApproved(self.open_course)

    def test_stale_serializer_sees_seats_taken_since_load(self):
        stale = Course.objects.get(pk=self.open_course.pk)
        for student in (self.ama, self.kofi):
            registration = ledger.register_student(student, self.open_course.pk, "First", YEAR)
            ledger.approve(registration.pk, self.admin)

        serializer = CourseSerializer(stale, data={"max_students": 1}, partial=True)

        self.assertFalse(serializer.is_valid())
        self.assertIn("max_students", serializer.errors)
        self.assertEqual(self.enrollment(self.open_course), 2)

    def test_stale_admin_registration_save_keeps_status(self):
        registration = ledger.register_student(self.ama, self.course.pk, "First", YEAR)
        stale = CourseRegistration.objects.get(pk=registration.pk)
        ledger.approve(registration.pk, self.admin)

        stale.notes = "Checked transcript"
        model_admin = CourseRegistrationAdmin(CourseRegistration, site)
        model_admin.save_model(None, stale, None, True)

        saved = CourseRegistration.objects.get(pk=registration.pk)
        self.assertEqual(saved.status, RegistrationStatus.APPROVED)
        self.assertEqual(saved.approved_by, self.admin)
        self.assertEqual(saved.notes, "Checked transcript")
        self.assertEqual(self.enrollment(), 1)
        self.assertEnrollmentMatchesApproved()
