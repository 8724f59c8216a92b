from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from portal.courses import ledger
from portal.courses.models import Course, CourseRegistration, RegistrationStatus
from portal.tests.helpers import DEPARTMENT, PROGRAM, make_admin, make_course, make_student

YEAR = "2024/2025"


class CourseCatalogueTests(TestCase):
    # This setup is only executed once for the entire testfile
    @classmethod
    def setUpTestData(cls):
        cls.admin = make_admin()
        cls.student = make_student("ama")
        cls.active = make_course("CE 277", max_students=2)
        cls.inactive = make_course("CE 399", title="Retired Course", is_active=False)

    def setUp(self):
        self.client = APIClient()

    def test_catalogue_needs_login(self):
        response = self.client.get("/api/courses/")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_student_sees_only_active_courses(self):
        self.client.force_authenticate(self.student)
        response = self.client.get("/api/courses/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        codes = [course["course_code"] for course in response.json()]
        self.assertEqual(codes, ["CE 277"])

    def test_admin_sees_inactive_courses(self):
        self.client.force_authenticate(self.admin)
        response = self.client.get("/api/courses/", {"is_active": "false"})
        self.assertEqual([c["course_code"] for c in response.json()], ["CE 399"])

    def test_search_by_title(self):
        make_course("MA 171", title="Calculus")
        self.client.force_authenticate(self.student)
        response = self.client.get("/api/courses/", {"search": "calc"})
        self.assertEqual([c["course_code"] for c in response.json()], ["MA 171"])

    def test_detail_shows_seats(self):
        self.client.force_authenticate(self.student)
        response = self.client.get(f"/api/courses/{self.active.pk}/")
        body = response.json()
        self.assertFalse(body["is_full"])
        self.assertEqual(body["available_spots"], 2)
        self.assertEqual(body["current_enrollment"], 0)

    def test_student_cannot_create_course(self):
        self.client.force_authenticate(self.student)
        response = self.client.post("/api/courses/", {"course_code": "XX 100"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_creates_course_and_enrollment_is_ignored(self):
        self.client.force_authenticate(self.admin)
        payload = {
            "course_code": "ce 480",
            "title": "Distributed Systems",
            "credits": 3,
            "department": DEPARTMENT,
            "program": PROGRAM,
            "level": 400,
            "semester": "Second",
            "max_students": 40,
            "current_enrollment": 25,
            "prerequisites": ["ce 277"],
        }
        response = self.client.post("/api/courses/", payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        course = Course.objects.get(course_code="CE 480")
        self.assertEqual(course.current_enrollment, 0)
        self.assertEqual(course.prerequisites, ["CE 277"])

    def test_invalid_level_is_rejected(self):
        self.client.force_authenticate(self.admin)
        response = self.client.post(
            "/api/courses/",
            {
                "course_code": "CE 150",
                "title": "Odd Level",
                "credits": 3,
                "department": DEPARTMENT,
                "program": PROGRAM,
                "level": 150,
                "semester": "First",
            },
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("level", response.json())

    def test_capacity_cannot_drop_below_enrollment(self):
        registration = ledger.register_student(self.student, self.active.pk, "First", YEAR)
        ledger.approve(registration.pk, self.admin)

        self.client.force_authenticate(self.admin)
        response = self.client.patch(
            f"/api/courses/{self.active.pk}/", {"max_students": 0}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_editing_course_keeps_enrollment(self):
        registration = ledger.register_student(self.student, self.active.pk, "First", YEAR)
        ledger.approve(registration.pk, self.admin)

        self.client.force_authenticate(self.admin)
        response = self.client.patch(
            f"/api/courses/{self.active.pk}/",
            {"title": "Structures II", "current_enrollment": 0},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["current_enrollment"], 1)
        self.assertEqual(Course.objects.get(pk=self.active.pk).current_enrollment, 1)

    def test_course_with_registrations_cannot_be_deleted(self):
        ledger.register_student(self.student, self.active.pk, "First", YEAR)

        self.client.force_authenticate(self.admin)
        response = self.client.delete(f"/api/courses/{self.active.pk}/")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.json()["error_code"], "CourseInUse")
        self.assertTrue(Course.objects.filter(pk=self.active.pk).exists())

    def test_course_stats_for_admin_only(self):
        self.client.force_authenticate(self.student)
        self.assertEqual(self.client.get("/api/courses/stats/").status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.admin)
        response = self.client.get("/api/courses/stats/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        department = response.json()[0]
        self.assertEqual(department["department"], DEPARTMENT)
        self.assertEqual(department["programs"][0]["program"], PROGRAM)


class RegistrationEndpointTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.admin = make_admin()
        cls.ama = make_student("ama")
        cls.kofi = make_student("kofi")
        cls.course = make_course("CE 277", max_students=1)

    def setUp(self):
        self.client = APIClient()

    def register(self, user, **overrides):
        self.client.force_authenticate(user)
        payload = {"courseId": self.course.pk, "semester": "First", "academicYear": YEAR}
        payload.update(overrides)
        return self.client.post("/api/courses/register/", payload, format="json")

    def test_register_creates_pending_registration(self):
        response = self.register(self.ama)
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        body = response.json()
        self.assertEqual(body["status"], RegistrationStatus.PENDING)
        self.assertEqual(body["course"]["course_code"], "CE 277")
        self.assertEqual(body["academic_year"], YEAR)

    def test_duplicate_registration_conflicts(self):
        self.register(self.ama)
        response = self.register(self.ama)
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.json()["error_code"], "DuplicateRegistration")

    def test_malformed_academic_year(self):
        for year in ("2024-2025", "2024/2026"):
            response = self.register(self.ama, academicYear=year)
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
            self.assertIn("academicYear", response.json())

    def test_unknown_course(self):
        response = self.register(self.ama, courseId=987654)
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.json()["error_code"], "CourseNotFound")

    def test_admin_cannot_register_as_student(self):
        response = self.register(self.admin)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_approve_and_second_approval_on_full_course(self):
        first = self.register(self.ama).json()
        second = self.register(self.kofi).json()

        self.client.force_authenticate(self.admin)
        response = self.client.put(f"/api/courses/registrations/{first['id']}/approve/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["status"], RegistrationStatus.APPROVED)
        self.assertEqual(response.json()["approved_by_username"], self.admin.username)

        response = self.client.put(f"/api/courses/registrations/{second['id']}/approve/")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.json()["error_code"], "CourseFull")

        self.course.refresh_from_db()
        self.assertEqual(self.course.current_enrollment, 1)

    def test_student_cannot_approve(self):
        registration = self.register(self.ama).json()
        response = self.client.put(f"/api/courses/registrations/{registration['id']}/approve/")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_reject_with_notes(self):
        registration = self.register(self.ama).json()

        self.client.force_authenticate(self.admin)
        response = self.client.put(
            f"/api/courses/registrations/{registration['id']}/reject/",
            {"notes": "Prerequisite CE 177 missing"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["status"], RegistrationStatus.REJECTED)
        self.assertEqual(response.json()["notes"], "Prerequisite CE 177 missing")

    def test_approve_rejected_is_invalid_state(self):
        registration = self.register(self.ama).json()
        self.client.force_authenticate(self.admin)
        self.client.put(f"/api/courses/registrations/{registration['id']}/reject/")

        response = self.client.put(f"/api/courses/registrations/{registration['id']}/approve/")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.json()["error_code"], "InvalidState")

    def test_approve_unknown_registration(self):
        self.client.force_authenticate(self.admin)
        response = self.client.put("/api/courses/registrations/999999/approve/")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_student_drops_own_approved_registration(self):
        registration = self.register(self.ama).json()
        ledger.approve(registration["id"], self.admin)

        self.client.force_authenticate(self.ama)
        response = self.client.put(f"/api/courses/registrations/{registration['id']}/drop/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["status"], RegistrationStatus.DROPPED)
        self.course.refresh_from_db()
        self.assertEqual(self.course.current_enrollment, 0)

    def test_student_cannot_drop_someone_elses_registration(self):
        registration = self.register(self.ama).json()

        self.client.force_authenticate(self.kofi)
        response = self.client.put(f"/api/courses/registrations/{registration['id']}/drop/")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.json()["error_code"], "RegistrationForbidden")

    def test_admin_may_drop_any_registration(self):
        registration = self.register(self.ama).json()

        self.client.force_authenticate(self.admin)
        response = self.client.put(f"/api/courses/registrations/{registration['id']}/drop/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_my_registrations_only_lists_own_rows(self):
        self.register(self.ama)
        self.register(self.kofi)

        self.client.force_authenticate(self.ama)
        response = self.client.get("/api/courses/my-registrations/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([r["student_username"] for r in response.json()], ["ama"])

    def test_admin_list_filters_by_status(self):
        first = self.register(self.ama).json()
        self.register(self.kofi)
        ledger.approve(first["id"], self.admin)

        self.client.force_authenticate(self.admin)
        response = self.client.get("/api/courses/registrations/", {"status": "approved"})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([r["id"] for r in response.json()], [first["id"]])

        response = self.client.get("/api/courses/registrations/", {"status": "archived"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_registration_stats(self):
        first = self.register(self.ama).json()
        self.register(self.kofi)
        ledger.approve(first["id"], self.admin)

        self.client.force_authenticate(self.admin)
        response = self.client.get("/api/courses/registrations/stats/", {"academic_year": YEAR})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        level = response.json()[0]["programs"][0]["levels"][0]
        self.assertEqual(level["total_registrations"], 2)
        self.assertEqual(level["approved_registrations"], 1)
        self.assertEqual(level["pending_registrations"], 1)
        self.assertEqual(CourseRegistration.objects.count(), 2)
