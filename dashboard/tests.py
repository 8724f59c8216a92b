"""
Admin Dashboard Tests

Author: Student Portal Development Team
Version: 1.0.0
"""

from django.core.cache import cache
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from core.paystack_integration.models import Payment, PaymentStatus
from portal.courses import ledger
from portal.tests.helpers import DEPARTMENT, make_admin, make_course, make_student

from .views import CACHE_KEY


class DashboardTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.admin = make_admin()
        cls.ama = make_student("ama")
        cls.kofi = make_student("kofi", department="Mathematics", program="BSc Mathematics")
        course = make_course("CE 277")
        make_course("CE 399", title="Retired Course", is_active=False)

        registration = ledger.register_student(cls.ama, course.pk, "First", "2024/2025")
        ledger.approve(registration.pk, cls.admin)
        ledger.register_student(cls.kofi, course.pk, "First", "2024/2025")

        Payment.objects.create(
            student=cls.ama,
            amount=50000,
            payment_type="tuition",
            department=DEPARTMENT,
            status=PaymentStatus.SUCCESSFUL,
        )
        Payment.objects.create(
            student=cls.kofi, amount=20000, payment_type="library", department="Mathematics"
        )

    def setUp(self):
        cache.clear()
        self.client = APIClient()

    def test_student_is_forbidden(self):
        self.client.force_authenticate(self.ama)
        response = self.client.get("/api/admin/dashboard/")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_anonymous_is_unauthorized(self):
        response = self.client.get("/api/admin/dashboard/")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_dashboard_figures(self):
        self.client.force_authenticate(self.admin)
        response = self.client.get("/api/admin/dashboard/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        body = response.json()

        self.assertEqual(body["students"]["total"], 2)
        self.assertEqual(body["courses"]["total"], 2)
        self.assertEqual(body["courses"]["active"], 1)
        self.assertEqual(body["registrations"]["total"], 2)
        self.assertEqual(body["registrations"]["by_status"], {"approved": 1, "pending": 1})
        self.assertEqual(body["payments"]["by_status"], {"pending": 1, "successful": 1})
        self.assertEqual(
            body["revenue_by_department"],
            [{"department": DEPARTMENT, "count": 1, "total_amount": 50000}],
        )

    def test_result_is_cached_until_refresh(self):
        self.client.force_authenticate(self.admin)
        self.client.get("/api/admin/dashboard/")
        self.assertIsNotNone(cache.get(CACHE_KEY))

        make_student("yaw")
        cached = self.client.get("/api/admin/dashboard/").json()
        self.assertEqual(cached["students"]["total"], 2)

        fresh = self.client.get("/api/admin/dashboard/", {"refresh": "true"}).json()
        self.assertEqual(fresh["students"]["total"], 3)
