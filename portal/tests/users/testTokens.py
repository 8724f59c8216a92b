from django.contrib.auth.models import User
from django.test import TestCase
from rest_framework import status

from portal.tests.helpers import DEPARTMENT, PROGRAM, make_admin, make_student
from portal.users.models import Profile

"""
    Token tests: login stores the JWT pair in HTTP-only cookies, refresh
    issues a new access token from the refresh cookie, logout blacklists it.
"""


class TokenTests(TestCase):
    def setUp(self):
        self.user = make_student("testUser")
        response = self.client.post(
            "/api/auth/token/", {"username": "testUser", "password": "Musterpassword1"}
        )
        self.login_response = response
        self.access_token = response.cookies.get("access_token")
        self.refresh_token = response.cookies.get("refresh_token")
        self.body = response.json()

    def test_no_jwt_in_body(self):
        self.assertEqual(self.login_response.status_code, status.HTTP_200_OK)
        self.assertNotIn("access", self.body)
        self.assertNotIn("refresh", self.body)
        self.assertEqual(self.body["username"], "testUser")
        self.assertEqual(self.body["role"], Profile.STUDENT)

    def test_cookies_are_http_only(self):
        self.assertTrue(self.access_token["httponly"])
        self.assertTrue(self.refresh_token["httponly"])

    def test_wrong_password(self):
        response = self.client.post(
            "/api/auth/token/", {"username": "testUser", "password": "wrong"}
        )
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_refresh_token_success(self):
        self.client.cookies["refresh_token"] = self.refresh_token.value
        response = self.client.post("/api/auth/token/refresh/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNotNone(response.cookies["access_token"])

    def test_refresh_token_failure(self):
        self.client.cookies["refresh_token"] = "bad token"
        response = self.client.post("/api/auth/token/refresh/")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_refresh_token_missing(self):
        del self.client.cookies["refresh_token"]
        response = self.client.post("/api/auth/token/refresh/")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_me_with_cookie(self):
        response = self.client.get("/api/auth/me/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["username"], "testUser")
        self.assertEqual(response.json()["profile"]["department"], DEPARTMENT)

    def test_me_without_cookie(self):
        self.client.cookies.clear()
        response = self.client.get("/api/auth/me/")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_logout_blacklists_refresh_token(self):
        refresh = self.refresh_token.value
        response = self.client.post("/api/auth/logout/")
        self.assertEqual(response.status_code, status.HTTP_205_RESET_CONTENT)
        self.assertEqual(response.cookies["access_token"].value, "")

        self.client.cookies["refresh_token"] = refresh
        response = self.client.post("/api/auth/token/refresh/")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_admin_login_reports_admin_role(self):
        make_admin("registrar")
        response = self.client.post(
            "/api/auth/token/", {"username": "registrar", "password": "Musterpassword1"}
        )
        self.assertEqual(response.json()["role"], Profile.ADMIN)
        self.assertTrue(response.json()["is_staff"])


class StudentRegistrationTests(TestCase):
    def payload(self, **overrides):
        data = {
            "username": "kwame",
            "email": "Kwame@Example.com",
            "first_name": "Kwame",
            "last_name": "Mensah",
            "password": "secret-Pass-1234",
            "password_confirm": "secret-Pass-1234",
            "reference_number": "12345678",
            "phone_number": "0241234567",
            "department": DEPARTMENT,
            "program": PROGRAM,
            "level": 100,
        }
        data.update(overrides)
        return data

    def test_registration_creates_student_profile(self):
        response = self.client.post("/api/auth/register/", self.payload(), content_type="application/json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        user = User.objects.get(username="kwame")
        self.assertEqual(response.json()["user_id"], user.pk)
        self.assertEqual(user.email, "kwame@example.com")
        self.assertEqual(user.profile.role, Profile.STUDENT)
        self.assertEqual(user.profile.reference_number, "12345678")
        self.assertEqual(user.profile.level, 100)
        self.assertFalse(user.is_staff)

    def test_password_mismatch(self):
        response = self.client.post(
            "/api/auth/register/",
            self.payload(password_confirm="other-Pass-1234"),
            content_type="application/json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("password_confirm", response.json())
        self.assertFalse(User.objects.filter(username="kwame").exists())

    def test_duplicate_reference_number(self):
        make_student("ama", reference_number="12345678")
        response = self.client.post("/api/auth/register/", self.payload(), content_type="application/json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("reference_number", response.json())

    def test_invalid_level(self):
        response = self.client.post(
            "/api/auth/register/", self.payload(level=250), content_type="application/json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("level", response.json())
