"""
Portal Authentication Views

This module provides the authentication endpoints of the portal. JWT tokens
never appear in response bodies; they are stored in HTTP-only cookies that
``backend.custom_auth.JWTAuthentication`` reads back on every request.

Views:
- PortalTokenObtainPairView: Login, sets the token cookies
- PortalTokenRefreshView: Issues a new access token from the refresh cookie
- LogoutView: Blacklists the refresh token and clears the cookies
- StudentRegistrationView: Student self-registration

Author: Student Portal Development Team
Version: 1.0.0
"""

import logging

from django.conf import settings
from django.utils.translation import gettext_lazy as _
from rest_framework import generics, status
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError
from rest_framework_simplejwt.serializers import TokenRefreshSerializer
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenObtainPairView

from backend.custom_auth import ACCESS_COOKIE_NAME, REFRESH_COOKIE_NAME

from ..serializers import PortalTokenObtainPairSerializer, StudentRegistrationSerializer

logger = logging.getLogger(__name__)


def _set_token_cookie(response: Response, name: str, value: str, lifetime) -> None:
    response.set_cookie(
        name,
        value,
        httponly=True,
        secure=settings.AUTH_COOKIE_SECURE,
        samesite=settings.AUTH_COOKIE_SAMESITE,
        path="/",
        max_age=int(lifetime.total_seconds()),
    )


class PortalTokenObtainPairView(TokenObtainPairView):
    """
    Login endpoint storing the JWT pair in HTTP-only cookies instead of
    returning it in the response body.

    - Calls the parent class's ``post`` method to get access/refresh tokens.
    - Removes tokens from the response payload.
    - Sets ``refresh_token`` and ``access_token`` cookies.
    """

    serializer_class = PortalTokenObtainPairSerializer

    def post(self, request, *args, **kwargs):
        response = super().post(request, *args, **kwargs)
        if response.status_code == 200:
            data = response.data
            refresh = data.pop("refresh", None)
            access = data.pop("access", None)

            if refresh:
                _set_token_cookie(
                    response, REFRESH_COOKIE_NAME, refresh, settings.SIMPLE_JWT["REFRESH_TOKEN_LIFETIME"]
                )
            if access:
                _set_token_cookie(
                    response, ACCESS_COOKIE_NAME, access, settings.SIMPLE_JWT["ACCESS_TOKEN_LIFETIME"]
                )
            logger.info("User %s logged in", data.get("user_id"))
        return response


class PortalTokenRefreshView(APIView):
    """
    Refreshes the access token from the ``refresh_token`` cookie and stores
    the new pair in cookies.
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request: Request) -> Response:
        refresh_token = request.COOKIES.get(REFRESH_COOKIE_NAME)
        if not refresh_token:
            return Response(
                {"detail": _("Refresh token not provided")},
                status=status.HTTP_400_BAD_REQUEST,
            )

        serializer = TokenRefreshSerializer(data={"refresh": refresh_token})
        try:
            serializer.is_valid(raise_exception=True)
        except (TokenError, InvalidToken) as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        refresh = data.get("refresh")
        access = data.get("access")

        response = Response({"detail": _("Token refreshed.")}, status=status.HTTP_200_OK)
        if refresh:
            _set_token_cookie(
                response, REFRESH_COOKIE_NAME, refresh, settings.SIMPLE_JWT["REFRESH_TOKEN_LIFETIME"]
            )
        if access:
            _set_token_cookie(
                response, ACCESS_COOKIE_NAME, access, settings.SIMPLE_JWT["ACCESS_TOKEN_LIFETIME"]
            )
        return response


class LogoutView(APIView):
    """
    Blacklists the refresh token (if any) and deletes both token cookies.
    Always answers 205 Reset Content.
    """

    permission_classes = [AllowAny]

    def post(self, request: Request) -> Response:
        refresh_token = request.COOKIES.get(REFRESH_COOKIE_NAME)
        if refresh_token:
            try:
                RefreshToken(refresh_token).blacklist()
            except TokenError as e:
                logger.info("Logout with unusable refresh token: %s", e)

        response = Response(
            {"detail": _("Successfully logged out.")},
            status=status.HTTP_205_RESET_CONTENT,
        )
        response.delete_cookie(REFRESH_COOKIE_NAME)
        response.delete_cookie(ACCESS_COOKIE_NAME)
        return response


class StudentRegistrationView(generics.CreateAPIView):
    """
    Student self-registration.

    Request Body Example (JSON):
    {
        "username": "kwame",
        "email": "kwame@example.com",
        "first_name": "Kwame",
        "last_name": "Mensah",
        "password": "secret-Pass-1234",
        "password_confirm": "secret-Pass-1234",
        "reference_number": "12345678",
        "department": "Computer Science and Engineering",
        "program": "BSc Computer Science and Engineering",
        "level": 100
    }
    """

    serializer_class = StudentRegistrationSerializer
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        if serializer.is_valid():
            user = serializer.save()
            logger.info("Student account %s registered", user.pk)
            return Response(
                {"detail": _("Registration successful."), "user_id": user.pk},
                status=status.HTTP_201_CREATED,
            )
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
