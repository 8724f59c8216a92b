"""
Course Registration Views

This module exposes the Registration Ledger and the course catalogue over the
REST API.

Views:
- CourseViewSet: Course catalogue (read for everyone, write for admins) and
  the course statistics action
- RegisterForCourseView: Student registers for a course (pending)
- MyRegistrationsView: The requesting student's registrations
- RegistrationListView: Admin listing of all registrations
- ApproveRegistrationView / RejectRegistrationView: Admin decisions
- DropRegistrationView: Student (or admin) drops a registration
- RegistrationStatsView: Admin registration statistics

Domain errors raised by the ledger are rendered with ``PortalException.to_dict()``
and the status code they carry.

Author: Student Portal Development Team
Version: 1.0.0
"""

import logging

from django.db import transaction
from django.db.models import ProtectedError, Q
from rest_framework import generics, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import PortalException
from portal.permissions import (
    IsAdminOrReadOnly,
    IsOwnerOrAdmin,
    IsPortalAdmin,
    IsStudent,
    is_portal_admin,
)

from . import ledger
from .models import Course, CourseRegistration
from .serializers import (
    CourseRegistrationSerializer,
    CourseSerializer,
    RegisterForCourseSerializer,
    RegistrationFilterSerializer,
    RejectRegistrationSerializer,
)
from .stats import course_stats, registration_stats

logger = logging.getLogger(__name__)


def _error_response(exc: PortalException) -> Response:
    return Response(exc.to_dict(), status=exc.status_code)


def _filter_registrations(queryset, params):
    filters = RegistrationFilterSerializer(data=params)
    filters.is_valid(raise_exception=True)
    data = filters.validated_data
    if "course" in data:
        queryset = queryset.filter(course_id=data["course"])
    for field in ("semester", "academic_year", "status"):
        if field in data:
            queryset = queryset.filter(**{field: data[field]})
    return queryset


# --- Course catalogue ---


class CourseViewSet(viewsets.ModelViewSet):
    """
    Course catalogue.

    Students only see active courses. Administrators see every course and
    may pass ``?is_active=false`` to list the disabled ones.

    Query parameters: department, program, level, semester, search (code or title).
    """

    serializer_class = CourseSerializer
    permission_classes = [IsAdminOrReadOnly]
    lookup_value_regex = r"\d+"

    def get_queryset(self):
        qs = Course.objects.all()
        params = self.request.query_params

        if is_portal_admin(self.request.user):
            is_active = params.get("is_active")
            if is_active is not None:
                qs = qs.filter(is_active=is_active.lower() in ("1", "true", "yes"))
        else:
            qs = qs.filter(is_active=True)

        for field in ("department", "program", "semester"):
            value = params.get(field)
            if value:
                qs = qs.filter(**{field: value})

        level = params.get("level")
        if level and level.isdigit():
            qs = qs.filter(level=int(level))

        search = params.get("search")
        if search:
            qs = qs.filter(Q(course_code__icontains=search) | Q(title__icontains=search))

        if self.request.method in ("PUT", "PATCH"):
            # capacity validation must see the counter the ledger holds
            qs = qs.select_for_update()

        return qs.order_by("course_code")

    def perform_create(self, serializer):
        course = serializer.save()
        logger.info("Course %s created by %s", course.course_code, self.request.user.pk)

    def update(self, request, *args, **kwargs):
        with transaction.atomic():
            return super().update(request, *args, **kwargs)

    def perform_update(self, serializer):
        course = serializer.save()
        logger.info("Course %s updated by %s", course.course_code, self.request.user.pk)

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        try:
            self.perform_destroy(instance)
        except ProtectedError:
            return Response(
                {
                    "detail": "Course has registrations and cannot be deleted; deactivate it instead.",
                    "error_code": "CourseInUse",
                    "status_code": status.HTTP_409_CONFLICT,
                    "details": {"course_id": instance.pk},
                },
                status=status.HTTP_409_CONFLICT,
            )
        logger.info("Course %s deleted by %s", instance.course_code, request.user.pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=["get"], permission_classes=[IsPortalAdmin])
    def stats(self, request):
        return Response(course_stats())


# --- Registration Ledger endpoints ---


class RegisterForCourseView(APIView):
    """
    POST /api/courses/register/

    Request Body:
        {"courseId": 1, "semester": "First", "academicYear": "2024/2025"}
    """

    permission_classes = [IsStudent]

    def post(self, request: Request) -> Response:
        serializer = RegisterForCourseSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            registration = ledger.register_student(
                request.user,
                data["course_id"],
                data["semester"],
                data["academic_year"],
            )
        except PortalException as e:
            logger.info("Registration request of student %s refused: %s", request.user.pk, e.error_code)
            return _error_response(e)

        return Response(
            CourseRegistrationSerializer(registration).data,
            status=status.HTTP_201_CREATED,
        )


class MyRegistrationsView(generics.ListAPIView):
    serializer_class = CourseRegistrationSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        qs = CourseRegistration.objects.filter(student=self.request.user).select_related(
            "course", "student", "approved_by"
        )
        return _filter_registrations(qs, self.request.query_params)


class RegistrationListView(generics.ListAPIView):
    """Admin listing. Filters: course, semester, academic_year, status."""

    serializer_class = CourseRegistrationSerializer
    permission_classes = [IsPortalAdmin]

    def get_queryset(self):
        qs = CourseRegistration.objects.select_related("course", "student", "approved_by")
        return _filter_registrations(qs, self.request.query_params)


class ApproveRegistrationView(APIView):
    permission_classes = [IsPortalAdmin]

    def put(self, request: Request, pk: int) -> Response:
        try:
            registration = ledger.approve(pk, request.user)
        except PortalException as e:
            return _error_response(e)
        return Response(CourseRegistrationSerializer(registration).data)


class RejectRegistrationView(APIView):
    permission_classes = [IsPortalAdmin]

    def put(self, request: Request, pk: int) -> Response:
        serializer = RejectRegistrationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            registration = ledger.reject(pk, request.user, serializer.validated_data["notes"])
        except PortalException as e:
            return _error_response(e)
        return Response(CourseRegistrationSerializer(registration).data)


class DropRegistrationView(APIView):
    """Students drop their own registrations; administrators may drop any."""

    permission_classes = [IsOwnerOrAdmin]

    def put(self, request: Request, pk: int) -> Response:
        owner = None if is_portal_admin(request.user) else request.user
        try:
            registration = ledger.drop(pk, owner)
        except PortalException as e:
            return _error_response(e)
        return Response(CourseRegistrationSerializer(registration).data)


class RegistrationStatsView(APIView):
    permission_classes = [IsPortalAdmin]

    def get(self, request: Request) -> Response:
        params = request.query_params
        return Response(
            registration_stats(
                semester=params.get("semester"),
                academic_year=params.get("academic_year"),
                status=params.get("status"),
            )
        )
