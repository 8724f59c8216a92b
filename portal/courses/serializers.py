"""
Course Registration Serializers

Serializers:
- CourseSerializer: Course CRUD; the enrollment counter is read-only
- CourseRegistrationSerializer: Registration read model with course summary
- RegisterForCourseSerializer: Input of the registration request
- RejectRegistrationSerializer: Optional rejection notes
- RegistrationFilterSerializer: Query-string filters of the listing views

Request bodies use the client's camelCase keys (``courseId``,
``academicYear``); responses use the model field names.

Author: Student Portal Development Team
Version: 1.0.0
"""

from typing import Any, Dict, List

from django.utils.translation import gettext_lazy as _
from rest_framework import serializers

from portal.choices import ACADEMIC_YEAR_PATTERN, SEMESTER_CHOICES

from .models import Course, CourseRegistration, RegistrationStatus


class CourseSerializer(serializers.ModelSerializer):
    is_full = serializers.BooleanField(read_only=True)
    available_spots = serializers.IntegerField(read_only=True, allow_null=True)

    class Meta:
        model = Course
        fields = [
            "id",
            "course_code",
            "title",
            "credits",
            "department",
            "program",
            "level",
            "semester",
            "description",
            "prerequisites",
            "is_active",
            "max_students",
            "current_enrollment",
            "is_full",
            "available_spots",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["current_enrollment", "created_at", "updated_at"]

    def validate_course_code(self, value: str) -> str:
        return value.strip().upper()

    def validate_prerequisites(self, value: List[str]) -> List[str]:
        if not isinstance(value, list) or not all(isinstance(code, str) for code in value):
            raise serializers.ValidationError(_("Prerequisites must be a list of course codes."))
        return [code.strip().upper() for code in value if code.strip()]

    def validate(self, attrs: Dict[str, Any]) -> Dict[str, Any]:
        # lowering the limit below the seats already taken would break the counter invariant
        max_students = attrs.get("max_students")
        if self.instance is not None and max_students is not None:
            self.instance.refresh_from_db(fields=["current_enrollment"])
            if max_students < self.instance.current_enrollment:
                raise serializers.ValidationError(
                    {
                        "max_students": _(
                            "Cannot be lower than the current enrollment (%(count)s)."
                        )
                        % {"count": self.instance.current_enrollment}
                    }
                )
        return attrs


class CourseSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Course
        fields = ["id", "course_code", "title", "credits", "department", "level"]


class CourseRegistrationSerializer(serializers.ModelSerializer):
    course = CourseSummarySerializer(read_only=True)
    student_username = serializers.CharField(source="student.username", read_only=True)
    approved_by_username = serializers.CharField(
        source="approved_by.username", read_only=True, default=None
    )

    class Meta:
        model = CourseRegistration
        fields = [
            "id",
            "student",
            "student_username",
            "course",
            "semester",
            "academic_year",
            "status",
            "registered_at",
            "approved_at",
            "approved_by",
            "approved_by_username",
            "notes",
        ]
        read_only_fields = fields


class RegisterForCourseSerializer(serializers.Serializer):
    courseId = serializers.IntegerField(source="course_id", min_value=1)
    semester = serializers.ChoiceField(choices=SEMESTER_CHOICES)
    academicYear = serializers.RegexField(
        ACADEMIC_YEAR_PATTERN,
        source="academic_year",
        error_messages={"invalid": _("Academic year must be in format YYYY/YYYY")},
    )

    def validate_academicYear(self, value: str) -> str:
        first, second = (int(part) for part in value.split("/"))
        if second != first + 1:
            raise serializers.ValidationError(_("Academic year must span consecutive years."))
        return value


class RejectRegistrationSerializer(serializers.Serializer):
    notes = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")


class RegistrationFilterSerializer(serializers.Serializer):
    course = serializers.IntegerField(required=False, min_value=1)
    semester = serializers.ChoiceField(choices=SEMESTER_CHOICES, required=False)
    academic_year = serializers.RegexField(ACADEMIC_YEAR_PATTERN, required=False)
    status = serializers.ChoiceField(choices=RegistrationStatus.choices, required=False)
