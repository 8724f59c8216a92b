"""
Student Portal Django Admin Configuration

Sections:
- User Management: Django users with the academic profile inline
- Courses: Course catalogue with read-only enrollment counter
- Registrations: Read-only view of registrations; decisions go through the API

Enrollment counts and registration statuses are owned by the Registration
Ledger, so the admin never edits them directly.

Author: Student Portal Development Team
Version: 1.0.0
"""

from typing import Optional

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth.models import User
from django.db.models import QuerySet
from django.http import HttpRequest
from django.utils.translation import gettext_lazy as _

from .models import Course, CourseRegistration, Profile

# --- User Management Administration ---


class ProfileInline(admin.StackedInline):
    model = Profile
    can_delete = False
    verbose_name_plural = "Profile Information"
    fk_name = "user"
    fields = ("role", "reference_number", "phone_number", "department", "program", "level")

    def get_extra(self, request: HttpRequest, obj: Optional[User] = None, **kwargs) -> int:
        """Return 0 extra forms since the profile is created automatically."""
        return 0


class UserAdmin(BaseUserAdmin):
    """
    User administration with the portal profile inline.
    """

    inlines = (ProfileInline,)
    list_display = (
        "username",
        "email",
        "first_name",
        "last_name",
        "get_role",
        "get_department",
        "is_active",
    )
    list_select_related = ("profile",)
    list_filter = ("is_staff", "is_active", "profile__role", "profile__department", "profile__level")
    search_fields = ("username", "first_name", "last_name", "email", "profile__reference_number")
    ordering = ("username",)

    @admin.display(description=_("Role"))
    def get_role(self, instance: User) -> Optional[str]:
        try:
            return instance.profile.get_role_display()
        except Profile.DoesNotExist:
            return None

    @admin.display(description=_("Department"))
    def get_department(self, instance: User) -> Optional[str]:
        try:
            return instance.profile.department
        except Profile.DoesNotExist:
            return None

    def get_queryset(self, request: HttpRequest) -> QuerySet:
        return super().get_queryset(request).select_related("profile")


admin.site.unregister(User)
admin.site.register(User, UserAdmin)

# --- Courses ---


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = (
        "course_code",
        "title",
        "department",
        "level",
        "semester",
        "credits",
        "current_enrollment",
        "max_students",
        "is_active",
    )
    list_filter = ("department", "level", "semester", "is_active")
    search_fields = ("course_code", "title")
    readonly_fields = ("current_enrollment", "created_at", "updated_at")
    ordering = ("course_code",)


# --- Registrations ---


@admin.register(CourseRegistration)
class CourseRegistrationAdmin(admin.ModelAdmin):
    list_display = (
        "student",
        "course",
        "semester",
        "academic_year",
        "status",
        "registered_at",
        "approved_by",
    )
    list_filter = ("status", "semester", "academic_year", "course__department")
    search_fields = ("student__username", "course__course_code")
    list_select_related = ("student", "course", "approved_by")
    readonly_fields = (
        "student",
        "course",
        "semester",
        "academic_year",
        "status",
        "registered_at",
        "approved_at",
        "approved_by",
        "created_at",
        "updated_at",
    )

    def has_add_permission(self, request: HttpRequest) -> bool:
        return False

    def has_delete_permission(self, request: HttpRequest, obj=None) -> bool:
        return False

    def save_model(self, request: HttpRequest, obj: CourseRegistration, form, change: bool) -> None:
        # status and decision fields are owned by the ledger
        obj.save(update_fields=["notes", "updated_at"])
