"""
Portal User Serializers

This module provides the serializers for authentication, the current-user
endpoint and student self-registration.

Serializers:
- PortalTokenObtainPairSerializer: JWT token with role and department claims
- ProfileSerializer: Academic profile of a user
- UserSerializer: User data with nested profile
- StudentRegistrationSerializer: Account creation for new students

Author: Student Portal Development Team
Version: 1.0.0
"""

from typing import Any, Dict

from django.contrib.auth.models import User
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils.translation import gettext_lazy as _
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer
from rest_framework_simplejwt.tokens import RefreshToken

from portal.choices import DEPARTMENT_CHOICES, PROGRAM_CHOICES, validate_level

from .models import Profile


def _profile_of(user: User) -> Profile:
    try:
        return user.profile
    except Profile.DoesNotExist:
        # users created before the signal handler existed
        profile, _created = Profile.objects.get_or_create(
            user=user,
            defaults={"role": Profile.ADMIN if user.is_staff else Profile.STUDENT},
        )
        return profile


class PortalTokenObtainPairSerializer(TokenObtainPairSerializer):
    """
    JWT token serializer carrying the portal role.

    Token Payload Includes:
    - username: User identification
    - role: ``student`` or ``admin`` (staff users are always ``admin``)
    - department: Department of the user, empty for administrators
    - is_staff: Staff privileges flag
    """

    @classmethod
    def get_token(cls, user: User) -> RefreshToken:
        token = super().get_token(user)
        profile = _profile_of(user)

        token["username"] = user.username
        token["role"] = Profile.ADMIN if profile.is_admin else Profile.STUDENT
        token["department"] = profile.department
        token["is_staff"] = user.is_staff
        return token

    def validate(self, attrs: Dict[str, Any]) -> Dict[str, Any]:
        data = super().validate(attrs)
        profile = _profile_of(self.user)

        data.update(
            {
                "user_id": self.user.id,
                "username": self.user.username,
                "role": Profile.ADMIN if profile.is_admin else Profile.STUDENT,
                "is_staff": self.user.is_staff,
            }
        )
        return data


class ProfileSerializer(serializers.ModelSerializer):
    class Meta:
        model = Profile
        fields = ("role", "reference_number", "phone_number", "department", "program", "level")
        read_only_fields = ("role",)


class UserSerializer(serializers.ModelSerializer):
    """
    User data with the nested academic profile.
    """

    profile = serializers.SerializerMethodField()
    full_name = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = (
            "id",
            "username",
            "email",
            "first_name",
            "last_name",
            "full_name",
            "is_staff",
            "date_joined",
            "last_login",
            "profile",
        )
        read_only_fields = fields

    def get_profile(self, obj: User) -> Dict[str, Any]:
        return ProfileSerializer(_profile_of(obj)).data

    def get_full_name(self, obj: User) -> str:
        full_name = f"{obj.first_name} {obj.last_name}".strip()
        return full_name or obj.username


class StudentRegistrationSerializer(serializers.Serializer):
    """
    Self-service account creation for students.

    Administrators are never created through this serializer; the role is
    always ``student``.
    """

    username = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    first_name = serializers.CharField(max_length=150)
    last_name = serializers.CharField(max_length=150)
    password = serializers.CharField(
        write_only=True,
        min_length=8,
        style={"input_type": "password"},
        help_text=_("Password must be at least 8 characters long"),
    )
    password_confirm = serializers.CharField(write_only=True, style={"input_type": "password"})
    reference_number = serializers.RegexField(
        r"^[0-9]{8,}$",
        max_length=20,
        error_messages={"invalid": _("Reference number must be at least 8 digits")},
    )
    phone_number = serializers.RegexField(
        r"^(\+233|0)[0-9]{9}$",
        required=False,
        allow_blank=True,
        error_messages={"invalid": _("Please enter a valid Ghanaian phone number")},
    )
    department = serializers.ChoiceField(choices=DEPARTMENT_CHOICES)
    program = serializers.ChoiceField(choices=PROGRAM_CHOICES)
    level = serializers.IntegerField(validators=[validate_level])

    def validate_username(self, value: str) -> str:
        if User.objects.filter(username=value).exists():
            raise serializers.ValidationError(_("A user with this username already exists."))
        return value

    def validate_email(self, value: str) -> str:
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError(_("A user with this email address already exists."))
        return value.lower()

    def validate_reference_number(self, value: str) -> str:
        if Profile.objects.filter(reference_number=value).exists():
            raise serializers.ValidationError(_("This reference number is already registered."))
        return value

    def validate_password(self, value: str) -> str:
        try:
            validate_password(value)
        except DjangoValidationError as e:
            raise serializers.ValidationError(list(e.messages))
        return value

    def validate(self, data: Dict[str, Any]) -> Dict[str, Any]:
        if data["password"] != data.pop("password_confirm"):
            raise serializers.ValidationError({"password_confirm": _("Passwords do not match.")})
        return data

    def create(self, validated_data: Dict[str, Any]) -> User:
        with transaction.atomic():
            user = User.objects.create_user(
                username=validated_data["username"],
                email=validated_data["email"],
                password=validated_data["password"],
                first_name=validated_data["first_name"],
                last_name=validated_data["last_name"],
            )
            # the post_save signal created the profile
            profile = _profile_of(user)
            profile.role = Profile.STUDENT
            profile.reference_number = validated_data["reference_number"]
            profile.phone_number = validated_data.get("phone_number", "")
            profile.department = validated_data["department"]
            profile.program = validated_data["program"]
            profile.level = validated_data["level"]
            profile.save()
        return user
