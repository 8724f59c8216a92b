from rest_framework.permissions import SAFE_METHODS, BasePermission

# ------------------------------------------------------------
# Helper: a user is a portal administrator when they are staff
# or their profile carries the admin role.
# ------------------------------------------------------------


def is_portal_admin(user) -> bool:
    """Returns True if the user may use the administrator endpoints."""

    if not user or not user.is_authenticated:
        return False
    if user.is_staff:
        return True

    from portal.users.models import Profile  # local import to avoid circular

    profile = getattr(user, "profile", None)
    if profile is None:
        try:
            profile = Profile.objects.get(user=user)
        except Profile.DoesNotExist:
            return False
    return profile.role == Profile.ADMIN


class IsPortalAdmin(BasePermission):
    """Administrator endpoints (approve, reject, statistics, course management)."""

    message = "Administrator privileges required."

    def has_permission(self, request, view):
        return is_portal_admin(request.user)


class IsStudent(BasePermission):
    """Student-only endpoints (registering for courses, starting payments)."""

    message = "Only students can perform this action."

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and not is_portal_admin(user))


class IsAdminOrReadOnly(BasePermission):
    """Authenticated reads, admin writes."""

    def has_permission(self, request, view):
        if not (request.user and request.user.is_authenticated):
            return False
        if request.method in SAFE_METHODS:
            return True
        return is_portal_admin(request.user)


class IsOwnerOrAdmin(BasePermission):
    """Object access only for the owning student or an administrator."""

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated)

    def has_object_permission(self, request, view, obj):
        if is_portal_admin(request.user):
            return True
        # Owner
        return getattr(obj, "student_id", None) == request.user.pk
