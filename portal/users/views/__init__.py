"""
Portal Users Views Package

Authentication (cookie-based JWT), student self-registration and the
current-user endpoint.
"""

from .auth_views import (
    LogoutView,
    PortalTokenObtainPairView,
    PortalTokenRefreshView,
    StudentRegistrationView,
)
from .user_self_info import CurrentUserView
