"""
Root URL Configuration - Student Portal Backend

URL Structure:
- /admin/: Django admin (jazzmin)
- /api/: Portal API (auth, courses, registrations)
- /api/payments/: Paystack payments and webhook
- /api/admin/: Admin dashboard statistics
"""

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/", include("portal.urls")),
    path("api/payments/", include("core.paystack_integration.urls")),
    path("api/admin/", include("dashboard.urls")),
]
