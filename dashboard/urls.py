"""
Admin Dashboard URL Configuration (mounted under /api/admin/).
"""

from django.urls import path

from . import views

app_name = "dashboard"

urlpatterns = [
    path("dashboard/", views.get_dashboard, name="dashboard"),
]
