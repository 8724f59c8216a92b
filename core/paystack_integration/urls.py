from django.urls import path

from .views import (
    InitializePaymentView,
    MyPaymentsView,
    PaymentDetailView,
    PaymentsByDepartmentView,
    PaymentStatsView,
    PaystackWebhookView,
    VerifyPaymentView,
)

app_name = "paystack_integration"

urlpatterns = [
    path("initialize/", InitializePaymentView.as_view(), name="initialize"),
    path("verify/<str:reference>/", VerifyPaymentView.as_view(), name="verify"),
    path("webhook/", PaystackWebhookView.as_view(), name="webhook"),
    path("my-payments/", MyPaymentsView.as_view(), name="my-payments"),
    path("by-department/", PaymentsByDepartmentView.as_view(), name="by-department"),
    path("stats/", PaymentStatsView.as_view(), name="stats"),
    path("<int:pk>/", PaymentDetailView.as_view(), name="detail"),
]
