"""URL routing for the payments domain."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import SimpleRouter  # type: ignore

from .views import PaymentViewSet, PaymentWebhookView

router = SimpleRouter()
router.register(r"", PaymentViewSet, basename="payment")

urlpatterns = [
    path("webhook/<str:provider>/", PaymentWebhookView.as_view(), name="payment-webhook"),
    path("", include(router.urls)),
]
