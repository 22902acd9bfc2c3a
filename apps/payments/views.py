"""API views for payment processing.

Payments are created by advertisers for their bookings; their outcome is
fed back by provider webhooks or by polling the provider. Domain errors
propagate to the project exception handler.
"""

from __future__ import annotations

import structlog  # type: ignore
from drf_spectacular.utils import extend_schema  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from shared.domain.exceptions import NotFoundError

from .application.reconciler import PaymentReconciler
from .models import PaymentEvent
from .providers import get_webhook_adapter
from .serializers import (
    PaymentCreateSerializer,
    PaymentDetailSerializer,
    PaymentSerializer,
    PaymentWebhookSerializer,
)
from .webhooks import verify_webhook_signature

logger = structlog.get_logger(__name__)


class PaymentViewSet(viewsets.ViewSet):
    """Payments of bookings the current user takes part in."""

    permission_classes = [permissions.IsAuthenticated]
    lookup_value_regex = r"\d+"

    def get_reconciler(self) -> PaymentReconciler:
        return PaymentReconciler()

    @extend_schema(request=PaymentCreateSerializer, responses={201: PaymentSerializer})
    def create(self, request):  # type: ignore
        serializer = PaymentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        payment = self.get_reconciler().initiate(
            data["booking"],
            data["payment_method"],
            payer_contact=data.get("phone") or None,
            actor=request.user,
        )
        return Response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)

    @extend_schema(responses=PaymentDetailSerializer)
    def retrieve(self, request, pk=None):  # type: ignore
        payment = self.get_reconciler().get_payment(int(pk), request.user)
        return Response(PaymentDetailSerializer(payment).data)

    @extend_schema(request=None, responses=PaymentSerializer)
    @action(detail=True, methods=["get"], url_path="status")
    def check_status(self, request, pk=None):  # type: ignore
        payment = self.get_reconciler().check_status(int(pk), actor=request.user)
        return Response(PaymentSerializer(payment).data)

    @extend_schema(request=PaymentCreateSerializer, responses={201: PaymentSerializer})
    @action(detail=False, methods=["post"], url_path="retry")
    def retry(self, request):  # type: ignore
        serializer = PaymentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        payment = self.get_reconciler().retry(
            data["booking"],
            data["payment_method"],
            payer_contact=data.get("phone") or None,
            actor=request.user,
        )
        return Response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)

    @extend_schema(responses=PaymentSerializer(many=True))
    @action(detail=False, methods=["get"], url_path=r"booking/(?P<booking_id>\d+)")
    def for_booking(self, request, booking_id=None):  # type: ignore
        payments = self.get_reconciler().list_for_booking(int(booking_id), request.user)
        return Response(PaymentSerializer(payments, many=True).data)


class PaymentWebhookView(APIView):
    """
    Provider callback: ``POST /api/v1/payments/webhook/<provider>/``

    Deliveries may repeat; a settled payment answers 200 without change.
    """

    authentication_classes: list = []
    permission_classes = [permissions.AllowAny]

    @extend_schema(request=PaymentWebhookSerializer, responses=PaymentSerializer)
    def post(self, request, provider: str):  # type: ignore
        adapter = get_webhook_adapter(provider)
        if adapter is None:
            raise NotFoundError(f"Unknown payment provider '{provider}'")

        if not verify_webhook_signature(adapter.name, request.body, request.headers.get("X-Signature")):
            logger.error("payment.webhook_bad_signature", provider=adapter.name)
            return Response(
                {"detail": "Invalid signature", "code": "invalid_signature"},
                status=status.HTTP_403_FORBIDDEN,
            )

        serializer = PaymentWebhookSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        logger.info(
            "payment.webhook_received",
            provider=adapter.name,
            transaction_id=data["transactionId"],
            status=data["status"],
            amount=data["amount"],
        )

        payment = PaymentReconciler().reconcile(
            data["transactionId"],
            adapter.normalize_reported(data["status"]),
            data["amount"],
            reported_currency=data.get("currency"),
            source=PaymentEvent.Kind.WEBHOOK,
            payload=dict(request.data),
            expected_provider=adapter.name,
        )
        return Response({"success": True, "payment": PaymentSerializer(payment).data})
