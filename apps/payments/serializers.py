"""Serializers for payment endpoints."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Payment, PaymentEvent
from .providers import PAYMENT_METHODS


class PaymentCreateSerializer(serializers.Serializer):
    booking = serializers.IntegerField(min_value=1)
    payment_method = serializers.ChoiceField(choices=PAYMENT_METHODS)
    phone = serializers.CharField(min_length=8, max_length=20, required=False, allow_blank=True)


class PaymentEventSerializer(serializers.ModelSerializer):
    class Meta:
        model = PaymentEvent
        fields = ["id", "event", "status", "created_at"]
        read_only_fields = fields


class PaymentSerializer(serializers.ModelSerializer):
    booking_id = serializers.ReadOnlyField(source="booking.id")
    payment_url = serializers.CharField(read_only=True)

    class Meta:
        model = Payment
        fields = [
            "id",
            "booking_id",
            "amount",
            "currency",
            "method",
            "provider",
            "transaction_id",
            "status",
            "failure_reason",
            "payment_url",
            "settled_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class PaymentDetailSerializer(PaymentSerializer):
    events = PaymentEventSerializer(many=True, read_only=True)

    class Meta(PaymentSerializer.Meta):
        fields = PaymentSerializer.Meta.fields + ["events"]
        read_only_fields = fields


class PaymentWebhookSerializer(serializers.Serializer):
    """Provider callback body."""

    transactionId = serializers.CharField(max_length=128)
    status = serializers.CharField(max_length=32)
    amount = serializers.IntegerField(min_value=1)
    currency = serializers.CharField(max_length=3, required=False, allow_null=True, default=None)
    metadata = serializers.DictField(required=False)
