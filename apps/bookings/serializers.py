"""Serializers for the booking domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.users.serializers import UserShortSerializer

from .models import Booking

PAYMENT_METHOD_CHOICES = ("orange_money", "mtn_money", "wave", "card")


class BookingCreateSerializer(serializers.Serializer):
    """Input of a booking request; validation of the dates happens in the handler."""

    listing = serializers.IntegerField(min_value=1)
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    payment_method = serializers.ChoiceField(
        choices=PAYMENT_METHOD_CHOICES,
        required=False,
        allow_null=True,
    )
    payer_contact = serializers.CharField(
        max_length=32,
        required=False,
        allow_blank=True,
        allow_null=True,
    )


class BookingStatusSerializer(serializers.Serializer):
    status = serializers.CharField(max_length=20)


class BookingListQuerySerializer(serializers.Serializer):
    status = serializers.CharField(required=False)
    listing = serializers.IntegerField(required=False, min_value=1)
    as_owner = serializers.BooleanField(required=False, default=False)


class BookingSerializer(serializers.ModelSerializer):
    """Detailed representation of a booking."""

    listing_id = serializers.ReadOnlyField(source="listing.id")
    listing_title = serializers.ReadOnlyField(source="listing.title")
    owner_id = serializers.ReadOnlyField(source="listing.owner_id")
    advertiser = UserShortSerializer(read_only=True)
    status_display = serializers.CharField(source="get_status_display", read_only=True)

    class Meta:
        model = Booking
        fields = [
            "id",
            "listing_id",
            "listing_title",
            "owner_id",
            "advertiser",
            "start_date",
            "end_date",
            "total_price",
            "currency",
            "status",
            "status_display",
            "contract_url",
            "contract_signed_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
