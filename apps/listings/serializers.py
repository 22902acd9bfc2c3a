"""Serializers for listings."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Listing


class ListingSerializer(serializers.ModelSerializer):
    owner_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = Listing
        fields = [
            "id",
            "owner_id",
            "title",
            "description",
            "space_type",
            "address",
            "city",
            "price_per_month",
            "status",
            "created_at",
        ]
        read_only_fields = fields
