"""Serializers for user-related API endpoints."""

from __future__ import annotations

from django.contrib.auth import get_user_model  # type: ignore
from rest_framework import serializers  # type: ignore

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    """Public profile of the authenticated user."""

    display_name = serializers.CharField(read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "display_name",
            "first_name",
            "last_name",
            "phone",
            "role",
        ]
        read_only_fields = ["id", "email", "role"]


class UserShortSerializer(serializers.ModelSerializer):
    """Compact representation embedded in bookings."""

    class Meta:
        model = User
        fields = ["id", "email", "role"]
