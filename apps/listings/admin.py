"""Admin registrations for the listings domain."""

from __future__ import annotations

from django.contrib import admin

from .models import Listing


@admin.register(Listing)
class ListingAdmin(admin.ModelAdmin):
    list_display = ("title", "city", "space_type", "status", "price_per_month", "owner")
    list_filter = ("status", "city", "space_type")
    search_fields = ("title", "city", "address", "owner__email")
    readonly_fields = ("created_at", "updated_at")
    raw_id_fields = ("owner",)
