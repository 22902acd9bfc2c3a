"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "listing",
        "advertiser",
        "status",
        "start_date",
        "end_date",
        "total_price",
        "currency",
        "created_at",
    )
    list_filter = ("status", "start_date", "end_date")
    search_fields = ("listing__title", "advertiser__email")
    readonly_fields = (
        "listing",
        "advertiser",
        "start_date",
        "end_date",
        "total_price",
        "currency",
        "status",
        "contract_url",
        "contract_signed_at",
        "created_at",
        "updated_at",
    )

    def has_delete_permission(self, request, obj=None):  # type: ignore
        return False
