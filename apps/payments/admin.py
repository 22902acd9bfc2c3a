"""Admin registrations for payments."""

from __future__ import annotations

from django.contrib import admin

from .models import Payment, PaymentEvent


class PaymentEventInline(admin.TabularInline):
    model = PaymentEvent
    extra = 0
    fields = ("event", "status", "payload", "created_at")
    readonly_fields = fields
    can_delete = False


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "booking",
        "method",
        "provider",
        "status",
        "amount",
        "currency",
        "transaction_id",
        "created_at",
    )
    list_filter = ("status", "method", "provider")
    search_fields = ("transaction_id", "booking__id", "booking__advertiser__email")
    readonly_fields = (
        "booking",
        "amount",
        "currency",
        "method",
        "provider",
        "transaction_id",
        "status",
        "failure_reason",
        "metadata",
        "settled_at",
        "created_at",
        "updated_at",
    )
    inlines = (PaymentEventInline,)

    def has_delete_permission(self, request, obj=None):  # type: ignore
        return False
