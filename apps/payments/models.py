"""Payment domain models for AdSpace."""

from __future__ import annotations

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Payment(models.Model):
    """Attempt to settle a booking through a payment provider."""

    class Status(models.TextChoices):
        PENDING = "pending", _("Awaiting settlement")
        SUCCESS = "success", _("Paid")
        FAILED = "failed", _("Failed")

    class Method(models.TextChoices):
        ORANGE_MONEY = "orange_money", _("Orange Money")
        MTN_MONEY = "mtn_money", _("MTN Mobile Money")
        WAVE = "wave", _("Wave")
        CARD = "card", _("Card")

    booking = models.ForeignKey(
        "bookings.Booking",
        on_delete=models.PROTECT,
        related_name="payments",
    )
    amount = models.PositiveBigIntegerField(help_text=_("Copied from the booking, minor currency units."))
    currency = models.CharField(max_length=3, default="XOF")
    method = models.CharField(max_length=20, choices=Method.choices)
    provider = models.CharField(max_length=50, blank=True, help_text=_("Adapter that handled the payment"))
    transaction_id = models.CharField(max_length=128, unique=True, null=True, blank=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    failure_reason = models.CharField(max_length=255, blank=True)
    metadata = models.JSONField(default=dict, blank=True)
    settled_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Payment")
        verbose_name_plural = _("Payments")
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["booking"],
                condition=models.Q(status="success"),
                name="payment_single_success_per_booking",
            ),
        ]
        indexes = [
            models.Index(fields=["booking", "status"], name="payments_pa_booking_5d8c3e_idx"),
        ]

    def __str__(self) -> str:
        return f"Payment {self.pk} for booking {self.booking_id} ({self.status})"

    @property
    def is_pending(self) -> bool:
        return self.status == self.Status.PENDING

    @property
    def payment_url(self) -> str:
        return self.metadata.get("payment_url", "")


class PaymentEvent(models.Model):
    """Append-only audit trail of what happened to a payment."""

    class Kind(models.TextChoices):
        INITIATED = "initiated", _("Initiated")
        WEBHOOK = "webhook", _("Webhook received")
        POLL = "poll", _("Status polled")
        RECONCILED = "reconciled", _("Reconciled")
        RETRY_SUPERSEDED = "retry_superseded", _("Superseded by retry")

    payment = models.ForeignKey(Payment, on_delete=models.PROTECT, related_name="events")
    event = models.CharField(max_length=30, choices=Kind.choices)
    status = models.CharField(max_length=20, choices=Payment.Status.choices)
    payload = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Payment event")
        verbose_name_plural = _("Payment events")
        ordering = ["created_at", "pk"]

    def __str__(self) -> str:
        return f"{self.event} on payment {self.payment_id} ({self.status})"
