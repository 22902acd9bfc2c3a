import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("bookings", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Payment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "amount",
                    models.PositiveBigIntegerField(help_text="Copied from the booking, minor currency units."),
                ),
                ("currency", models.CharField(default="XOF", max_length=3)),
                (
                    "method",
                    models.CharField(
                        choices=[
                            ("orange_money", "Orange Money"),
                            ("mtn_money", "MTN Mobile Money"),
                            ("wave", "Wave"),
                            ("card", "Card"),
                        ],
                        max_length=20,
                    ),
                ),
                (
                    "provider",
                    models.CharField(blank=True, help_text="Adapter that handled the payment", max_length=50),
                ),
                ("transaction_id", models.CharField(blank=True, max_length=128, null=True, unique=True)),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "Awaiting settlement"), ("success", "Paid"), ("failed", "Failed")],
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("failure_reason", models.CharField(blank=True, max_length=255)),
                ("metadata", models.JSONField(blank=True, default=dict)),
                ("settled_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "booking",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payments",
                        to="bookings.booking",
                    ),
                ),
            ],
            options={
                "verbose_name": "Payment",
                "verbose_name_plural": "Payments",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["booking", "status"], name="payments_pa_booking_5d8c3e_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(status="success"),
                        fields=("booking",),
                        name="payment_single_success_per_booking",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="PaymentEvent",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "event",
                    models.CharField(
                        choices=[
                            ("initiated", "Initiated"),
                            ("webhook", "Webhook received"),
                            ("poll", "Status polled"),
                            ("reconciled", "Reconciled"),
                            ("retry_superseded", "Superseded by retry"),
                        ],
                        max_length=30,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "Awaiting settlement"), ("success", "Paid"), ("failed", "Failed")],
                        max_length=20,
                    ),
                ),
                ("payload", models.JSONField(blank=True, default=dict)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "payment",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="events",
                        to="payments.payment",
                    ),
                ),
            ],
            options={
                "verbose_name": "Payment event",
                "verbose_name_plural": "Payment events",
                "ordering": ["created_at", "pk"],
            },
        ),
    ]
