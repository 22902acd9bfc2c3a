import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Listing",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                (
                    "space_type",
                    models.CharField(
                        choices=[
                            ("billboard", "Billboard"),
                            ("panel", "Panel"),
                            ("screen", "Digital screen"),
                            ("other", "Other"),
                        ],
                        default="billboard",
                        max_length=20,
                    ),
                ),
                ("address", models.CharField(max_length=255)),
                ("city", models.CharField(max_length=100)),
                (
                    "price_per_month",
                    models.PositiveIntegerField(
                        help_text="Monthly rate in minor currency units.",
                        validators=[django.core.validators.MinValueValidator(1)],
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("active", "Available"), ("booked", "Booked"), ("inactive", "Inactive")],
                        default="active",
                        max_length=20,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "owner",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="listings",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Listing",
                "verbose_name_plural": "Listings",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status"], name="listings_li_status_7c1e0a_idx"),
                    models.Index(fields=["owner", "status"], name="listings_li_owner_i_4b9d2f_idx"),
                    models.Index(fields=["city"], name="listings_li_city_8e3a51_idx"),
                ],
            },
        ),
    ]
