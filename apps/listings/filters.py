"""FilterSet definitions for listing search."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Listing


class ListingFilterSet(django_filters.FilterSet):
    """Common filters for the public listing catalogue."""

    city = django_filters.CharFilter(field_name="city", lookup_expr="icontains")
    space_type = django_filters.CharFilter(field_name="space_type", lookup_expr="exact")
    status = django_filters.CharFilter(field_name="status", lookup_expr="exact")
    price_min = django_filters.NumberFilter(field_name="price_per_month", lookup_expr="gte")
    price_max = django_filters.NumberFilter(field_name="price_per_month", lookup_expr="lte")

    class Meta:
        model = Listing
        fields = ["city", "space_type", "status"]
