"""Read-only listing catalogue API.

Listings are managed through the admin; the API only exposes them so
advertisers can pick a space and see whether it is currently booked.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import filters, permissions, viewsets  # type: ignore

from .filters import ListingFilterSet
from .models import Listing
from .serializers import ListingSerializer


class ListingViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = ListingSerializer
    permission_classes = [permissions.AllowAny]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = ListingFilterSet
    search_fields = ["title", "address", "city"]
    ordering_fields = ["price_per_month", "created_at"]

    def get_queryset(self):  # type: ignore
        queryset = Listing.objects.all()
        if self.action == "list":
            queryset = queryset.exclude(status=Listing.Status.INACTIVE)
        return queryset
