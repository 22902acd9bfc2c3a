"""Pagination shared by the list endpoints."""

from __future__ import annotations

from rest_framework.pagination import PageNumberPagination  # type: ignore


class LimitPageNumberPagination(PageNumberPagination):
    """``?page=<n>&limit=<m>`` with ``limit`` capped at 50."""

    page_size = 20
    page_size_query_param = "limit"
    max_page_size = 50
