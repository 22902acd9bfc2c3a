"""
Availability Checking

Pure overlap detection over half-open date ranges. The database-backed
check lives in apps.bookings.services.is_listing_available and uses the
same predicate.
"""

from typing import Iterable, List

from shared.domain.value_objects import DateRange


def has_overlap(existing: Iterable[DateRange], candidate: DateRange) -> bool:
    """
    True if candidate intersects any of the existing ranges

    Touching ranges do not overlap: [1, 5) and [5, 9) are compatible.
    """
    return any(candidate.overlaps_with(date_range) for date_range in existing)


def conflicting_ranges(existing: Iterable[DateRange], candidate: DateRange) -> List[DateRange]:
    """Ranges from existing that intersect candidate, in input order."""
    return [date_range for date_range in existing if candidate.overlaps_with(date_range)]
