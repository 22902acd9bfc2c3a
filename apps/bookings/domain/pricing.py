"""
Booking Pricing

Bookings are billed per started month of 30 days at the listing's
monthly rate. Amounts are integers in minor currency units.
"""

from datetime import date

from shared.domain.exceptions import ValidationError
from shared.domain.value_objects import DateRange

DAYS_PER_BILLING_MONTH = 30


def billable_months(start_date: date, end_date: date) -> int:
    """Number of started 30-day months in [start_date, end_date)."""
    if end_date <= start_date:
        raise ValidationError(
            "End date must be after start date",
            start_date=start_date.isoformat(),
            end_date=end_date.isoformat(),
        )
    days = len(DateRange(start_date, end_date))
    return -(-days // DAYS_PER_BILLING_MONTH)


def calculate_total_price(monthly_rate: int, start_date: date, end_date: date) -> int:
    """
    Total price of a booking

    Examples (rate 300000):
        - 29 days -> 300000
        - 30 days -> 300000
        - 31 days -> 600000
    """
    if monthly_rate < 0:
        raise ValidationError("Monthly rate cannot be negative", monthly_rate=monthly_rate)
    return monthly_rate * billable_months(start_date, end_date)
