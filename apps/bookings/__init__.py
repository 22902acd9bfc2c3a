"""Bookings app package.

This app encapsulates the booking domain: reservation of a listing for a
date range, pricing, the booking state machine and the listing
availability flag derived from confirmed bookings. Overlapping
reservations are prevented by a row lock on the listing and, on
PostgreSQL, by an exclusion constraint.
"""
