"""Payments app package.

Payment initiation through mobile-money providers, webhook ingestion and
poll-based reconciliation of provider-reported settlements against
bookings.
"""
