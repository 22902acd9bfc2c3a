"""Notifications app package.

Turns booking and payment domain events into email and SMS messages for
advertisers and owners. Delivery runs in Celery so a slow mail server or
SMS gateway never holds up a booking or payment transaction.
"""
