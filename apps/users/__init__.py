"""Users app package.

Defines the custom user model used across the marketplace. Users carry
a role (advertiser, owner or admin) which the booking and payment flows
use to authorise state transitions. Use ``apps.users.models.CustomUser``
as the AUTH_USER_MODEL throughout the project.
"""
