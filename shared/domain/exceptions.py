"""
Domain Error Taxonomy

Every failure raised by the booking and payment flows derives from
DomainError. Validation, Conflict, NotFound and Forbidden errors are
deterministic and surfaced to the caller as is. ProviderError marks a
failed or timed-out call to an external payment provider.

The HTTP mapping lives in shared.infrastructure.exception_handler.
"""


class DomainError(Exception):
    """Base class for expected business failures."""

    code = "domain_error"

    def __init__(self, message: str = "", **context):
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self):
        return self.message or self.code


class ValidationError(DomainError):
    """Input is malformed: bad date range, missing payer contact."""

    code = "validation_error"


class AmountMismatchError(ValidationError):
    """Provider reported an amount that differs from the payment amount."""

    code = "amount_mismatch"


class ConflictError(DomainError):
    """Request conflicts with current state: overlapping dates, duplicate payment."""

    code = "conflict"


class InvalidTransitionError(ConflictError):
    """Booking is not in a state that allows the requested transition."""

    code = "invalid_transition"


class NotFoundError(DomainError):
    """Unknown booking, listing or payment."""

    code = "not_found"


class ForbiddenError(DomainError):
    """Actor is not allowed to perform the requested operation."""

    code = "forbidden"


class ProviderError(DomainError):
    """Payment provider call failed, timed out or returned garbage."""

    code = "provider_error"
