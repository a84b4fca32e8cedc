"""Domain exceptions raised by the workflow layer.

The data-sync context turns these into :class:`~raffledesk.results.OperationResult`
failures; the ``message`` attribute is what end users see.
"""

from __future__ import annotations


class RaffleDeskError(Exception):
    """Base class for failures that carry a user-facing message."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(RaffleDeskError):
    """A lookup returned no row (unknown raffle, organizer, company ...)."""


class ConflictError(RaffleDeskError):
    """A business rule rejected the request (duplicate, ceiling, credentials)."""


class InvalidInputError(RaffleDeskError):
    """A mutation payload is missing required fields or has bad values."""


class UnknownFieldError(InvalidInputError):
    """A mutation payload carried keys that the entity does not recognize."""

    def __init__(self, entity: str, fields: list[str]):
        self.fields = sorted(fields)
        super().__init__(f"Unknown {entity} field(s): {', '.join(self.fields)}.")


class UploadError(RaffleDeskError):
    """An image could not be stored in object storage."""


class WheelUnavailableError(RaffleDeskError):
    """The prize wheel cannot spin (fewer than two prizes configured)."""
