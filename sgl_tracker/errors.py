"""Exceptions raised by the tracker core and service layer."""
from __future__ import annotations

from typing import Iterable


class TrackerError(Exception):
    """Base class for recoverable errors raised at an operation boundary."""


class ValidationError(TrackerError, ValueError):
    """Raised when user input is missing required fields."""

    @classmethod
    def missing(cls, fields: Iterable[str]) -> "ValidationError":
        names = ", ".join(fields)
        return cls(f"Please fill all required fields: {names}.")


class NotFoundError(TrackerError, LookupError):
    """Raised when a record id does not exist in its collection."""


class AlreadyPromotedError(TrackerError):
    """Raised when a lead has already been promoted to an onboarded leader."""


class DuplicateCheckInError(TrackerError):
    """Raised when a salesperson already checked in on the requested day."""


class StoreError(TrackerError):
    """Raised when the record store cannot be read or written."""


__all__ = [
    "TrackerError",
    "ValidationError",
    "NotFoundError",
    "AlreadyPromotedError",
    "DuplicateCheckInError",
    "StoreError",
]
