"""Exceptions raised by the booking core and its store collaborators."""

from __future__ import annotations

from court_booking.models import FieldError


class CourtBookingError(Exception):
    """Base class for all court booking errors."""


class BookingValidationError(CourtBookingError):
    """Checkout input is incomplete; ``errors`` names every invalid field."""

    def __init__(self, errors: list[FieldError]) -> None:
        self.errors = list(errors)
        fields = ", ".join(e.field for e in self.errors)
        super().__init__(f"Invalid booking data: {fields}")


class ReservationConflictError(CourtBookingError):
    """The store already holds an overlapping reservation for the court."""

    def __init__(self, court_id: str, message: str | None = None) -> None:
        self.court_id = court_id
        super().__init__(message or f"Court {court_id} is already reserved for that time")


class StoreUnavailableError(CourtBookingError):
    """The reservation store could not be reached or returned garbage."""


class SessionNotFoundError(CourtBookingError):
    """No open booking session with the given id."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"Booking session {session_id} not found")
