"""
Booking assembler: turns a finished selection into reservation rows.

One Block becomes exactly one ReservationRequest.  Contact data is
validated here and every problem is reported per field.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence

from email_validator import EmailNotValidError, validate_email

from court_booking.errors import BookingValidationError
from court_booking.models import Block, ContactInfo, FieldError, ReservationRequest

logger = logging.getLogger(__name__)

NEW_STATUS = "new"


def validate_booking(blocks: Sequence[Block], contact: ContactInfo) -> list[FieldError]:
    """Return one FieldError per invalid input; empty when the booking is complete."""
    errors: list[FieldError] = []
    if not blocks:
        errors.append(FieldError(field="blocks", message="Select at least one time slot"))
    if not contact.name.strip():
        errors.append(FieldError(field="name", message="Name is required"))
    if not contact.email.strip():
        errors.append(FieldError(field="email", message="Email is required"))
    else:
        try:
            validate_email(contact.email.strip(), check_deliverability=False)
        except EmailNotValidError as exc:
            errors.append(FieldError(field="email", message=str(exc)))
    if not contact.phone.strip():
        errors.append(FieldError(field="phone", message="Phone is required"))
    return errors


def _notes_for(contact: ContactInfo, user_id: str | None) -> str:
    if user_id is not None:
        return contact.notes
    # Guests have no user row, so their contact data travels in the notes.
    return json.dumps(
        {
            "name": contact.name.strip(),
            "email": contact.email.strip(),
            "phone": contact.phone.strip(),
            "notes": contact.notes,
        },
        ensure_ascii=False,
    )


def assemble(
    blocks: Sequence[Block],
    contact: ContactInfo,
    user_id: str | None = None,
) -> list[ReservationRequest]:
    """
    Build one reservation request per block.

    Raises BookingValidationError listing every invalid field.
    """
    errors = validate_booking(blocks, contact)
    if errors:
        raise BookingValidationError(errors)

    notes = _notes_for(contact, user_id)
    requests = [
        ReservationRequest(
            court_id=block.court_id,
            begins_at=block.slots[0].starts_at,
            ends_at=block.slots[-1].ends_at,
            price=block.total_price,
            user_id=user_id,
            status=NEW_STATUS,
            notes=notes,
        )
        for block in blocks
    ]
    logger.info(
        "Assembled %d reservation request(s) for %s",
        len(requests),
        user_id or "guest",
    )
    return requests
