from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any

from app.models.office import APPROVAL_PENDING, Office


log = logging.getLogger(__name__)

# Editing any of these sends the office back to admin review.
# Values are compared at the precision the columns store them.
REVIEWED_FIELDS: dict[str, Decimal] = {
    "lat": Decimal("0.0000001"),
    "lng": Decimal("0.0000001"),
    "price_per_day": Decimal("0.01"),
}


def initial_status() -> str:
    # Owners cannot self-approve.
    return APPROVAL_PENDING


def _normalized(value: Any, quantum: Decimal) -> Decimal | None:
    if value is None:
        return None
    try:
        return Decimal(str(value)).quantize(quantum)
    except InvalidOperation:
        return None


def changed_reviewed_fields(office: Office, changes: dict[str, Any]) -> list[str]:
    """Reviewed fields whose submitted value differs from the stored one (by value, not key presence)."""
    changed = []
    for field, quantum in REVIEWED_FIELDS.items():
        if field not in changes:
            continue
        if _normalized(changes[field], quantum) != _normalized(getattr(office, field), quantum):
            changed.append(field)
    return changed


def apply_office_changes(office: Office, changes: dict[str, Any]) -> bool:
    """
    Apply attribute changes to an office and run the approval transition.
    Returns True when the update requires re-review, in which case the office
    is moved to "pending" whatever its previous status was.
    """
    changed = changed_reviewed_fields(office, changes)

    for field, value in changes.items():
        setattr(office, field, value)

    if changed:
        log.info("office %s requires review: %s changed", office.id, ", ".join(changed))
        office.approval_status = APPROVAL_PENDING
        return True
    return False
