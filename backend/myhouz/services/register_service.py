"""
Register Lifecycle Service

WHY: A seller's cash drawers. Each register alternates between closed and
open; an open period is one shift whose sales are counted on the register
itself and reconciled against the closing balance.

DESIGN PRINCIPLES:
- Every operation is scoped to the acting seller (foreign registers are
  reported as not found)
- open: closed -> open, resets the shift counters
- close: open -> closed, records the counted balance
- An open register cannot be deleted
"""

from __future__ import annotations

from ..extensions import db
from ..errors import InvalidStateError, NotFoundError, ValidationError
from ..models import Register
from ..models.registers import REGISTER_STATUSES
from ..validation import coerce_amount_cents, optional_text, require_text
from myhouz.time_utils import utcnow
from .concurrency import lock_for_update


def _opening_balance(value) -> int:
    """Missing/blank -> 0; negatives are floored at 0."""
    if value in (None, ""):
        return 0
    return max(0, coerce_amount_cents(value, "opening_balance_cents"))


def _load(seller_id: int, register_id: int, *, for_update: bool = False) -> Register:
    query = db.session.query(Register).filter_by(id=register_id, seller_id=seller_id)
    if for_update:
        query = lock_for_update(query)
    register = query.first()
    if not register:
        raise NotFoundError("Register not found")
    return register


# =============================================================================
# REGISTER MANAGEMENT
# =============================================================================

def create_register(
    seller_id: int,
    name: str,
    opening_balance_cents: int | None = None,
    notes: str | None = None,
) -> Register:
    """
    Create a new register for a seller.

    Registers start closed; opening_balance_cents is only a preset until the
    first open() supplies its own.
    """
    register = Register(
        seller_id=seller_id,
        name=require_text(name, "name", max_length=128),
        status="closed",
        opening_balance_cents=_opening_balance(opening_balance_cents),
        notes=optional_text(notes, "notes"),
    )
    register.touch()

    db.session.add(register)
    db.session.commit()

    return register


def list_registers(seller_id: int, status: str | None = None) -> list[Register]:
    """Seller's registers, newest first, optionally filtered by status."""
    query = db.session.query(Register).filter_by(seller_id=seller_id)

    if status:
        if status not in REGISTER_STATUSES:
            raise ValidationError(f"status must be one of: {', '.join(REGISTER_STATUSES)}")
        query = query.filter_by(status=status)

    return query.order_by(Register.created_at.desc(), Register.id.desc()).all()


def get_register(seller_id: int, register_id: int) -> Register:
    return _load(seller_id, register_id)


# =============================================================================
# SHIFT LIFECYCLE
# =============================================================================

def open_register(
    seller_id: int,
    register_id: int,
    opening_balance_cents: int | None = None,
) -> Register:
    """
    Open a closed register.

    Clears the previous close (closed_at, closing balance) and resets the
    shift counters.

    Raises:
        NotFoundError: register missing or owned by another seller
        InvalidStateError: register already open
    """
    register = _load(seller_id, register_id, for_update=True)

    if register.is_open:
        raise InvalidStateError("This register is already open")

    register.status = "open"
    register.opened_at = utcnow()
    register.closed_at = None
    register.opening_balance_cents = _opening_balance(opening_balance_cents)
    register.closing_balance_cents = None
    register.sales_count = 0
    register.total_sales_cents = 0
    register.touch()

    db.session.commit()

    return register


def close_register(
    seller_id: int,
    register_id: int,
    closing_balance_cents: int | None = None,
    notes: str | None = None,
) -> Register:
    """
    Close an open register and record the counted cash.

    Notes replace the existing notes only when provided.

    Raises:
        NotFoundError: register missing or owned by another seller
        InvalidStateError: register already closed
    """
    register = _load(seller_id, register_id, for_update=True)

    if not register.is_open:
        raise InvalidStateError("This register is already closed")

    closing = 0
    if closing_balance_cents not in (None, ""):
        closing = coerce_amount_cents(closing_balance_cents, "closing_balance_cents")

    register.status = "closed"
    register.closed_at = utcnow()
    register.closing_balance_cents = closing

    notes = optional_text(notes, "notes")
    if notes:
        register.notes = notes
    register.touch()

    db.session.commit()

    return register


def record_sale(seller_id: int, register_id: int, amount_cents) -> Register:
    """
    Count a completed sale against the register's current shift.

    Raises:
        InvalidStateError: register is closed
        ValidationError: negative or non-integer amount
    """
    if amount_cents in (None, ""):
        raise ValidationError("amount_cents is required", errors={"amount_cents": "required"})
    amount = coerce_amount_cents(amount_cents, "amount_cents")
    if amount < 0:
        raise ValidationError("amount_cents must be >= 0")

    register = _load(seller_id, register_id, for_update=True)

    if not register.is_open:
        raise InvalidStateError("Sales can only be recorded on an open register")

    register.sales_count += 1
    register.total_sales_cents += amount
    register.touch()

    db.session.commit()

    return register


def delete_register(seller_id: int, register_id: int) -> None:
    """
    Delete a closed register.

    Raises:
        NotFoundError: register missing or owned by another seller
        InvalidStateError: register is open
    """
    register = _load(seller_id, register_id)

    if register.is_open:
        raise InvalidStateError("Cannot delete an open register. Close it first.")

    db.session.delete(register)
    db.session.commit()
