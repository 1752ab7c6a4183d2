# Overview: Service-layer operations for loyalty programs; points ledger and tier engine.

"""
Loyalty Service

WHY: Sellers reward repeat customers with points. Each (seller, customer)
pair has one LoyaltyProgram holding the balance, lifetime totals, tier and
an append-only history.

RULES:
- Customer identity is the phone number when given, else the email
- Earn adds to points and total_points_earned, then re-evaluates the tier
- Spend is refused when it exceeds the balance; it never touches the tier
- Tier depends on total_points_earned only, so it never goes down

CONCURRENCY: earn/spend lock the row where the database supports it and
the row is versioned; a stale write is retried via run_with_retry.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..extensions import db
from ..errors import ConflictError, InsufficientPointsError, NotFoundError, ValidationError
from ..models import LoyaltyProgram, LoyaltyHistoryEntry
from ..models.loyalty import LOYALTY_TIERS
from ..validation import optional_text, require_choice, require_positive_int, require_text
from myhouz.time_utils import utcnow
from .concurrency import lock_for_update, run_with_retry
from .pagination import Page, PageRequest, paginate


# Cumulative points earned -> tier, highest threshold first (inclusive lower bound)
TIER_THRESHOLDS = (
    (5000, "platinum"),
    (2000, "gold"),
    (500, "silver"),
    (0, "bronze"),
)

_TIER_RANK = {tier: rank for rank, tier in enumerate(LOYALTY_TIERS)}


@dataclass(frozen=True)
class LoyaltyFilter:
    seller_id: int
    search: str | None = None
    tier: str | None = None


def tier_for_points(total_points_earned: int) -> str:
    for threshold, tier in TIER_THRESHOLDS:
        if total_points_earned >= threshold:
            return tier
    return "bronze"


def _upgraded_tier(current: str, total_points_earned: int) -> str:
    """Never returns a tier below the current one."""
    computed = tier_for_points(total_points_earned)
    if _TIER_RANK[computed] > _TIER_RANK.get(current, 0):
        return computed
    return current


def _load(seller_id: int, program_id: int, *, for_update: bool = False) -> LoyaltyProgram:
    query = db.session.query(LoyaltyProgram).filter_by(id=program_id, seller_id=seller_id)
    if for_update:
        query = lock_for_update(query)
    program = query.first()
    if not program:
        raise NotFoundError("Loyalty customer not found")
    return program


# =============================================================================
# ENROLLMENT
# =============================================================================

def enroll_customer(
    seller_id: int,
    name: str,
    email: str | None = None,
    phone: str | None = None,
) -> LoyaltyProgram:
    """
    Register a customer in the seller's loyalty program.

    A numeric phone is stored as its digits. Emails are lowercased before
    the duplicate check, so "Ann@x.com" and "ann@x.com" are one customer.

    Raises:
        ValidationError: no name, or neither phone nor email
        ConflictError: a program already exists for this phone (or email)
    """
    name = require_text(name, "name", max_length=128)
    email = optional_text(email, "email", max_length=255)
    if isinstance(phone, int) and not isinstance(phone, bool):
        phone = str(phone)
    phone = optional_text(phone, "phone", max_length=32)
    if email:
        email = email.lower()

    query = db.session.query(LoyaltyProgram).filter_by(seller_id=seller_id)
    if phone:
        query = query.filter_by(customer_phone=phone)
    elif email:
        query = query.filter_by(customer_email=email)
    else:
        raise ValidationError(
            "An email or a phone number is required",
            errors={"email": "email or phone required", "phone": "email or phone required"},
        )

    if query.first():
        raise ConflictError("This customer is already enrolled in the loyalty program")

    program = LoyaltyProgram(
        seller_id=seller_id,
        customer_name=name,
        customer_email=email,
        customer_phone=phone,
        points=0,
        total_points_earned=0,
        total_points_spent=0,
        tier="bronze",
    )
    program.touch()

    db.session.add(program)
    db.session.commit()

    return program


# =============================================================================
# POINTS
# =============================================================================

def earn_points(
    seller_id: int,
    program_id: int,
    points,
    description: str | None = None,
    sale_ref: str | None = None,
) -> LoyaltyProgram:
    """
    Credit points to a customer and re-evaluate the tier.

    Raises:
        ValidationError: points missing, non-integer, or <= 0
        NotFoundError: program missing or owned by another seller
    """
    amount = require_positive_int(points, "points")
    description = optional_text(description, "description", max_length=255) or f"+{amount} points"
    sale_ref = optional_text(None if sale_ref is None else str(sale_ref), "sale_id", max_length=64)

    def _apply() -> LoyaltyProgram:
        program = _load(seller_id, program_id, for_update=True)

        program.points += amount
        program.total_points_earned += amount
        program.history.append(LoyaltyHistoryEntry(
            entry_type="earn",
            points=amount,
            description=description,
            sale_ref=sale_ref,
            occurred_at=utcnow(),
        ))
        program.tier = _upgraded_tier(program.tier, program.total_points_earned)
        program.touch()

        db.session.commit()
        return program

    return run_with_retry(_apply)


def spend_points(
    seller_id: int,
    program_id: int,
    points,
    description: str | None = None,
) -> LoyaltyProgram:
    """
    Redeem points. The tier is left as is.

    Raises:
        ValidationError: points missing, non-integer, or <= 0
        NotFoundError: program missing or owned by another seller
        InsufficientPointsError: points > current balance (nothing is written)
    """
    amount = require_positive_int(points, "points")
    description = optional_text(description, "description", max_length=255) or f"-{amount} points used"

    def _apply() -> LoyaltyProgram:
        program = _load(seller_id, program_id, for_update=True)

        if program.points < amount:
            raise InsufficientPointsError(program.points)

        program.points -= amount
        program.total_points_spent += amount
        program.history.append(LoyaltyHistoryEntry(
            entry_type="spend",
            points=amount,
            description=description,
            occurred_at=utcnow(),
        ))
        program.touch()

        db.session.commit()
        return program

    return run_with_retry(_apply)


# =============================================================================
# QUERIES
# =============================================================================

def get_program(seller_id: int, program_id: int) -> LoyaltyProgram:
    return _load(seller_id, program_id)


def list_programs(filters: LoyaltyFilter, page: PageRequest) -> Page:
    """
    Seller's programs, highest balance first.

    search: case-insensitive substring of customer name, email or phone.
    """
    query = db.session.query(LoyaltyProgram).filter(LoyaltyProgram.seller_id == filters.seller_id)

    if filters.tier:
        require_choice(filters.tier, "tier", LOYALTY_TIERS)
        query = query.filter(LoyaltyProgram.tier == filters.tier)

    if filters.search:
        term = f"%{filters.search.strip()}%"
        query = query.filter(
            db.or_(
                LoyaltyProgram.customer_name.ilike(term),
                LoyaltyProgram.customer_email.ilike(term),
                LoyaltyProgram.customer_phone.ilike(term),
            )
        )

    query = query.order_by(LoyaltyProgram.points.desc(), LoyaltyProgram.id.asc())
    return paginate(query, page)
