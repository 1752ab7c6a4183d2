from __future__ import annotations

from ..extensions import db
from .mixins import TimestampMixin
from myhouz.time_utils import to_utc_z, utcnow


LOYALTY_TIERS = ("bronze", "silver", "gold", "platinum")
HISTORY_TYPES = ("earn", "spend")


class LoyaltyProgram(TimestampMixin, db.Model):
    """
    A customer's loyalty account with one seller.

    The customer is embedded (name/email/phone columns) rather than a shared
    customer table: the same person enrolled with two sellers has two
    independent programs.

    INVARIANTS:
    - points == total_points_earned - total_points_spent
    - points >= 0 (spend is rejected before it could go negative)
    - tier only moves up, driven by total_points_earned
    """
    __tablename__ = "loyalty_programs"
    __table_args__ = (
        db.Index("ix_loyalty_seller_phone", "seller_id", "customer_phone"),
        db.Index("ix_loyalty_seller_email", "seller_id", "customer_email"),
        db.Index("ix_loyalty_seller_tier", "seller_id", "tier"),
        db.Index("ix_loyalty_seller_points", "seller_id", "points"),
        db.CheckConstraint("points >= 0", name="ck_loyalty_points_non_negative"),
        db.CheckConstraint("total_points_earned >= 0", name="ck_loyalty_earned_non_negative"),
        db.CheckConstraint("total_points_spent >= 0", name="ck_loyalty_spent_non_negative"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    seller_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    customer_name = db.Column(db.String(128), nullable=False)
    customer_email = db.Column(db.String(255), nullable=True)
    customer_phone = db.Column(db.String(32), nullable=True)

    points = db.Column(db.Integer, nullable=False, default=0)
    total_points_earned = db.Column(db.Integer, nullable=False, default=0)
    total_points_spent = db.Column(db.Integer, nullable=False, default=0)

    tier = db.Column(db.String(16), nullable=False, default="bronze")
    version_id = db.Column(db.Integer, nullable=False, default=1)

    seller = db.relationship("User", backref=db.backref("loyalty_programs", lazy=True))
    history = db.relationship(
        "LoyaltyHistoryEntry",
        back_populates="program",
        order_by="[LoyaltyHistoryEntry.occurred_at, LoyaltyHistoryEntry.id]",
        cascade="all, delete-orphan",
        lazy=True,
    )
    __mapper_args__ = {"version_id_col": version_id}

    def to_dict(self, *, include_history: bool = True) -> dict:
        data = {
            "id": self.id,
            "seller_id": self.seller_id,
            "customer": {
                "name": self.customer_name,
                "email": self.customer_email,
                "phone": self.customer_phone,
            },
            "points": self.points,
            "total_points_earned": self.total_points_earned,
            "total_points_spent": self.total_points_spent,
            "tier": self.tier,
            "version_id": self.version_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if include_history:
            data["history"] = [entry.to_dict() for entry in self.history]
        return data


class LoyaltyHistoryEntry(db.Model):
    """
    Append-only ledger of point movements.

    points is always positive; entry_type says which way it went.
    IMMUTABLE: rows are never updated or deleted (except with their program).
    """
    __tablename__ = "loyalty_history"
    __table_args__ = (
        db.Index("ix_loyalty_history_program_occurred", "program_id", "occurred_at"),
        db.CheckConstraint("points > 0", name="ck_loyalty_history_points_positive"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    program_id = db.Column(db.Integer, db.ForeignKey("loyalty_programs.id"), nullable=False, index=True)

    entry_type = db.Column(db.String(8), nullable=False)  # earn, spend
    points = db.Column(db.Integer, nullable=False)
    description = db.Column(db.String(255), nullable=False)

    # Opaque reference to the POS sale that produced an earn, if any
    sale_ref = db.Column(db.String(64), nullable=True)

    occurred_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    program = db.relationship("LoyaltyProgram", back_populates="history")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.entry_type,
            "points": self.points,
            "description": self.description,
            "sale_ref": self.sale_ref,
            "date": to_utc_z(self.occurred_at),
        }
