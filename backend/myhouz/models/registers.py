from __future__ import annotations

from ..extensions import db
from .mixins import TimestampMixin
from myhouz.time_utils import to_utc_z


REGISTER_STATUSES = ("open", "closed")


class Register(TimestampMixin, db.Model):
    """
    Point-of-sale cash drawer owned by a seller.

    LIFECYCLE (two states):
    - closed: initial state; closing_balance_cents / closed_at describe the
      last close, if any
    - open: opening_balance_cents / opened_at describe the current shift;
      sales_count / total_sales_cents accumulate sales of this shift

    A register can only be deleted while closed.
    """
    __tablename__ = "registers"
    __table_args__ = (
        db.Index("ix_registers_seller_status", "seller_id", "status"),
        db.Index("ix_registers_seller_created", "seller_id", "created_at"),
        db.CheckConstraint("status IN ('open', 'closed')", name="ck_registers_status"),
        db.CheckConstraint("opening_balance_cents >= 0", name="ck_registers_opening_non_negative"),
        db.CheckConstraint("sales_count >= 0", name="ck_registers_sales_count_non_negative"),
        db.CheckConstraint("total_sales_cents >= 0", name="ck_registers_total_sales_non_negative"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    seller_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    name = db.Column(db.String(128), nullable=False)
    status = db.Column(db.String(16), nullable=False, default="closed")

    opened_at = db.Column(db.DateTime(timezone=True), nullable=True)
    closed_at = db.Column(db.DateTime(timezone=True), nullable=True)

    # Cash tracking (all amounts in cents)
    opening_balance_cents = db.Column(db.Integer, nullable=False, default=0)
    closing_balance_cents = db.Column(db.Integer, nullable=True)  # Set when closing
    sales_count = db.Column(db.Integer, nullable=False, default=0)
    total_sales_cents = db.Column(db.Integer, nullable=False, default=0)

    notes = db.Column(db.Text, nullable=True)
    version_id = db.Column(db.Integer, nullable=False, default=1)

    seller = db.relationship("User", backref=db.backref("registers", lazy=True))
    __mapper_args__ = {"version_id_col": version_id}

    @property
    def is_open(self) -> bool:
        return self.status == "open"

    def to_dict(self) -> dict:
        closed = self.status == "closed" and self.closing_balance_cents is not None
        expected = self.opening_balance_cents + self.total_sales_cents
        return {
            "id": self.id,
            "seller_id": self.seller_id,
            "name": self.name,
            "status": self.status,
            "opened_at": to_utc_z(self.opened_at) if self.opened_at else None,
            "closed_at": to_utc_z(self.closed_at) if self.closed_at else None,
            "opening_balance_cents": self.opening_balance_cents,
            "closing_balance_cents": self.closing_balance_cents,
            "sales_count": self.sales_count,
            "total_sales_cents": self.total_sales_cents,
            "expected_balance_cents": expected if closed else None,
            "variance_cents": self.closing_balance_cents - expected if closed else None,
            "notes": self.notes,
            "version_id": self.version_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
