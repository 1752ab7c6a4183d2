from __future__ import annotations

from ..extensions import db
from .mixins import TimestampMixin
from myhouz.time_utils import to_utc_z


class Supplier(TimestampMixin, db.Model):
    """
    A seller's supplier directory entry.

    Scoped to its owning seller; other sellers never see it.
    Categories live in supplier_categories so list filtering stays in SQL.
    """
    __tablename__ = "suppliers"
    __table_args__ = (
        db.Index("ix_suppliers_seller_created", "seller_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    seller_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    name = db.Column(db.String(200), nullable=False)
    company = db.Column(db.String(200), nullable=True)
    siret = db.Column(db.String(32), nullable=True)  # French business registration number

    contact_email = db.Column(db.String(255), nullable=True)
    contact_phone = db.Column(db.String(32), nullable=True)
    contact_address = db.Column(db.String(500), nullable=True)

    notes = db.Column(db.Text, nullable=True)

    seller = db.relationship("User", backref=db.backref("suppliers", lazy=True))
    category_links = db.relationship(
        "SupplierCategory",
        back_populates="supplier",
        order_by="SupplierCategory.position",
        cascade="all, delete-orphan",
        lazy=True,
    )

    @property
    def categories(self) -> list[str]:
        return [link.name for link in self.category_links]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "seller_id": self.seller_id,
            "name": self.name,
            "contact": {
                "email": self.contact_email,
                "phone": self.contact_phone,
                "address": self.contact_address,
            },
            "company": self.company,
            "siret": self.siret,
            "categories": self.categories,
            "notes": self.notes,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class SupplierCategory(db.Model):
    __tablename__ = "supplier_categories"
    __table_args__ = (
        db.UniqueConstraint("supplier_id", "name", name="uq_supplier_categories_name"),
        db.Index("ix_supplier_categories_name", "name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    supplier_id = db.Column(db.Integer, db.ForeignKey("suppliers.id"), nullable=False, index=True)
    name = db.Column(db.String(64), nullable=False)
    position = db.Column(db.Integer, nullable=False, default=0)

    supplier = db.relationship("Supplier", back_populates="category_links")
