# Overview: Service-layer operations for suppliers; encapsulates business logic and database work.

"""
Supplier Service

WHY: Sellers keep a directory of the suppliers they restock from.

DESIGN:
- Every supplier belongs to exactly one seller; reads and writes for
  another seller's supplier report "not found"
- Categories are free labels, stored as child rows (order preserved)
- Hard delete: suppliers are not referenced by any other record
"""

from __future__ import annotations

from dataclasses import dataclass

from ..extensions import db
from ..errors import NotFoundError, ValidationError
from ..models import Supplier, SupplierCategory
from ..validation import ModelValidationPolicy, coerce_str_list, validate_payload
from .pagination import Page, PageRequest, paginate


SUPPLIER_POLICY = ModelValidationPolicy(
    writable_fields={
        "name", "company", "siret", "notes",
        "contact_email", "contact_phone", "contact_address",
    },
    required_on_create={"name"},
)

_CONTACT_FIELDS = {"email": "contact_email", "phone": "contact_phone", "address": "contact_address"}


@dataclass(frozen=True)
class SupplierFilter:
    seller_id: int
    category: str | None = None
    search: str | None = None


def _flatten(payload: dict) -> tuple[dict, list[str] | None]:
    """
    Split an API payload into column values and the category list.

    {"contact": {"email": ...}} becomes {"contact_email": ...}. A contact
    object replaces the whole contact block, so omitted keys are cleared.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    data = dict(payload)
    categories = None
    if "categories" in data:
        categories = coerce_str_list(data.pop("categories"), "categories")

    if "contact" in data:
        contact = data.pop("contact") or {}
        if not isinstance(contact, dict):
            raise ValidationError("contact must be an object")
        unknown = set(contact) - set(_CONTACT_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown contact field: {sorted(unknown)[0]}")
        for key, column in _CONTACT_FIELDS.items():
            data[column] = contact.get(key)

    return data, categories


def _set_categories(supplier: Supplier, categories: list[str]) -> None:
    # Reuse rows for labels that stay: the flush inserts before it deletes,
    # so re-creating a kept label would trip the unique constraint.
    existing = {link.name: link for link in supplier.category_links}
    links = []
    for position, name in enumerate(categories):
        link = existing.get(name) or SupplierCategory(name=name)
        link.position = position
        links.append(link)
    supplier.category_links = links


def _load(seller_id: int, supplier_id: int) -> Supplier:
    supplier = db.session.query(Supplier).filter_by(id=supplier_id, seller_id=seller_id).first()
    if not supplier:
        raise NotFoundError("Supplier not found")
    return supplier


def create_supplier(seller_id: int, payload: dict) -> Supplier:
    """
    Create a supplier from an API payload.

    Raises:
        ValidationError: missing name, unknown fields, bad types/lengths
    """
    data, categories = _flatten(payload)
    patch = validate_payload(model=Supplier, payload=data, policy=SUPPLIER_POLICY, partial=False)

    supplier = Supplier(seller_id=seller_id, **patch)
    _set_categories(supplier, categories or [])
    supplier.touch()

    db.session.add(supplier)
    db.session.commit()

    return supplier


def get_supplier(seller_id: int, supplier_id: int) -> Supplier:
    return _load(seller_id, supplier_id)


def update_supplier(seller_id: int, supplier_id: int, payload: dict) -> Supplier:
    """
    Partial update: only keys present in the payload change.

    Raises:
        NotFoundError: supplier missing or owned by another seller
        ValidationError: blank name, unknown fields, bad types/lengths
    """
    supplier = _load(seller_id, supplier_id)

    data, categories = _flatten(payload)
    patch = validate_payload(model=Supplier, payload=data, policy=SUPPLIER_POLICY, partial=True)

    for key, value in patch.items():
        setattr(supplier, key, value)
    if categories is not None:
        _set_categories(supplier, categories)
    supplier.touch()

    db.session.commit()

    return supplier


def delete_supplier(seller_id: int, supplier_id: int) -> None:
    supplier = _load(seller_id, supplier_id)
    db.session.delete(supplier)
    db.session.commit()


def list_suppliers(filters: SupplierFilter, page: PageRequest) -> Page:
    """
    Seller's suppliers, newest first.

    category: exact label match
    search: case-insensitive substring of name or company
    """
    query = db.session.query(Supplier).filter(Supplier.seller_id == filters.seller_id)

    if filters.category:
        query = query.filter(Supplier.category_links.any(SupplierCategory.name == filters.category))

    if filters.search:
        term = f"%{filters.search.strip()}%"
        query = query.filter(
            db.or_(
                Supplier.name.ilike(term),
                Supplier.company.ilike(term),
            )
        )

    query = query.order_by(Supplier.created_at.desc(), Supplier.id.desc())
    return paginate(query, page)
