# Overview: Flask API routes for supplier operations; parses input and returns JSON responses.

"""
Supplier Routes

SECURITY: All routes require an authenticated professional account.
Suppliers are scoped to the seller (another seller's supplier is a 404).
"""

from flask import Blueprint, request, g, current_app

from ..errors import DomainError
from ..decorators import require_auth, require_professional
from ..services import supplier_service
from ..services.supplier_service import SupplierFilter
from ..services.pagination import page_request
from ..responses import domain_error_response, page_response, server_error_response, success_response


suppliers_bp = Blueprint("suppliers", __name__, url_prefix="/api/pos/suppliers")


@suppliers_bp.get("")
@require_auth
@require_professional
def list_suppliers_route():
    """
    Query parameters:
    - page, limit: pagination (limit clamped to 1..100)
    - search: substring of name or company
    - category: exact category label
    """
    try:
        filters = SupplierFilter(
            seller_id=g.current_user.id,
            category=request.args.get("category") or None,
            search=request.args.get("search") or None,
        )
        page = supplier_service.list_suppliers(
            filters,
            page_request(request.args.get("page"), request.args.get("limit")),
        )

        return page_response(page)

    except DomainError as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to list suppliers")
        return server_error_response()


@suppliers_bp.post("")
@require_auth
@require_professional
def create_supplier_route():
    """
    Request body:
    {
        "name": "Bois & Co",                 // required
        "company": "Bois & Co SARL",
        "siret": "12345678900012",
        "contact": {"email": "...", "phone": "...", "address": "..."},
        "categories": ["wood", "flooring"],
        "notes": "..."
    }
    """
    try:
        supplier = supplier_service.create_supplier(g.current_user.id, request.get_json(silent=True))
        return success_response(supplier.to_dict(), message="Supplier created", status=201)

    except DomainError as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create supplier")
        return server_error_response()


@suppliers_bp.get("/<int:supplier_id>")
@require_auth
@require_professional
def get_supplier_route(supplier_id: int):
    try:
        supplier = supplier_service.get_supplier(g.current_user.id, supplier_id)
        return success_response(supplier.to_dict())

    except DomainError as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to get supplier")
        return server_error_response()


@suppliers_bp.put("/<int:supplier_id>")
@require_auth
@require_professional
def update_supplier_route(supplier_id: int):
    """Partial update: only the fields present in the body change."""
    try:
        supplier = supplier_service.update_supplier(
            g.current_user.id,
            supplier_id,
            request.get_json(silent=True),
        )
        return success_response(supplier.to_dict(), message="Supplier updated")

    except DomainError as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update supplier")
        return server_error_response()


@suppliers_bp.delete("/<int:supplier_id>")
@require_auth
@require_professional
def delete_supplier_route(supplier_id: int):
    try:
        supplier_service.delete_supplier(g.current_user.id, supplier_id)
        return success_response(None, message="Supplier deleted")

    except DomainError as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to delete supplier")
        return server_error_response()
