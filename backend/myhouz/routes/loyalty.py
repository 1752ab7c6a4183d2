# Overview: Flask API routes for loyalty operations; parses input and returns JSON responses.

"""
Loyalty Routes

SECURITY: All routes require an authenticated professional account.
Programs are scoped to the seller; another seller's customer is a 404.
"""

from flask import Blueprint, request, g, current_app

from ..errors import DomainError
from ..decorators import require_auth, require_professional
from ..services import loyalty_service
from ..services.loyalty_service import LoyaltyFilter
from ..services.pagination import page_request
from ..responses import domain_error_response, page_response, server_error_response, success_response


loyalty_bp = Blueprint("loyalty", __name__, url_prefix="/api/pos/loyalty/customers")


@loyalty_bp.post("")
@require_auth
@require_professional
def enroll_customer_route():
    """
    Enroll a customer.

    Request body:
    {
        "name": "Jane Doe",          // required
        "email": "jane@example.com", // email or phone required
        "phone": "0600000000"
    }
    """
    try:
        data = request.get_json(silent=True) or {}

        program = loyalty_service.enroll_customer(
            seller_id=g.current_user.id,
            name=data.get("name"),
            email=data.get("email"),
            phone=data.get("phone"),
        )

        return success_response(program.to_dict(), message="Customer enrolled", status=201)

    except DomainError as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to enroll loyalty customer")
        return server_error_response()


@loyalty_bp.get("")
@require_auth
@require_professional
def list_customers_route():
    """
    Query parameters:
    - page, limit: pagination (limit clamped to 1..100)
    - search: substring of name, email or phone
    - tier: bronze, silver, gold or platinum
    """
    try:
        filters = LoyaltyFilter(
            seller_id=g.current_user.id,
            search=request.args.get("search") or None,
            tier=request.args.get("tier") or None,
        )
        page = loyalty_service.list_programs(
            filters,
            page_request(request.args.get("page"), request.args.get("limit")),
        )

        return page_response(page, lambda p: p.to_dict(include_history=False))

    except DomainError as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to list loyalty customers")
        return server_error_response()


@loyalty_bp.get("/<int:program_id>")
@require_auth
@require_professional
def get_customer_route(program_id: int):
    try:
        program = loyalty_service.get_program(g.current_user.id, program_id)
        return success_response(program.to_dict())

    except DomainError as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to get loyalty customer")
        return server_error_response()


@loyalty_bp.post("/<int:program_id>/points")
@require_auth
@require_professional
def earn_points_route(program_id: int):
    """
    Credit points.

    Request body:
    {
        "points": 120,              // required, positive integer
        "description": "...",       // optional
        "sale_id": "S-2026-0042"    // optional
    }
    """
    try:
        data = request.get_json(silent=True) or {}

        program = loyalty_service.earn_points(
            seller_id=g.current_user.id,
            program_id=program_id,
            points=data.get("points"),
            description=data.get("description"),
            sale_ref=data.get("sale_id"),
        )

        return success_response(program.to_dict(), message="Points added")

    except DomainError as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to add loyalty points")
        return server_error_response()


@loyalty_bp.post("/<int:program_id>/spend")
@require_auth
@require_professional
def spend_points_route(program_id: int):
    """
    Redeem points.

    Request body:
    {
        "points": 100,         // required, positive integer <= balance
        "description": "..."   // optional
    }
    """
    try:
        data = request.get_json(silent=True) or {}

        program = loyalty_service.spend_points(
            seller_id=g.current_user.id,
            program_id=program_id,
            points=data.get("points"),
            description=data.get("description"),
        )

        return success_response(program.to_dict(), message="Points redeemed")

    except DomainError as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to spend loyalty points")
        return server_error_response()
