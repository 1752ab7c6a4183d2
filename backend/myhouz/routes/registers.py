# Overview: Flask API routes for registers operations; parses input and returns JSON responses.

# backend/myhouz/routes/registers.py
"""
Register Management API Routes

WHY: Sellers open a register at the start of a shift and close it with the
counted cash at the end.

DESIGN:
- Register CRUD scoped to the authenticated seller
- Shift lifecycle: closed -> open -> closed (reopen resets the counters)
- Sales are counted on the open register

SECURITY:
- All routes require an authenticated professional account
"""

from flask import Blueprint, request, g, current_app

from ..errors import DomainError
from ..services import register_service
from ..decorators import require_auth, require_professional
from ..responses import domain_error_response, server_error_response, success_response


registers_bp = Blueprint("registers", __name__, url_prefix="/api/pos/registers")


@registers_bp.post("/")
@registers_bp.post("")
@require_auth
@require_professional
def create_register_route():
    """
    Create a new register (starts closed).

    Request body:
    {
        "name": "Front Counter",
        "opening_balance_cents": 10000,  (optional)
        "notes": "..."                   (optional)
    }
    """
    try:
        data = request.get_json(silent=True) or {}

        register = register_service.create_register(
            seller_id=g.current_user.id,
            name=data.get("name"),
            opening_balance_cents=data.get("opening_balance_cents"),
            notes=data.get("notes"),
        )

        return success_response(register.to_dict(), message="Register created", status=201)

    except DomainError as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create register")
        return server_error_response()


@registers_bp.get("/")
@registers_bp.get("")
@require_auth
@require_professional
def list_registers_route():
    """List the seller's registers, newest first. Optional ?status=open|closed."""
    try:
        registers = register_service.list_registers(
            seller_id=g.current_user.id,
            status=request.args.get("status") or None,
        )
        return success_response([r.to_dict() for r in registers])

    except DomainError as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to list registers")
        return server_error_response()


@registers_bp.get("/<int:register_id>")
@require_auth
@require_professional
def get_register_route(register_id: int):
    try:
        register = register_service.get_register(g.current_user.id, register_id)
        return success_response(register.to_dict())

    except DomainError as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to get register")
        return server_error_response()


@registers_bp.post("/<int:register_id>/open")
@require_auth
@require_professional
def open_register_route(register_id: int):
    """
    Open a closed register.

    Request body:
    {
        "opening_balance_cents": 10000  (optional, defaults to 0)
    }
    """
    try:
        data = request.get_json(silent=True) or {}

        register = register_service.open_register(
            seller_id=g.current_user.id,
            register_id=register_id,
            opening_balance_cents=data.get("opening_balance_cents"),
        )

        return success_response(register.to_dict(), message="Register opened")

    except DomainError as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to open register")
        return server_error_response()


@registers_bp.post("/<int:register_id>/close")
@require_auth
@require_professional
def close_register_route(register_id: int):
    """
    Close an open register.

    Request body:
    {
        "closing_balance_cents": 25000,  (optional, defaults to 0)
        "notes": "..."                   (optional)
    }
    """
    try:
        data = request.get_json(silent=True) or {}

        register = register_service.close_register(
            seller_id=g.current_user.id,
            register_id=register_id,
            closing_balance_cents=data.get("closing_balance_cents"),
            notes=data.get("notes"),
        )

        return success_response(register.to_dict(), message="Register closed")

    except DomainError as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to close register")
        return server_error_response()


@registers_bp.post("/<int:register_id>/sales")
@require_auth
@require_professional
def record_sale_route(register_id: int):
    """
    Count a sale on the open register.

    Request body:
    {
        "amount_cents": 4599
    }
    """
    try:
        data = request.get_json(silent=True) or {}

        register = register_service.record_sale(
            seller_id=g.current_user.id,
            register_id=register_id,
            amount_cents=data.get("amount_cents"),
        )

        return success_response(register.to_dict(), message="Sale recorded")

    except DomainError as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to record sale")
        return server_error_response()


@registers_bp.delete("/<int:register_id>")
@require_auth
@require_professional
def delete_register_route(register_id: int):
    try:
        register_service.delete_register(g.current_user.id, register_id)
        return success_response(None, message="Register deleted")

    except DomainError as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to delete register")
        return server_error_response()
