# Overview: Flask API routes for ideabook operations; parses input and returns JSON responses.

"""
Ideabook Routes

Public listing and public reads need no token. Everything else requires
authentication; access rules (owner / collaborator / public) live in
ideabook_service.
"""

from flask import Blueprint, request, g, current_app

from ..errors import DomainError
from ..decorators import require_auth
from ..services import ideabook_service
from ..services.ideabook_service import IdeabookFilter
from ..services.pagination import page_request
from ..validation import coerce_str_list
from ..responses import domain_error_response, page_response, server_error_response, success_response


ideabooks_bp = Blueprint("ideabooks", __name__, url_prefix="/api/ideabooks")


def _public_dict(ideabook) -> dict:
    return ideabook.to_dict(include_collaborators=False)


# =============================================================================
# PUBLIC
# =============================================================================

@ideabooks_bp.get("/public")
def list_public_route():
    """
    Query parameters:
    - page, limit: pagination
    - tags: comma separated; matches ideabooks carrying any of them
    """
    try:
        raw_tags = request.args.get("tags") or ""
        filters = IdeabookFilter(tags=tuple(coerce_str_list(raw_tags.split(","), "tags")))
        page = ideabook_service.list_public_ideabooks(
            filters,
            page_request(request.args.get("page"), request.args.get("limit")),
        )
        return page_response(page, _public_dict)

    except DomainError as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to list public ideabooks")
        return server_error_response()


@ideabooks_bp.get("/<int:ideabook_id>/public")
def get_public_route(ideabook_id: int):
    try:
        ideabook = ideabook_service.get_public_ideabook(ideabook_id)
        return success_response(_public_dict(ideabook))

    except DomainError as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to get public ideabook")
        return server_error_response()


# =============================================================================
# IDEABOOKS
# =============================================================================

@ideabooks_bp.get("")
@require_auth
def list_user_ideabooks_route():
    try:
        page = ideabook_service.list_user_ideabooks(
            g.current_user.id,
            page_request(request.args.get("page"), request.args.get("limit")),
        )
        return page_response(page)

    except DomainError as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to list ideabooks")
        return server_error_response()


@ideabooks_bp.post("")
@require_auth
def create_ideabook_route():
    """
    Request body:
    {
        "name": "Kitchen ideas",       // required, 3..100 chars
        "description": "...",          // optional, <= 500 chars
        "cover_image": "https://...",  // optional
        "is_public": false,            // optional
        "tags": ["kitchen", "modern"]  // optional
    }
    """
    try:
        ideabook = ideabook_service.create_ideabook(g.current_user.id, request.get_json(silent=True))
        return success_response(ideabook.to_dict(), message="Ideabook created", status=201)

    except DomainError as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create ideabook")
        return server_error_response()


@ideabooks_bp.get("/<int:ideabook_id>")
@require_auth
def get_ideabook_route(ideabook_id: int):
    try:
        ideabook = ideabook_service.get_ideabook(g.current_user.id, ideabook_id)
        return success_response(ideabook.to_dict())

    except DomainError as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to get ideabook")
        return server_error_response()


@ideabooks_bp.put("/<int:ideabook_id>")
@require_auth
def update_ideabook_route(ideabook_id: int):
    try:
        ideabook = ideabook_service.update_ideabook(
            g.current_user.id,
            ideabook_id,
            request.get_json(silent=True),
        )
        return success_response(ideabook.to_dict(), message="Ideabook updated")

    except DomainError as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update ideabook")
        return server_error_response()


@ideabooks_bp.delete("/<int:ideabook_id>")
@require_auth
def delete_ideabook_route(ideabook_id: int):
    try:
        ideabook_service.delete_ideabook(g.current_user.id, ideabook_id)
        return success_response(None, message="Ideabook deleted")

    except DomainError as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to delete ideabook")
        return server_error_response()


@ideabooks_bp.post("/<int:ideabook_id>/like")
@require_auth
def like_ideabook_route(ideabook_id: int):
    try:
        ideabook = ideabook_service.like_ideabook(g.current_user.id, ideabook_id)
        return success_response({"likes": ideabook.likes})

    except DomainError as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to like ideabook")
        return server_error_response()


# =============================================================================
# ITEMS
# =============================================================================

@ideabooks_bp.post("/<int:ideabook_id>/items")
@require_auth
def add_item_route(ideabook_id: int):
    """
    Request body:
    {
        "type": "product",   // project, product, professional, article
        "item_id": "42",
        "note": "..."        // optional, <= 300 chars
    }
    """
    try:
        data = request.get_json(silent=True) or {}

        ideabook = ideabook_service.add_item(
            g.current_user.id,
            ideabook_id,
            item_type=data.get("type"),
            item_id=data.get("item_id"),
            note=data.get("note"),
        )

        return success_response(ideabook.to_dict(), message="Item added")

    except DomainError as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to add ideabook item")
        return server_error_response()


@ideabooks_bp.delete("/<int:ideabook_id>/items/<int:item_id>")
@require_auth
def remove_item_route(ideabook_id: int, item_id: int):
    try:
        ideabook = ideabook_service.remove_item(g.current_user.id, ideabook_id, item_id)
        return success_response(ideabook.to_dict(), message="Item removed")

    except DomainError as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to remove ideabook item")
        return server_error_response()


# =============================================================================
# COLLABORATORS
# =============================================================================

@ideabooks_bp.post("/<int:ideabook_id>/collaborators")
@require_auth
def invite_collaborator_route(ideabook_id: int):
    """Request body: {"user_id": 7, "permission": "view" | "comment" | "edit"}"""
    try:
        data = request.get_json(silent=True) or {}

        ideabook = ideabook_service.invite_collaborator(
            g.current_user.id,
            ideabook_id,
            user_id=data.get("user_id"),
            permission=data.get("permission"),
        )

        return success_response(ideabook.to_dict(), message="Collaborator invited")

    except DomainError as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to invite collaborator")
        return server_error_response()


@ideabooks_bp.post("/<int:ideabook_id>/collaborators/accept")
@require_auth
def accept_invitation_route(ideabook_id: int):
    try:
        ideabook = ideabook_service.accept_invitation(g.current_user.id, ideabook_id)
        return success_response(ideabook.to_dict(), message="Invitation accepted")

    except DomainError as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to accept ideabook invitation")
        return server_error_response()


@ideabooks_bp.put("/<int:ideabook_id>/collaborators/<int:user_id>")
@require_auth
def update_collaborator_route(ideabook_id: int, user_id: int):
    """Request body: {"permission": "edit"}"""
    try:
        data = request.get_json(silent=True) or {}

        ideabook = ideabook_service.update_collaborator_permission(
            g.current_user.id,
            ideabook_id,
            user_id,
            data.get("permission"),
        )

        return success_response(ideabook.to_dict(), message="Permission updated")

    except DomainError as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update collaborator")
        return server_error_response()


@ideabooks_bp.delete("/<int:ideabook_id>/collaborators/<int:user_id>")
@require_auth
def remove_collaborator_route(ideabook_id: int, user_id: int):
    try:
        ideabook = ideabook_service.remove_collaborator(g.current_user.id, ideabook_id, user_id)
        return success_response(ideabook.to_dict(), message="Collaborator removed")

    except DomainError as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to remove collaborator")
        return server_error_response()
