# Overview: Flask API routes for review operations; parses input and returns JSON responses.

"""
Review Routes

Listing reviews of a professional or product is public; everything else
requires authentication. Only approved reviews are ever listed.
"""

from flask import Blueprint, request, g, current_app

from ..errors import DomainError
from ..decorators import require_auth
from ..services import review_service
from ..services.pagination import page_request
from ..responses import domain_error_response, page_response, server_error_response, success_response


reviews_bp = Blueprint("reviews", __name__, url_prefix="/api/reviews")


def _list_entity_reviews(entity_type: str, entity_id: int):
    try:
        page, stats = review_service.list_entity_reviews(
            entity_type,
            entity_id,
            page_request(request.args.get("page"), request.args.get("limit")),
            sort=request.args.get("sort") or None,
        )
        return page_response(page, extra={"stats": stats})

    except DomainError as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to list %s reviews", entity_type)
        return server_error_response()


@reviews_bp.get("/professional/<int:professional_id>")
def professional_reviews_route(professional_id: int):
    """
    Query parameters:
    - page, limit: pagination
    - sort: recent (default), rating-desc, rating-asc, helpful
    """
    return _list_entity_reviews("professional", professional_id)


@reviews_bp.get("/product/<int:product_id>")
def product_reviews_route(product_id: int):
    return _list_entity_reviews("product", product_id)


@reviews_bp.post("")
@require_auth
def create_review_route():
    """
    Request body:
    {
        "reviewed_entity_id": 12,
        "entity_type": "professional",              // or "product"
        "rating": {"overall": 5, "quality": 4, ...},
        "title": "Great kitchen renovation",
        "comment": "At least twenty characters ...",
        "images": ["https://..."],                  // optional
        "project_context": {"project_type": "kitchen", "budget": 15000, "duration": 30}
    }
    """
    try:
        review = review_service.create_review(g.current_user.id, request.get_json(silent=True))
        return success_response(review.to_dict(), message="Review submitted for moderation", status=201)

    except DomainError as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create review")
        return server_error_response()


@reviews_bp.put("/<int:review_id>")
@require_auth
def update_review_route(review_id: int):
    try:
        review = review_service.update_review(g.current_user.id, review_id, request.get_json(silent=True))
        return success_response(review.to_dict(), message="Review updated")

    except DomainError as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update review")
        return server_error_response()


@reviews_bp.delete("/<int:review_id>")
@require_auth
def delete_review_route(review_id: int):
    try:
        review_service.delete_review(g.current_user.id, review_id)
        return success_response(None, message="Review deleted")

    except DomainError as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to delete review")
        return server_error_response()


@reviews_bp.post("/<int:review_id>/helpful")
@require_auth
def mark_helpful_route(review_id: int):
    """Request body: {"helpful": true}"""
    try:
        data = request.get_json(silent=True) or {}
        review = review_service.mark_helpful(review_id, data.get("helpful"))
        return success_response(review.to_dict())

    except DomainError as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to mark review helpful")
        return server_error_response()


@reviews_bp.post("/<int:review_id>/response")
@require_auth
def add_response_route(review_id: int):
    """Request body: {"text": "Thank you ..."}"""
    try:
        data = request.get_json(silent=True) or {}
        review = review_service.add_response(g.current_user, review_id, data.get("text"))
        return success_response(review.to_dict(), message="Response added")

    except DomainError as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to add review response")
        return server_error_response()
