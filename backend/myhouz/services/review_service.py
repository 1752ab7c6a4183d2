# Overview: Service-layer operations for reviews; encapsulates business logic and database work.

"""
Review Service

WHY: Homeowners rate the professionals they hired and the products they
bought. Ratings feed the professional's public score.

RULES:
- One review per (reviewer, entity, entity_type)
- rating.overall is required; quality/communication/deadlines/value are
  optional; every score is an integer 1..5
- New reviews are "pending". Moderation (outside this service) approves or
  rejects them; only approved reviews are listed and aggregated
- Only the reviewer may edit or delete a review
- Only professionals may respond, and on a professional review only the
  reviewed professional
"""

from __future__ import annotations

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from ..models import Review, User
from ..models.reviews import RATING_SUBSCORES, REVIEW_ENTITY_TYPES
from ..validation import coerce_int, require_choice, require_text
from myhouz.time_utils import utcnow
from .pagination import Page, PageRequest, paginate


REVIEW_SORTS = ("recent", "rating-desc", "rating-asc", "helpful")
EDITABLE_FIELDS = {"rating", "title", "comment", "images", "project_context"}
MAX_IMAGES = 10


# =============================================================================
# PAYLOAD VALIDATION
# =============================================================================

def _score(value, field_name: str) -> int:
    return coerce_int(value, field_name, minimum=1, maximum=5)


def validate_rating(rating) -> dict:
    """
    Returns {"rating_overall": n, "rating_quality": n | None, ...}.
    """
    if not isinstance(rating, dict):
        raise ValidationError("rating is required", errors={"rating": "required"})

    unknown = set(rating) - {"overall", *RATING_SUBSCORES}
    if unknown:
        raise ValidationError(f"Unknown rating field: {sorted(unknown)[0]}")

    if rating.get("overall") is None:
        raise ValidationError("rating.overall is required", errors={"rating.overall": "required"})

    columns = {"rating_overall": _score(rating["overall"], "rating.overall")}
    for name in RATING_SUBSCORES:
        value = rating.get(name)
        columns[f"rating_{name}"] = None if value is None else _score(value, f"rating.{name}")
    return columns


def _validate_images(images) -> list[str]:
    if images is None:
        return []
    if not isinstance(images, list) or not all(isinstance(i, str) for i in images):
        raise ValidationError("images must be a list of URLs")
    if len(images) > MAX_IMAGES:
        raise ValidationError(f"At most {MAX_IMAGES} images are allowed")
    for url in images:
        if not url.startswith(("http://", "https://")):
            raise ValidationError("images must be absolute http(s) URLs", errors={"images": "invalid url"})
    return list(images)


def _non_negative_number(value, field_name: str):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{field_name} must be a number")
    if value < 0:
        raise ValidationError(f"{field_name} must be >= 0")
    return value


def _validate_project_context(context) -> dict | None:
    if context is None:
        return None
    if not isinstance(context, dict):
        raise ValidationError("project_context must be an object")

    unknown = set(context) - {"project_type", "budget", "duration"}
    if unknown:
        raise ValidationError(f"Unknown project_context field: {sorted(unknown)[0]}")

    cleaned = {}
    if context.get("project_type") is not None:
        cleaned["project_type"] = require_text(context["project_type"], "project_context.project_type", max_length=100)
    if context.get("budget") is not None:
        cleaned["budget"] = _non_negative_number(context["budget"], "project_context.budget")
    if context.get("duration") is not None:
        cleaned["duration"] = _non_negative_number(context["duration"], "project_context.duration")
    return cleaned or None


def _validate_content(payload: dict, *, partial: bool) -> dict:
    fields = {}
    if not partial or "rating" in payload:
        fields.update(validate_rating(payload.get("rating")))
    if not partial or "title" in payload:
        fields["title"] = require_text(payload.get("title"), "title", min_length=5, max_length=200)
    if not partial or "comment" in payload:
        fields["comment"] = require_text(payload.get("comment"), "comment", min_length=20, max_length=1000)
    if not partial or "images" in payload:
        fields["images"] = _validate_images(payload.get("images"))
    if not partial or "project_context" in payload:
        fields["project_context"] = _validate_project_context(payload.get("project_context"))
    return fields


# =============================================================================
# WRITE OPERATIONS
# =============================================================================

def _load_own(reviewer_id: int, review_id: int) -> Review:
    review = db.session.query(Review).filter_by(id=review_id, reviewer_id=reviewer_id).first()
    if not review:
        raise NotFoundError("Review not found or not authorized")
    return review


def _load(review_id: int) -> Review:
    review = db.session.get(Review, review_id)
    if not review:
        raise NotFoundError("Review not found")
    return review


def create_review(reviewer_id: int, payload: dict) -> Review:
    """
    Create a pending review.

    Raises:
        ValidationError: malformed payload, or reviewing yourself
        NotFoundError: reviewed professional does not exist
        ConflictError: reviewer already reviewed this entity
    """
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    entity_type = require_choice(payload.get("entity_type"), "entity_type", REVIEW_ENTITY_TYPES)
    if payload.get("reviewed_entity_id") is None:
        raise ValidationError("reviewed_entity_id is required", errors={"reviewed_entity_id": "required"})
    entity_id = coerce_int(payload["reviewed_entity_id"], "reviewed_entity_id", minimum=1)
    fields = _validate_content(payload, partial=False)

    if entity_type == "professional":
        if entity_id == reviewer_id:
            raise ValidationError("You cannot review yourself")
        professional = db.session.get(User, entity_id)
        if not professional or not professional.is_professional:
            raise NotFoundError("Professional not found")

    existing = db.session.query(Review).filter_by(
        reviewer_id=reviewer_id,
        reviewed_entity_id=entity_id,
        entity_type=entity_type,
    ).first()
    if existing:
        raise ConflictError("You have already reviewed this entity")

    review = Review(
        reviewer_id=reviewer_id,
        reviewed_entity_id=entity_id,
        entity_type=entity_type,
        status="pending",
        **fields,
    )
    review.touch()

    db.session.add(review)
    try:
        db.session.flush()
    except IntegrityError:
        # Lost a race against a concurrent create for the same entity
        db.session.rollback()
        raise ConflictError("You have already reviewed this entity")

    refresh_entity_rating(entity_type, entity_id)
    db.session.commit()

    return review


def update_review(reviewer_id: int, review_id: int, payload: dict) -> Review:
    """
    Edit the reviewer's own review. Status, reviewer and entity are fixed.
    """
    review = _load_own(reviewer_id, review_id)

    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    for key in payload:
        if key not in EDITABLE_FIELDS:
            raise ValidationError(f"Field not allowed: {key}")

    for key, value in _validate_content(payload, partial=True).items():
        setattr(review, key, value)
    review.touch()
    db.session.flush()

    refresh_entity_rating(review.entity_type, review.reviewed_entity_id)
    db.session.commit()

    return review


def delete_review(reviewer_id: int, review_id: int) -> None:
    review = _load_own(reviewer_id, review_id)
    entity_type, entity_id = review.entity_type, review.reviewed_entity_id

    db.session.delete(review)
    db.session.flush()

    refresh_entity_rating(entity_type, entity_id)
    db.session.commit()


def mark_helpful(review_id: int, helpful) -> Review:
    if not isinstance(helpful, bool):
        raise ValidationError("helpful must be true or false", errors={"helpful": "boolean required"})

    review = _load(review_id)
    if helpful:
        review.helpful_yes += 1
    else:
        review.helpful_no += 1
    review.touch()

    db.session.commit()
    return review


def add_response(user: User, review_id: int, text) -> Review:
    """
    Attach (or replace) the professional's public answer.

    Raises:
        ForbiddenError: user is not a professional, or not the reviewed one
        NotFoundError: review missing
    """
    if not user.is_professional:
        raise ForbiddenError("Only professionals can respond to reviews")

    text = require_text(text, "text", max_length=1000)
    review = _load(review_id)

    if review.entity_type == "professional" and review.reviewed_entity_id != user.id:
        raise ForbiddenError("Not authorized to respond to this review")

    review.response_text = text
    review.responded_at = utcnow()
    review.touch()

    db.session.commit()
    return review


# =============================================================================
# READ OPERATIONS
# =============================================================================

def _approved_for(entity_type: str, entity_id: int):
    return db.session.query(Review).filter(
        Review.reviewed_entity_id == entity_id,
        Review.entity_type == entity_type,
        Review.status == "approved",
    )


def review_stats(entity_type: str, entity_id: int) -> dict:
    rows = (
        _approved_for(entity_type, entity_id)
        .with_entities(Review.rating_overall, func.count(Review.id))
        .group_by(Review.rating_overall)
        .all()
    )
    distribution = {score: 0 for score in range(1, 6)}
    for score, count in rows:
        distribution[score] = count

    total = sum(distribution.values())
    average = sum(score * count for score, count in distribution.items()) / total if total else 0
    return {
        "average_rating": round(average, 1),
        "total_reviews": total,
        "distribution": {str(k): v for k, v in distribution.items()},
    }


def list_entity_reviews(
    entity_type: str,
    entity_id: int,
    page: PageRequest,
    sort: str | None = None,
) -> tuple[Page, dict]:
    """
    Approved reviews of one professional or product, plus rating stats.
    """
    require_choice(entity_type, "entity_type", REVIEW_ENTITY_TYPES)
    sort = sort or "recent"
    require_choice(sort, "sort", REVIEW_SORTS)

    query = _approved_for(entity_type, entity_id)
    if sort == "rating-desc":
        query = query.order_by(Review.rating_overall.desc(), Review.created_at.desc())
    elif sort == "rating-asc":
        query = query.order_by(Review.rating_overall.asc(), Review.created_at.desc())
    elif sort == "helpful":
        query = query.order_by(Review.helpful_yes.desc(), Review.created_at.desc())
    else:
        query = query.order_by(Review.created_at.desc(), Review.id.desc())

    return paginate(query, page), review_stats(entity_type, entity_id)


def refresh_entity_rating(entity_type: str, entity_id: int) -> None:
    """
    Recompute a professional's denormalized rating from approved reviews.

    Products are rated outside this service; nothing is stored for them.
    Does not commit.
    """
    if entity_type != "professional":
        return

    professional = db.session.get(User, entity_id)
    if not professional:
        return

    stats = review_stats(entity_type, entity_id)
    professional.rating_count = stats["total_reviews"]
    professional.rating_average = stats["average_rating"] if stats["total_reviews"] else None
