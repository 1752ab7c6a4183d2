from __future__ import annotations

from ..extensions import db
from .mixins import TimestampMixin
from myhouz.time_utils import to_utc_z


REVIEW_ENTITY_TYPES = ("professional", "product")
REVIEW_STATUSES = ("pending", "approved", "rejected")
RATING_SUBSCORES = ("quality", "communication", "deadlines", "value")


class Review(TimestampMixin, db.Model):
    """
    A user's review of a professional or a product.

    One review per (reviewer, reviewed entity, entity type).

    MODERATION: status starts at "pending". Nothing in this service moves it;
    moderation tooling flips it to approved/rejected. Only approved reviews
    are listed publicly and counted in rating aggregates.
    """
    __tablename__ = "reviews"
    __table_args__ = (
        db.UniqueConstraint(
            "reviewer_id", "reviewed_entity_id", "entity_type",
            name="uq_reviews_reviewer_entity",
        ),
        db.Index("ix_reviews_entity", "reviewed_entity_id", "entity_type"),
        db.Index("ix_reviews_status_created", "status", "created_at"),
        db.CheckConstraint("rating_overall BETWEEN 1 AND 5", name="ck_reviews_rating_overall"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    reviewer_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    # Not a foreign key: products live outside this service
    reviewed_entity_id = db.Column(db.Integer, nullable=False)
    entity_type = db.Column(db.String(16), nullable=False)

    rating_overall = db.Column(db.Integer, nullable=False)
    rating_quality = db.Column(db.Integer, nullable=True)
    rating_communication = db.Column(db.Integer, nullable=True)
    rating_deadlines = db.Column(db.Integer, nullable=True)
    rating_value = db.Column(db.Integer, nullable=True)

    title = db.Column(db.String(200), nullable=False)
    comment = db.Column(db.Text, nullable=False)
    images = db.Column(db.JSON, nullable=False, default=list)
    project_context = db.Column(db.JSON, nullable=True)  # {project_type, budget, duration}

    verified = db.Column(db.Boolean, nullable=False, default=False)
    helpful_yes = db.Column(db.Integer, nullable=False, default=0)
    helpful_no = db.Column(db.Integer, nullable=False, default=0)

    response_text = db.Column(db.Text, nullable=True)
    responded_at = db.Column(db.DateTime(timezone=True), nullable=True)

    status = db.Column(db.String(16), nullable=False, default="pending")

    reviewer = db.relationship("User", backref=db.backref("reviews_written", lazy=True))

    def to_dict(self) -> dict:
        rating = {"overall": self.rating_overall}
        for name in RATING_SUBSCORES:
            rating[name] = getattr(self, f"rating_{name}")
        reviewer = self.reviewer
        return {
            "id": self.id,
            "reviewer": {
                "id": self.reviewer_id,
                "first_name": reviewer.first_name if reviewer else None,
                "last_name": reviewer.last_name if reviewer else None,
            },
            "reviewed_entity_id": self.reviewed_entity_id,
            "entity_type": self.entity_type,
            "rating": rating,
            "title": self.title,
            "comment": self.comment,
            "images": list(self.images or []),
            "project_context": self.project_context,
            "verified": self.verified,
            "helpful": {"yes": self.helpful_yes, "no": self.helpful_no},
            "response": {
                "text": self.response_text,
                "responded_at": to_utc_z(self.responded_at),
            } if self.response_text else None,
            "status": self.status,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
