from __future__ import annotations

from ..extensions import db
from .mixins import TimestampMixin
from myhouz.time_utils import to_utc_z, utcnow


IDEABOOK_ITEM_TYPES = ("project", "product", "professional", "article")
COLLABORATOR_PERMISSIONS = ("view", "comment", "edit")


class Ideabook(TimestampMixin, db.Model):
    """
    User-curated collection of saved marketplace items.

    ACCESS:
    - owner: everything
    - accepted collaborator: read; "comment" can add items; "edit" can also
      remove items and change the ideabook itself
    - anyone: read when is_public
    Invitations that were not accepted grant nothing.
    """
    __tablename__ = "ideabooks"
    __table_args__ = (
        db.Index("ix_ideabooks_public_created", "is_public", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.String(500), nullable=True)
    cover_image = db.Column(db.String(1024), nullable=True)
    is_public = db.Column(db.Boolean, nullable=False, default=False)

    likes = db.Column(db.Integer, nullable=False, default=0)
    views = db.Column(db.Integer, nullable=False, default=0)

    owner = db.relationship("User", backref=db.backref("ideabooks", lazy=True))
    items = db.relationship(
        "IdeabookItem",
        back_populates="ideabook",
        order_by="[IdeabookItem.added_at, IdeabookItem.id]",
        cascade="all, delete-orphan",
        lazy=True,
    )
    collaborators = db.relationship(
        "IdeabookCollaborator",
        back_populates="ideabook",
        order_by="IdeabookCollaborator.invited_at",
        cascade="all, delete-orphan",
        lazy=True,
    )
    tag_links = db.relationship(
        "IdeabookTag",
        back_populates="ideabook",
        order_by="IdeabookTag.position",
        cascade="all, delete-orphan",
        lazy=True,
    )

    @property
    def tags(self) -> list[str]:
        return [link.tag for link in self.tag_links]

    def collaborator_for(self, user_id: int) -> "IdeabookCollaborator | None":
        for collab in self.collaborators:
            if collab.user_id == user_id:
                return collab
        return None

    def to_dict(self, *, include_collaborators: bool = True) -> dict:
        data = {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "description": self.description,
            "cover_image": self.cover_image,
            "is_public": self.is_public,
            "tags": self.tags,
            "likes": self.likes,
            "views": self.views,
            "items": [item.to_dict() for item in self.items],
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if include_collaborators:
            data["collaborators"] = [c.to_dict() for c in self.collaborators]
        return data


class IdeabookItem(db.Model):
    __tablename__ = "ideabook_items"
    __table_args__ = (
        db.UniqueConstraint("ideabook_id", "item_type", "item_id", name="uq_ideabook_items_item"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    ideabook_id = db.Column(db.Integer, db.ForeignKey("ideabooks.id"), nullable=False, index=True)

    item_type = db.Column(db.String(16), nullable=False)  # project, product, professional, article
    item_id = db.Column(db.String(64), nullable=False)
    note = db.Column(db.String(300), nullable=True)
    added_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    ideabook = db.relationship("Ideabook", back_populates="items")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.item_type,
            "item_id": self.item_id,
            "note": self.note,
            "added_at": to_utc_z(self.added_at),
        }


class IdeabookCollaborator(db.Model):
    __tablename__ = "ideabook_collaborators"
    __table_args__ = (
        db.UniqueConstraint("ideabook_id", "user_id", name="uq_ideabook_collaborators_user"),
        db.Index("ix_ideabook_collaborators_user", "user_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    ideabook_id = db.Column(db.Integer, db.ForeignKey("ideabooks.id"), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)

    permission = db.Column(db.String(16), nullable=False, default="view")
    invited_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    accepted_at = db.Column(db.DateTime(timezone=True), nullable=True)

    ideabook = db.relationship("Ideabook", back_populates="collaborators")
    user = db.relationship("User")

    @property
    def is_accepted(self) -> bool:
        return self.accepted_at is not None

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "permission": self.permission,
            "invited_at": to_utc_z(self.invited_at),
            "accepted_at": to_utc_z(self.accepted_at) if self.accepted_at else None,
        }


class IdeabookTag(db.Model):
    __tablename__ = "ideabook_tags"
    __table_args__ = (
        db.UniqueConstraint("ideabook_id", "tag", name="uq_ideabook_tags_tag"),
        db.Index("ix_ideabook_tags_tag", "tag"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    ideabook_id = db.Column(db.Integer, db.ForeignKey("ideabooks.id"), nullable=False, index=True)
    tag = db.Column(db.String(64), nullable=False)
    position = db.Column(db.Integer, nullable=False, default=0)

    ideabook = db.relationship("Ideabook", back_populates="tag_links")
