# Overview: Service-layer operations for ideabooks; encapsulates business logic and database work.

"""
Ideabook Service

WHY: Users save projects, products, professionals and articles into named
collections, optionally shared with collaborators or published.

ACCESS RULES:
- Owner: everything
- Accepted collaborator: read; "comment" may add items; "edit" may also
  remove items and update the ideabook
- Anyone: read when the ideabook is public
- Pending invitations grant nothing until accepted
- No access is reported as "not found" so private ideabooks stay hidden
"""

from __future__ import annotations

from dataclasses import dataclass

from ..extensions import db
from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import Ideabook, IdeabookCollaborator, IdeabookItem, IdeabookTag, User
from ..models.ideabooks import COLLABORATOR_PERMISSIONS, IDEABOOK_ITEM_TYPES
from ..validation import (
    ModelValidationPolicy,
    coerce_int,
    coerce_str_list,
    optional_text,
    require_choice,
    validate_payload,
)
from myhouz.time_utils import utcnow
from .pagination import Page, PageRequest, paginate


IDEABOOK_POLICY = ModelValidationPolicy(
    writable_fields={"name", "description", "cover_image", "is_public"},
    required_on_create={"name"},
    min_lengths={"name": 3},
)

_ADD_ITEM_PERMISSIONS = ("comment", "edit")


@dataclass(frozen=True)
class IdeabookFilter:
    tags: tuple[str, ...] = ()


# =============================================================================
# ACCESS HELPERS
# =============================================================================

def _accepted_permission(ideabook: Ideabook, user_id: int | None) -> str | None:
    if user_id is None:
        return None
    collab = ideabook.collaborator_for(user_id)
    if collab and collab.is_accepted:
        return collab.permission
    return None


def _can_read(ideabook: Ideabook, user_id: int | None) -> bool:
    if ideabook.is_public or ideabook.user_id == user_id:
        return True
    return _accepted_permission(ideabook, user_id) is not None


def _can_edit(ideabook: Ideabook, user_id: int) -> bool:
    return ideabook.user_id == user_id or _accepted_permission(ideabook, user_id) == "edit"


def _load(ideabook_id: int) -> Ideabook:
    ideabook = db.session.get(Ideabook, ideabook_id)
    if not ideabook:
        raise NotFoundError("Ideabook not found")
    return ideabook


def _load_owned(user_id: int, ideabook_id: int) -> Ideabook:
    ideabook = _load(ideabook_id)
    if ideabook.user_id != user_id:
        raise NotFoundError("Ideabook not found or access denied")
    return ideabook


def _load_editable(user_id: int, ideabook_id: int) -> Ideabook:
    ideabook = _load(ideabook_id)
    if not _can_edit(ideabook, user_id):
        raise NotFoundError("Ideabook not found or access denied")
    return ideabook


def _split_tags(payload) -> tuple[dict, list[str] | None]:
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    data = dict(payload)
    tags = None
    if "tags" in data:
        tags = coerce_str_list(data.pop("tags"), "tags")
    return data, tags


def _set_tags(ideabook: Ideabook, tags: list[str]) -> None:
    # Same row reuse as supplier categories: kept tags must not be re-inserted.
    existing = {link.tag: link for link in ideabook.tag_links}
    links = []
    for position, tag in enumerate(tags):
        link = existing.get(tag) or IdeabookTag(tag=tag)
        link.position = position
        links.append(link)
    ideabook.tag_links = links


# =============================================================================
# IDEABOOKS
# =============================================================================

def create_ideabook(user_id: int, payload: dict) -> Ideabook:
    """
    Raises:
        ValidationError: name missing or outside 3..100, description > 500
    """
    data, tags = _split_tags(payload)
    patch = validate_payload(model=Ideabook, payload=data, policy=IDEABOOK_POLICY, partial=False)

    ideabook = Ideabook(user_id=user_id, likes=0, views=0, **patch)
    if ideabook.is_public is None:
        ideabook.is_public = False
    _set_tags(ideabook, tags or [])
    ideabook.touch()

    db.session.add(ideabook)
    db.session.commit()

    return ideabook


def list_user_ideabooks(user_id: int, page: PageRequest) -> Page:
    """Ideabooks the user owns or collaborates on (accepted), latest update first."""
    collaborating = db.select(IdeabookCollaborator.ideabook_id).where(
        IdeabookCollaborator.user_id == user_id,
        IdeabookCollaborator.accepted_at.isnot(None),
    )
    query = db.session.query(Ideabook).filter(
        db.or_(
            Ideabook.user_id == user_id,
            Ideabook.id.in_(collaborating),
        )
    ).order_by(Ideabook.updated_at.desc(), Ideabook.id.desc())
    return paginate(query, page)


def get_ideabook(user_id: int | None, ideabook_id: int) -> Ideabook:
    """
    Read an ideabook the user may see. Counts a view unless the reader is
    the owner.
    """
    ideabook = _load(ideabook_id)
    if not _can_read(ideabook, user_id):
        raise NotFoundError("Ideabook not found or access denied")

    if ideabook.user_id != user_id:
        ideabook.views += 1
        db.session.commit()

    return ideabook


def get_public_ideabook(ideabook_id: int) -> Ideabook:
    ideabook = db.session.query(Ideabook).filter_by(id=ideabook_id, is_public=True).first()
    if not ideabook:
        raise NotFoundError("Ideabook not found")

    ideabook.views += 1
    db.session.commit()

    return ideabook


def list_public_ideabooks(filters: IdeabookFilter, page: PageRequest) -> Page:
    """Public ideabooks, most liked first; tags match any of the given labels."""
    query = db.session.query(Ideabook).filter(Ideabook.is_public.is_(True))

    if filters.tags:
        query = query.filter(Ideabook.tag_links.any(IdeabookTag.tag.in_(filters.tags)))

    query = query.order_by(Ideabook.likes.desc(), Ideabook.updated_at.desc(), Ideabook.id.desc())
    return paginate(query, page)


def update_ideabook(user_id: int, ideabook_id: int, payload: dict) -> Ideabook:
    """
    Partial update by the owner or an "edit" collaborator.

    Raises:
        NotFoundError: missing or no edit access
        ValidationError: unknown fields, bad types/lengths
    """
    ideabook = _load_editable(user_id, ideabook_id)

    data, tags = _split_tags(payload)
    patch = validate_payload(model=Ideabook, payload=data, policy=IDEABOOK_POLICY, partial=True)

    for key, value in patch.items():
        setattr(ideabook, key, value)
    if tags is not None:
        _set_tags(ideabook, tags)
    ideabook.touch()

    db.session.commit()

    return ideabook


def delete_ideabook(user_id: int, ideabook_id: int) -> None:
    ideabook = _load_owned(user_id, ideabook_id)
    db.session.delete(ideabook)
    db.session.commit()


def like_ideabook(user_id: int | None, ideabook_id: int) -> Ideabook:
    ideabook = _load(ideabook_id)
    if not _can_read(ideabook, user_id):
        raise NotFoundError("Ideabook not found")

    ideabook.likes += 1
    db.session.commit()

    return ideabook


# =============================================================================
# ITEMS
# =============================================================================

def add_item(user_id: int, ideabook_id: int, item_type, item_id, note=None) -> Ideabook:
    """
    Save a marketplace item. Owner, "comment" and "edit" collaborators only.

    Raises:
        NotFoundError: missing or insufficient access
        ValidationError: bad type, missing item_id, note > 300
        ConflictError: (type, item_id) already in the ideabook
    """
    ideabook = _load(ideabook_id)
    if ideabook.user_id != user_id and _accepted_permission(ideabook, user_id) not in _ADD_ITEM_PERMISSIONS:
        raise NotFoundError("Ideabook not found or access denied")

    item_type = require_choice(item_type, "type", IDEABOOK_ITEM_TYPES)
    if isinstance(item_id, int) and not isinstance(item_id, bool):
        item_id = str(item_id)
    item_id = optional_text(item_id, "item_id", max_length=64)
    if not item_id:
        raise ValidationError("item_id is required", errors={"item_id": "required"})
    note = optional_text(note, "note", max_length=300)

    for item in ideabook.items:
        if item.item_type == item_type and item.item_id == item_id:
            raise ConflictError("Item already in this ideabook")

    ideabook.items.append(IdeabookItem(
        item_type=item_type,
        item_id=item_id,
        note=note,
        added_at=utcnow(),
    ))
    ideabook.touch()

    db.session.commit()

    return ideabook


def remove_item(user_id: int, ideabook_id: int, item_row_id: int) -> Ideabook:
    ideabook = _load_editable(user_id, ideabook_id)

    item = next((i for i in ideabook.items if i.id == item_row_id), None)
    if not item:
        raise NotFoundError("Item not found")

    ideabook.items.remove(item)
    ideabook.touch()

    db.session.commit()

    return ideabook


# =============================================================================
# COLLABORATORS
# =============================================================================

def invite_collaborator(owner_id: int, ideabook_id: int, user_id, permission=None) -> Ideabook:
    """
    Owner invites another user. The invitation is pending until accepted.

    Raises:
        NotFoundError: ideabook not owned, or invitee does not exist
        ConflictError: inviting yourself, or the user is already invited
        ValidationError: bad permission
    """
    ideabook = _load_owned(owner_id, ideabook_id)

    if user_id is None:
        raise ValidationError("user_id is required", errors={"user_id": "required"})
    invitee_id = coerce_int(user_id, "user_id", minimum=1)
    permission = require_choice(permission or "view", "permission", COLLABORATOR_PERMISSIONS)

    if invitee_id == owner_id:
        raise ConflictError("You cannot invite yourself")
    if not db.session.get(User, invitee_id):
        raise NotFoundError("User not found")
    if ideabook.collaborator_for(invitee_id):
        raise ConflictError("This user is already a collaborator")

    ideabook.collaborators.append(IdeabookCollaborator(
        user_id=invitee_id,
        permission=permission,
        invited_at=utcnow(),
    ))
    ideabook.touch()

    db.session.commit()

    return ideabook


def accept_invitation(user_id: int, ideabook_id: int) -> Ideabook:
    """Accepting twice keeps the first acceptance time."""
    ideabook = _load(ideabook_id)
    collab = ideabook.collaborator_for(user_id)
    if not collab:
        raise NotFoundError("Invitation not found")

    if not collab.is_accepted:
        collab.accepted_at = utcnow()
        db.session.commit()

    return ideabook


def update_collaborator_permission(owner_id: int, ideabook_id: int, user_id: int, permission) -> Ideabook:
    ideabook = _load_owned(owner_id, ideabook_id)
    permission = require_choice(permission, "permission", COLLABORATOR_PERMISSIONS)

    collab = ideabook.collaborator_for(user_id)
    if not collab:
        raise NotFoundError("Collaborator not found")

    collab.permission = permission
    ideabook.touch()

    db.session.commit()

    return ideabook


def remove_collaborator(owner_id: int, ideabook_id: int, user_id: int) -> Ideabook:
    ideabook = _load_owned(owner_id, ideabook_id)

    collab = ideabook.collaborator_for(user_id)
    if not collab:
        raise NotFoundError("Collaborator not found")

    ideabook.collaborators.remove(collab)
    ideabook.touch()

    db.session.commit()

    return ideabook
