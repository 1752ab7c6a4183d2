from __future__ import annotations

from ..extensions import db
from myhouz.time_utils import utcnow


class TimestampMixin:
    """
    created_at / updated_at bookkeeping.

    updated_at is never maintained by a flush hook: services call touch()
    on the record immediately before committing a change.
    """

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def touch(self) -> None:
        self.updated_at = utcnow()
