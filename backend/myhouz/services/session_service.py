# Overview: Bearer-token sessions for MyHouz accounts.

"""
Session Service

WHY: API clients authenticate with an opaque bearer token issued at login.
The database only ever sees the token's SHA-256 digest, so a leaked table
cannot be replayed.

LIFETIME:
- A session dies 24 hours after login whatever happens (SESSION_ABSOLUTE_TIMEOUT)
- It also dies after 2 hours without a request (SESSION_IDLE_TIMEOUT)
- Logout, idle timeout and account deactivation revoke the row; the reason
  is kept for support
- Dead rows older than SESSION_RETENTION are purged by
  `flask maintenance cleanup-sessions`
"""

import hashlib
import secrets
from dataclasses import dataclass
from datetime import timedelta

from ..extensions import db
from ..errors import NotFoundError
from ..models import SessionToken, User
from myhouz.time_utils import utcnow


SESSION_ABSOLUTE_TIMEOUT = timedelta(hours=24)
SESSION_IDLE_TIMEOUT = timedelta(hours=2)
SESSION_RETENTION = timedelta(days=30)

TOKEN_BYTES = 32


@dataclass
class SessionContext:
    """Who is calling, and through which session."""
    user: User
    session: SessionToken


def hash_token(token: str) -> str:
    # Tokens carry 256 bits of entropy: a plain digest is enough, no salt or stretching.
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _live_session(token: str) -> SessionToken | None:
    return db.session.query(SessionToken).filter_by(
        token_hash=hash_token(token),
        is_revoked=False,
    ).first()


def _revoke(session: SessionToken, reason: str) -> None:
    session.is_revoked = True
    session.revoked_at = utcnow()
    session.revoked_reason = reason


def create_session(
    user_id: int,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> tuple[SessionToken, str]:
    """
    Open a session at login.

    Returns (row, token). The token goes back to the client exactly once;
    only its digest is persisted.

    Raises:
        NotFoundError: unknown user
    """
    if not db.session.get(User, user_id):
        raise NotFoundError("User not found")

    token = secrets.token_hex(TOKEN_BYTES)
    issued_at = utcnow()

    session = SessionToken(
        user_id=user_id,
        token_hash=hash_token(token),
        created_at=issued_at,
        last_used_at=issued_at,
        expires_at=issued_at + SESSION_ABSOLUTE_TIMEOUT,
        user_agent=user_agent[:512] if user_agent else None,
        ip_address=ip_address,
        is_revoked=False,
    )
    db.session.add(session)
    db.session.commit()

    return session, token


def validate_session(token: str) -> SessionContext | None:
    """
    Resolve a bearer token to its user, or None when the caller must log in
    again. A successful call counts as activity for the idle timeout.
    """
    session = _live_session(token)
    if session is None:
        return None

    now = utcnow()
    if now > session.expires_at:
        return None

    if now - session.last_used_at > SESSION_IDLE_TIMEOUT:
        _revoke(session, "Idle timeout")
        db.session.commit()
        return None

    if session.user is None or not session.user.is_active:
        _revoke(session, "User account deactivated")
        db.session.commit()
        return None

    session.last_used_at = now
    db.session.commit()

    return SessionContext(user=session.user, session=session)


def revoke_session(token: str, reason: str = "User logout") -> bool:
    """False when the token is unknown or already revoked."""
    session = _live_session(token)
    if session is None:
        return False

    _revoke(session, reason)
    db.session.commit()
    return True


def cleanup_expired_sessions() -> int:
    """Delete revoked or expired sessions created more than 30 days ago."""
    now = utcnow()
    dead = db.or_(SessionToken.is_revoked.is_(True), SessionToken.expires_at < now)

    deleted = (
        db.session.query(SessionToken)
        .filter(dead, SessionToken.created_at < now - SESSION_RETENTION)
        .delete(synchronize_session=False)
    )
    db.session.commit()

    return deleted
