# Overview: Bearer-token session management.

"""
Session Token Management Service

Tokens are cryptographically secure, hashed in the database and
time-limited. The plaintext token is returned to the client once and never
stored.

SECURITY FEATURES:
- Cryptographically secure random tokens (32 bytes)
- Tokens hashed with SHA-256 before storage (fast, one-way)
- Absolute timeout (SESSION_TTL_MINUTES, default 60)
- Revocable on logout, on losing approval, or on demand
"""

from __future__ import annotations

import hashlib
import logging
import secrets
from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy.orm import Session

from ..models import SessionToken, User
from shopdesk.time_utils import utcnow

logger = logging.getLogger(__name__)

# Revoked/expired rows older than this are purged by cleanup_expired()
SESSION_RETENTION = timedelta(days=30)


@dataclass
class SessionContext:
    """Authenticated principal for one request."""
    user: User
    session: SessionToken


def generate_token() -> str:
    """
    Generate cryptographically secure random token.

    Returns 64-character hex string (32 bytes of entropy).
    """
    return secrets.token_hex(32)  # 32 bytes = 64 hex characters


def hash_token(token: str) -> str:
    """
    Hash token for database storage using SHA-256.

    Tokens are already high-entropy (unlike passwords), so a fast hash is
    sufficient.
    """
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


class SessionManager:
    def __init__(self, session: Session, ttl: timedelta):
        self.session = session
        self.ttl = ttl

    def create(self, user_id: int) -> tuple[SessionToken, str]:
        """
        Create new session token for user.

        Returns (session_record, plaintext_token).
        Caller commits.
        """
        plaintext_token = generate_token()
        now = utcnow()

        record = SessionToken(
            user_id=user_id,
            token_hash=hash_token(plaintext_token),
            created_at=now,
            last_used_at=now,
            expires_at=now + self.ttl,
            is_revoked=False,
        )
        self.session.add(record)
        return record, plaintext_token

    def validate(self, token: str) -> SessionContext | None:
        """
        Return SessionContext for a live token.

        Returns None if the token is unknown, expired or revoked.
        Updates last_used_at on success.
        """
        now = utcnow()
        record = self.session.query(SessionToken).filter_by(
            token_hash=hash_token(token),
            is_revoked=False,
        ).first()

        if not record:
            return None

        if record.expires_at < now:
            return None

        user = record.user
        if not user:
            return None

        record.last_used_at = now
        self.session.commit()

        return SessionContext(user=user, session=record)

    def revoke(self, token: str, reason: str = "User logout") -> bool:
        """Revoke one token. Returns False if it was not live."""
        record = self.session.query(SessionToken).filter_by(
            token_hash=hash_token(token),
            is_revoked=False,
        ).first()

        if not record:
            return False

        record.is_revoked = True
        record.revoked_at = utcnow()
        record.revoked_reason = reason
        self.session.commit()
        return True

    def revoke_all_for_user(self, user_id: int, reason: str = "Revoke all sessions") -> int:
        """
        Revoke all live sessions for a user. Caller commits.

        Returns count of sessions revoked.
        """
        now = utcnow()
        records = self.session.query(SessionToken).filter_by(
            user_id=user_id,
            is_revoked=False,
        ).all()

        for record in records:
            record.is_revoked = True
            record.revoked_at = now
            record.revoked_reason = reason

        if records:
            logger.info("Revoked %d session(s) for user %s: %s", len(records), user_id, reason)
        return len(records)

    def cleanup_expired(self) -> int:
        """
        Delete expired or revoked sessions older than SESSION_RETENTION.

        Returns count of sessions deleted.
        """
        now = utcnow()
        cutoff = now - SESSION_RETENTION

        deleted = self.session.query(SessionToken).filter(
            (SessionToken.expires_at < now) | SessionToken.is_revoked.is_(True),
            SessionToken.created_at < cutoff,
        ).delete(synchronize_session=False)

        self.session.commit()
        return deleted
