# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Authentication Service

Every sale and approval must be attributable to an account. Passwords are
hashed with bcrypt; bearer sessions are issued by SessionManager.

APPROVAL RULES:
- Employees are approved on registration, admins are not
- Unapproved accounts cannot log in, except the configured special
  employee credential pair which bypasses the approval check
- Withdrawing approval revokes the account's live sessions
"""

from __future__ import annotations

import hmac
import logging

import bcrypt
from sqlalchemy.orm import Session

from ..models import User
from ..models.auth import ROLES, ROLE_EMPLOYEE
from ..validation import ConflictError, NotFoundError, ValidationError
from shopdesk.time_utils import utcnow
from .session_service import SessionManager

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


class PasswordValidationError(ValidationError):
    """Raised when password doesn't meet strength requirements."""
    pass


class InvalidCredentialsError(Exception):
    """Unknown username or wrong password."""


class NotApprovedError(Exception):
    """Credentials are valid but the account has not been approved."""


class AlreadyExistsError(ConflictError):
    """Username already registered."""


def validate_password_strength(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise PasswordValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )


def hash_password(password: str, rounds: int = 12) -> str:
    """
    Hash password using bcrypt.

    Password is validated for strength before hashing.
    """
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    bcrypt.checkpw() is timing-safe. A malformed stored hash counts as a
    mismatch.
    """
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def _same(a: str | None, b: str | None) -> bool:
    if a is None or b is None:
        return False
    return hmac.compare_digest(a.encode('utf-8'), b.encode('utf-8'))


class AccessGate:
    """Registration, login and account approval."""

    def __init__(
        self,
        session: Session,
        sessions: SessionManager,
        *,
        bcrypt_rounds: int = 12,
        special_username: str | None = None,
        special_password: str | None = None,
    ):
        self.session = session
        self.sessions = sessions
        self.bcrypt_rounds = bcrypt_rounds
        self.special_username = special_username
        self.special_password = special_password

    def is_special_employee(self, username: str, password: str) -> bool:
        if not self.special_username or not self.special_password:
            return False
        return _same(username, self.special_username) and _same(password, self.special_password)

    def create_user(self, username: str, password: str, role: str, *, is_approved: bool) -> User:
        """
        Create a user with a bcrypt password hash. Caller commits.

        Raises:
            ValidationError: blank username or unknown role
            PasswordValidationError: password too short
            AlreadyExistsError: username taken
        """
        username = (username or "").strip()
        if not username:
            raise ValidationError("username is required")
        if role not in ROLES:
            raise ValidationError(f"role must be one of: {', '.join(ROLES)}")

        existing = self.session.query(User).filter_by(username=username).first()
        if existing:
            raise AlreadyExistsError("User already exists")

        user = User(
            username=username,
            password_hash=hash_password(password or "", rounds=self.bcrypt_rounds),
            role=role,
            is_approved=is_approved,
        )
        self.session.add(user)
        self.session.flush()
        return user

    def register(self, username: str, password: str, role: str = ROLE_EMPLOYEE) -> tuple[User, str | None]:
        """
        Self-registration. Employees are auto-approved; admins wait for an
        existing admin. A session token is only issued to approved users.
        """
        user = self.create_user(username, password, role, is_approved=(role == ROLE_EMPLOYEE))

        token = None
        if user.is_approved:
            _, token = self.sessions.create(user.id)

        self.session.commit()
        logger.info("Registered %s account %r (approved=%s)", user.role, user.username, user.is_approved)
        return user, token

    def login(self, username: str, password: str) -> tuple[User, str]:
        """
        Authenticate and open a session.

        Raises:
            InvalidCredentialsError: unknown username or password mismatch
            NotApprovedError: account not approved (special pair excepted)
        """
        user = self.session.query(User).filter_by(username=(username or "").strip()).first()

        if not user or not verify_password(password or "", user.password_hash):
            raise InvalidCredentialsError("Invalid username or password")

        if not user.is_approved and not self.is_special_employee(username, password):
            raise NotApprovedError("User not approved")

        user.last_login_at = utcnow()
        _, token = self.sessions.create(user.id)
        self.session.commit()
        return user, token

    def logout(self, token: str) -> bool:
        return self.sessions.revoke(token)

    def list_users(self) -> list[User]:
        return self.session.query(User).order_by(User.username).all()

    def set_approval(self, user_id: int, is_approved: bool) -> User:
        """Approve or disapprove an account; disapproval ends its sessions."""
        user = self.session.get(User, user_id)
        if not user:
            raise NotFoundError("User not found")

        user.is_approved = bool(is_approved)
        if not user.is_approved:
            self.sessions.revoke_all_for_user(user.id, reason="Approval withdrawn")

        self.session.commit()
        logger.info("User %r approval set to %s", user.username, user.is_approved)
        return user
