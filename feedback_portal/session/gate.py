"""
Session/role gate.

Two states: PUBLIC (initial) and ADMIN(username). Login checks a single
configured username/password pair. This is a development placeholder
that decides which workflow is reachable; it is not a security boundary.
"""

import logging
import secrets
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from feedback_portal.config import ADMIN_PASSWORD, ADMIN_USERNAME, MAX_SESSIONS
from feedback_portal.exceptions import AuthError


logger = logging.getLogger(__name__)


class Role(str, Enum):
    PUBLIC = "PUBLIC"
    ADMIN = "ADMIN"


@dataclass(frozen=True)
class Session:
    role: Role = Role.PUBLIC
    username: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


PUBLIC_SESSION = Session()


def check_credentials(
    username: str,
    password: str,
    expected_username: str = ADMIN_USERNAME,
    expected_password: str = ADMIN_PASSWORD,
) -> bool:
    # Evaluate both comparisons so timing doesn't reveal which one failed
    user_ok = secrets.compare_digest((username or "").encode(), expected_username.encode())
    password_ok = secrets.compare_digest((password or "").encode(), expected_password.encode())
    return user_ok and password_ok


class SessionGate:
    """State machine for one user's session."""

    def __init__(
        self,
        username: str = ADMIN_USERNAME,
        password: str = ADMIN_PASSWORD,
    ):
        self._username = username
        self._password = password
        self.session = PUBLIC_SESSION

    @property
    def is_admin(self) -> bool:
        return self.session.is_admin

    def login(self, username: str, password: str) -> Session:
        """
        PUBLIC -> ADMIN(username) on a credential match.

        Raises:
            AuthError: on any mismatch; the session stays as it was
        """
        if not check_credentials(username, password, self._username, self._password):
            logger.info(f"Rejected admin login for '{username}'")
            raise AuthError()

        self.session = Session(role=Role.ADMIN, username=username)
        logger.info(f"Admin '{username}' logged in")
        return self.session

    def logout(self) -> Session:
        """ADMIN -> PUBLIC. Only the session is cleared."""
        if self.session.is_admin:
            logger.info(f"Admin '{self.session.username}' logged out")
        self.session = PUBLIC_SESSION
        return self.session

    def require_admin(self) -> Session:
        if not self.session.is_admin:
            raise AuthError("Vui lòng đăng nhập quản trị")
        return self.session


class SessionRegistry:
    """
    Admin sessions for the HTTP service, keyed by opaque bearer token.

    Kept in memory only; a restart logs everybody out. Beyond
    max_sessions the oldest session is logged out.
    """

    def __init__(
        self,
        username: str = ADMIN_USERNAME,
        password: str = ADMIN_PASSWORD,
        max_sessions: int = MAX_SESSIONS,
    ):
        self._username = username
        self._password = password
        self.max_sessions = max_sessions
        # insertion ordered, oldest first
        self._sessions: dict[str, SessionGate] = {}
        self._lock = threading.Lock()

    def open(self, username: str, password: str) -> str:
        """Log in and return a new session token. Raises AuthError."""
        gate = SessionGate(self._username, self._password)
        gate.login(username, password)
        token = secrets.token_urlsafe(32)
        with self._lock:
            while self._sessions and len(self._sessions) >= self.max_sessions:
                oldest = next(iter(self._sessions))
                self._sessions.pop(oldest).logout()
                logger.info("Dropped the oldest admin session")
            self._sessions[token] = gate
        return token

    def get(self, token: Optional[str]) -> Session:
        """Session for a token; unknown tokens are PUBLIC."""
        if not token:
            return PUBLIC_SESSION
        with self._lock:
            gate = self._sessions.get(token)
        return gate.session if gate else PUBLIC_SESSION

    def close(self, token: Optional[str]) -> bool:
        """Log out; returns False if the token was not active."""
        with self._lock:
            gate = self._sessions.pop(token, None) if token else None
        if gate is None:
            return False
        gate.logout()
        return True

    def __len__(self) -> int:
        return len(self._sessions)
