"""Mock authentication gate: fixed credentials, one user per session."""

from __future__ import annotations

import hmac
import logging
from collections.abc import Mapping
from dataclasses import dataclass

from .config import DEMO_CREDENTIALS

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class SessionUser:
    username: str


class AuthService:
    def __init__(self, credentials: Mapping[str, str] | None = None):
        self._credentials = dict(credentials or DEMO_CREDENTIALS)
        self.current_user: SessionUser | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.current_user is not None

    @property
    def username(self) -> str | None:
        return self.current_user.username if self.current_user else None

    def login(self, username: str, password: str) -> bool:
        username = (username or "").strip()
        expected = self._credentials.get(username)
        if expected is None or not hmac.compare_digest(expected, password or ""):
            logger.info("Rejected login for %r", username)
            return False
        self.current_user = SessionUser(username)
        return True

    def logout(self) -> None:
        self.current_user = None


def credentials_from_secrets(secrets: Mapping) -> dict[str, str] | None:
    """Read an optional ``[auth]`` secrets table of ``username = "password"`` pairs."""
    section = secrets.get("auth") if secrets is not None else None
    if not section:
        return None
    return {str(user): str(password) for user, password in dict(section).items()}
