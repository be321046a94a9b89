"""
Session context holding the signed-in user and bearer token.

The current user is persisted as a single JSON blob so a session survives
restarts. The context is created once and handed to whatever issues
requests (see `ApiClient`); nothing reads the session from module state.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import structlog
from pydantic import ValidationError

from cowork_booking.config import SESSION_FILE
from cowork_booking.schemas.auth import AuthResponse

logger = structlog.get_logger(__name__)


class SessionContext:
    """
    Current-user store with an explicit lifecycle.

    Attributes:
        path: Location of the persisted current-user JSON
        _user: Signed-in user, or None when signed out

    Example:
        >>> session = SessionContext(Path("/tmp/currentUser.json"))
        >>> session.init()
        >>> session.is_logged_in()
        False
    """

    def __init__(self, path: Path = SESSION_FILE):
        self.path = path
        self._user: Optional[AuthResponse] = None

    def init(self) -> None:
        """
        Hydrate the session from the persisted file, if any.

        A missing file means signed out. An unreadable or malformed file is
        logged and treated the same way.
        """
        self._user = None
        if not self.path.exists():
            return
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            self._user = AuthResponse.model_validate(raw)
            logger.debug("session_hydrated", user_id=self._user.user_id)
        except (OSError, ValueError, ValidationError) as e:
            logger.warning("session_file_unreadable", path=str(self.path), error=str(e))

    def set_user(self, user: AuthResponse) -> None:
        """Store a freshly signed-in user and persist it."""
        self._user = user
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(user.to_wire()), encoding="utf-8")
        logger.info("session_started", user_id=user.user_id, role=user.role)

    def clear(self) -> None:
        """Forget the current user and remove the persisted blob."""
        user_id = self._user.user_id if self._user else None
        self._user = None
        self.path.unlink(missing_ok=True)
        logger.info("session_cleared", user_id=user_id)

    @property
    def current_user(self) -> Optional[AuthResponse]:
        return self._user

    @property
    def token(self) -> Optional[str]:
        return self._user.token if self._user else None

    @property
    def user_id(self) -> Optional[int]:
        return self._user.user_id if self._user else None

    def is_logged_in(self) -> bool:
        return self._user is not None

    def has_role(self, role: str) -> bool:
        return self._user is not None and self._user.role == role

    def is_admin(self) -> bool:
        return self.has_role("ADMIN")

    def is_receptionist(self) -> bool:
        return self.has_role("RECEPTIONISTE")

    def is_coworker(self) -> bool:
        return self.has_role("COWORKER")
