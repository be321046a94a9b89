"""User-facing notifications (the toast messages of the booking screens)."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Deque, List, Optional

import structlog

logger = structlog.get_logger(__name__)

# Oldest toasts are dropped past this many
HISTORY_LIMIT = 100


@dataclass(frozen=True)
class Notification:
    level: str
    message: str
    title: Optional[str] = None


@dataclass
class Notifier:
    """
    Collects notifications for the current user and logs each one.

    Callers render `history` however they like, or take it with `drain()`.
    Only the last HISTORY_LIMIT notifications are kept.
    """

    history: Deque[Notification] = field(default_factory=lambda: deque(maxlen=HISTORY_LIMIT))

    def _push(self, level: str, message: str, title: Optional[str]) -> None:
        self.history.append(Notification(level=level, message=message, title=title))
        log_method = "warning" if level == "warning" else ("error" if level == "error" else "info")
        getattr(logger, log_method)("notification", level=level, message=message, title=title)

    def success(self, message: str, title: Optional[str] = "Succès") -> None:
        self._push("success", message, title)

    def info(self, message: str, title: Optional[str] = "Information") -> None:
        self._push("info", message, title)

    def warning(self, message: str, title: Optional[str] = "Attention") -> None:
        self._push("warning", message, title)

    def error(self, message: str, title: Optional[str] = "Erreur") -> None:
        self._push("error", message, title)

    def last(self) -> Optional[Notification]:
        return self.history[-1] if self.history else None

    def drain(self) -> List[Notification]:
        """Return pending notifications oldest first and forget them."""
        pending = list(self.history)
        self.history.clear()
        return pending
