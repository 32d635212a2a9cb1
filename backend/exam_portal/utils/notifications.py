"""Transient user-facing notifications (toast messages)."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from threading import Lock
from typing import List

_LOGGER = logging.getLogger("exam_portal.notifications")

SUCCESS = "success"
ERROR = "error"


@dataclass(frozen=True)
class Notification:
    level: str
    message: str
    created_at: str

    def to_dict(self) -> dict:
        return asdict(self)


class Notifier:
    """Collects notifications until the rendering side drains them."""

    def __init__(self):
        self._pending: List[Notification] = []
        self._lock = Lock()

    def _push(self, level: str, message: str) -> Notification:
        note = Notification(level=level, message=message, created_at=datetime.now(timezone.utc).isoformat())
        with self._lock:
            self._pending.append(note)
        log = _LOGGER.warning if level == ERROR else _LOGGER.info
        log("notification %s", json.dumps({"level": level, "message": message}, ensure_ascii=True))
        return note

    def success(self, message: str) -> Notification:
        return self._push(SUCCESS, message)

    def error(self, message: str) -> Notification:
        return self._push(ERROR, message)

    def drain(self) -> List[Notification]:
        """Return and clear all pending notifications."""
        with self._lock:
            out, self._pending = self._pending, []
        return out

    def last(self) -> Notification | None:
        with self._lock:
            return self._pending[-1] if self._pending else None
