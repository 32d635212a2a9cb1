"""In-memory store for hosted editor sessions and quiz drafts."""

from __future__ import annotations

import threading
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Optional


class EditorSessionStore:
    """Lock-guarded session registry with idle expiry and a size cap.

    Each entry wraps an arbitrary state object built by `factory(session_id)`.
    Every `get` refreshes the entry's last-used time; idle sessions expire
    after `ttl_seconds`, and the least recently used go first when the
    store grows past `max_sessions`.
    """

    def __init__(self, max_sessions: int = 500, ttl_seconds: int = 24 * 3600):
        self._sessions: dict[str, dict] = {}
        self._lock = threading.Lock()
        self._max_sessions = max_sessions
        self._ttl_seconds = ttl_seconds

    def create(self, factory: Callable[[str], Any], kind: str) -> dict:
        self._cleanup()
        session_id = uuid.uuid4().hex
        entry = {
            "session_id": session_id,
            "kind": kind,
            "created_at": datetime.now(timezone.utc).isoformat(),
            "last_used": time.time(),
            "lock": threading.Lock(),
            "state": factory(session_id),
        }
        with self._lock:
            self._sessions[session_id] = entry
            if len(self._sessions) > self._max_sessions:
                oldest = sorted(self._sessions.values(), key=lambda s: s["last_used"])
                for old in oldest[: len(self._sessions) - self._max_sessions]:
                    self._sessions.pop(old["session_id"], None)
        return entry

    def get(self, session_id: str, kind: Optional[str] = None) -> Optional[dict]:
        self._cleanup()
        with self._lock:
            entry = self._sessions.get(session_id)
            if not entry or (kind is not None and entry["kind"] != kind):
                return None
            entry["last_used"] = time.time()
            return entry

    def delete(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _cleanup(self) -> None:
        cutoff = time.time() - self._ttl_seconds
        with self._lock:
            expired = [sid for sid, s in self._sessions.items() if s["last_used"] < cutoff]
            for sid in expired:
                self._sessions.pop(sid, None)
