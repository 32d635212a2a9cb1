"""Browser capabilities used by the exam-entry flow.

The host page is modelled as a `document` object exposing
`document_element`, `fullscreen_element` and `exit_fullscreen()`, the
same surface the DOM offers. Vendor-prefixed fullscreen entry points are
looked up on the element in the order browsers historically shipped them.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

logger = logging.getLogger("exam_portal.entry")

FULLSCREEN_ENTRY_POINTS = (
    "request_fullscreen",
    "webkit_request_fullscreen",
    "moz_request_full_screen",
    "ms_request_fullscreen",
)


class FullscreenController:
    def __init__(self, document: Any):
        self.document = document

    @property
    def is_active(self) -> bool:
        return getattr(self.document, "fullscreen_element", None) is not None

    def request(self) -> bool:
        """Enter fullscreen through the first available entry point.

        Returns False when the entry point raises or none is available.
        """
        element = getattr(self.document, "document_element", None)
        for name in FULLSCREEN_ENTRY_POINTS:
            entry = getattr(element, name, None)
            if not callable(entry):
                continue
            try:
                entry()
            except Exception:
                logger.exception("fullscreen_failed entry=%s", name)
                return False
            return True
        logger.warning("fullscreen_unavailable")
        return False

    def exit(self) -> None:
        """Leave fullscreen if it is active; failures are only logged."""
        if not self.is_active:
            return
        exit_fn = getattr(self.document, "exit_fullscreen", None)
        if not callable(exit_fn):
            return
        try:
            exit_fn()
        except Exception:
            logger.warning("fullscreen_exit_failed", exc_info=True)


class SessionStore:
    """Ephemeral per-tab key/value storage (sessionStorage)."""

    def __init__(self):
        self._items: Dict[str, str] = {}

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = str(value)

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)


class Navigator:
    """Records client-side route changes."""

    def __init__(self):
        self.history: List[str] = []

    def push(self, route: str) -> None:
        logger.info("navigate route=%s", route)
        self.history.append(route)

    @property
    def current(self) -> Optional[str]:
        return self.history[-1] if self.history else None
