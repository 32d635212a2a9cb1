"""HTTP client for the exam REST API.

The client owns the two outbound calls the flows make:
- POST /api/join-exam  `{examCode}`
- POST /api/exam       exam payload

Any non-success answer, transport failure or unreadable body is raised as
`ExamApiError` carrying the server's `message` when one was sent and a
per-operation fallback otherwise. Nothing is retried.
"""

import json
import logging
import time
from typing import Optional

import httpx

from .config import settings
from .schemas import ExamPayload, JoinExamRequest

logger = logging.getLogger("exam_portal.client")


class ExamApiError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ExamApiClient:
    """Synchronous client around `httpx.Client`."""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None, transport: Optional[httpx.BaseTransport] = None):
        self.base_url = (base_url or settings.EXAM_API_BASE_URL).rstrip("/")
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout if timeout is not None else settings.EXAM_API_TIMEOUT_SECONDS,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def close(self):
        self._client.close()

    def _post(self, path: str, body: dict, fallback: str) -> dict:
        started = time.perf_counter()
        try:
            r = self._client.post(path, json=body)
        except httpx.HTTPError as e:
            logger.warning("api_unreachable %s", json.dumps({"path": path, "error": str(e)}, ensure_ascii=True))
            raise ExamApiError(fallback) from e
        elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
        try:
            data = r.json()
        except ValueError:
            data = None
        logger.info(
            "api_call %s",
            json.dumps({"path": path, "status_code": r.status_code, "duration_ms": elapsed_ms}, ensure_ascii=True),
        )
        if not r.is_success:
            message = data.get("message") if isinstance(data, dict) else None
            raise ExamApiError(message or fallback, status_code=r.status_code)
        if not isinstance(data, dict):
            raise ExamApiError(fallback, status_code=r.status_code)
        return data

    def join_exam(self, exam_code: str) -> dict:
        """Ask the server to admit the student to `exam_code`."""
        body = JoinExamRequest(exam_code=exam_code).model_dump(by_alias=True)
        return self._post("/api/join-exam", body, "Error joining exam")

    def create_exam(self, payload: ExamPayload) -> dict:
        body = payload.model_dump(by_alias=True, mode="json")
        return self._post("/api/exam", body, "Failed to create exam")


def get_exam_client():
    """Yield an `ExamApiClient` for FastAPI dependency injection."""
    with ExamApiClient() as client:
        yield client
