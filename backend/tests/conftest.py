import json

import httpx
import pytest

from exam_portal.client import ExamApiClient
from exam_portal.config import settings


class FakeExamApi:
    """Stands in for the exam REST API and records every request."""

    def __init__(self):
        self.requests = []
        self.responses = {}

    def respond(self, path, status_code=200, body=None, text=None):
        self.responses[path] = (status_code, body, text)

    def _handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status_code, body, text = self.responses.get(request.url.path, (200, {"ok": True}, None))
        if text is not None:
            return httpx.Response(status_code, text=text)
        return httpx.Response(status_code, json=body)

    def client(self) -> ExamApiClient:
        return ExamApiClient(base_url="http://exam.test", transport=httpx.MockTransport(self._handler))

    def bodies(self, path):
        return [json.loads(r.content) for r in self.requests if r.url.path == path]


@pytest.fixture
def exam_api():
    return FakeExamApi()


@pytest.fixture(autouse=True)
def utc_exam_timezone(monkeypatch):
    """Interpret naive form dates as UTC so expected ISO strings are stable."""
    monkeypatch.setattr(settings, "EXAM_TIMEZONE", "UTC")
    yield
