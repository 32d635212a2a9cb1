"""Application settings and validation."""

import os
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


class Settings:
    ENV: str
    EXAM_API_BASE_URL: str
    EXAM_API_TIMEOUT_SECONDS: float
    EXAM_TIMEZONE: str
    EDITOR_SESSION_TTL_SECONDS: int
    EDITOR_MAX_SESSIONS: int
    ALLOW_DEV_CORS: bool
    LOG_LEVEL: str

    def __init__(self):
        self.ENV = os.getenv("ENV", "dev").lower()
        self.EXAM_API_BASE_URL = os.getenv("EXAM_API_BASE_URL", "http://localhost:3000").rstrip("/")
        self.EXAM_API_TIMEOUT_SECONDS = float(os.getenv("EXAM_API_TIMEOUT_SECONDS", "15"))
        self.EXAM_TIMEZONE = os.getenv("EXAM_TIMEZONE", "UTC")
        self.EDITOR_SESSION_TTL_SECONDS = int(os.getenv("EDITOR_SESSION_TTL_SECONDS", str(24 * 3600)))
        self.EDITOR_MAX_SESSIONS = int(os.getenv("EDITOR_MAX_SESSIONS", "500"))
        self.ALLOW_DEV_CORS = os.getenv("ALLOW_DEV_CORS", "true").lower() == "true"
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self._validate()

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.EXAM_TIMEZONE)

    def _validate(self):
        try:
            ZoneInfo(self.EXAM_TIMEZONE)
        except (ZoneInfoNotFoundError, ValueError):
            raise RuntimeError(f"EXAM_TIMEZONE is not a known time zone: {self.EXAM_TIMEZONE!r}")
        if self.EXAM_API_TIMEOUT_SECONDS <= 0:
            raise RuntimeError("EXAM_API_TIMEOUT_SECONDS must be positive")
        if self.EDITOR_SESSION_TTL_SECONDS <= 0 or self.EDITOR_MAX_SESSIONS <= 0:
            raise RuntimeError("editor session limits must be positive")
        if self.ENV != "dev" and not self.EXAM_API_BASE_URL.startswith("https://"):
            raise RuntimeError("EXAM_API_BASE_URL must use https in non-dev environments")


settings = Settings()
