"""Async API client for Competency Hub and the screen logic built on it."""

from competency_hub.client.api import ApiError, CompetencyClient, SessionExpiredError
from competency_hub.client.session import Session, SessionStore

__all__ = [
    "ApiError",
    "CompetencyClient",
    "Session",
    "SessionExpiredError",
    "SessionStore",
]
