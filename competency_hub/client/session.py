"""Client-side session persistence.

The login response is kept as ``{token, username, role, department_code,
department_id, max_score}``. With a path the session is cached as a JSON
file and survives restarts; without one it lives in memory only.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Optional, Union

from competency_hub.common.scoring import DEFAULT_MAX_SCORE

logger = logging.getLogger(__name__)


@dataclass
class Session:
    token: str
    username: str
    role: str
    department_code: Optional[str] = None
    department_id: Optional[int] = None
    max_score: int = DEFAULT_MAX_SCORE

    @classmethod
    def from_login(cls, payload: dict[str, Any]) -> "Session":
        return cls(
            token=payload["access_token"],
            username=payload["user"],
            role=payload["role"],
            department_code=payload.get("department_code"),
            department_id=payload.get("department_id"),
            max_score=payload.get("max_score", DEFAULT_MAX_SCORE),
        )


class SessionStore:
    """Holds the current session, optionally backed by a JSON file."""

    def __init__(self, path: Optional[Union[str, Path]] = None) -> None:
        self.path = Path(path) if path else None
        self._session: Optional[Session] = None
        self._load()

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def token(self) -> Optional[str]:
        return self._session.token if self._session else None

    def _load(self) -> None:
        if self.path is None or not self.path.exists():
            return
        try:
            data = json.loads(self.path.read_text())
            self._session = Session(**data)
        except (json.JSONDecodeError, OSError, TypeError) as exc:
            logger.warning("Ignoring unreadable session cache %s: %s", self.path, exc)
            self._session = None

    def save(self, session: Session) -> None:
        self._session = session
        if self.path is not None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(asdict(session)))

    def clear(self) -> None:
        self._session = None
        if self.path is not None and self.path.exists():
            self.path.unlink()
