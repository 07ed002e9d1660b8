"""Per-user session persistence.

Keeps the token issued at login in ``<dir>/session.<username>.json`` so the
next run can skip the password prompt.
"""

import re
from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class StoredSession(BaseModel):
    """Session data persisted between runs."""

    username: str
    account_id: str
    token: str
    saved_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class SessionStore:
    """File-backed store of one session per username."""

    def __init__(self, directory: str | Path):
        self._directory = Path(directory).expanduser()

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, username: str) -> Path:
        return self._directory / f"session.{_UNSAFE_CHARS.sub('_', username)}.json"

    def load(self, username: str) -> StoredSession | None:
        """Return the stored session, or None if missing or unreadable."""
        path = self.path_for(username)
        try:
            return StoredSession.model_validate_json(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except ValidationError:
            return None

    def save(self, session: StoredSession) -> Path:
        path = self.path_for(session.username)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(".tmp")
        tmp_path.write_text(session.model_dump_json(indent=2), encoding="utf-8")
        tmp_path.replace(path)
        return path

    def clear(self, username: str) -> None:
        self.path_for(username).unlink(missing_ok=True)
