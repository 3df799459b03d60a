"""Credentials handed to the remote API client.

The client never reads ambient state; it asks a provider for the bearer token
and datastore key on every request. `FileCredentialsStore` persists the login
response to disk so a restarted service keeps its session.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Protocol

logger = logging.getLogger(__name__)

DEFAULT_SESSION_TTL = timedelta(days=7)


class CredentialsProvider(Protocol):
    def get_token(self) -> str | None: ...

    def get_datastore_key(self) -> str | None: ...


@dataclass(frozen=True)
class StaticCredentials:
    token: str | None
    datastore_key: str | None = None

    def get_token(self) -> str | None:
        return self.token

    def get_datastore_key(self) -> str | None:
        return self.datastore_key


def session_expiry(token_exp_time: str | None, now: datetime | None = None) -> datetime:
    """Expiry from the server's `token_exp_time`, or now + 7 days when absent or unusable."""
    now = now or datetime.now(timezone.utc)
    default = now + DEFAULT_SESSION_TTL
    if not token_exp_time:
        return default
    try:
        exp = datetime.fromisoformat(token_exp_time.replace("Z", "+00:00"))
    except ValueError:
        logger.warning("Invalid token_exp_time %r, using default expiry", token_exp_time)
        return default
    if exp.tzinfo is None:
        exp = exp.replace(tzinfo=timezone.utc)
    return exp if exp > now else default


class FileCredentialsStore:
    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            return json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable credentials file %s: %s", self.path, exc)
            return {}

    def _active(self) -> dict[str, Any]:
        data = self._load()
        expires_at = data.get("expires_at")
        if expires_at and datetime.fromisoformat(expires_at) <= datetime.now(timezone.utc):
            return {}
        return data

    def save(self, auth: dict[str, Any]) -> None:
        """Persist a login response: token, user, datastore_key, optional token_exp_time."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "token": auth["token"],
            "user": auth.get("user"),
            "datastore_key": auth.get("datastore_key"),
            "expires_at": session_expiry(auth.get("token_exp_time")).isoformat(),
        }
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f)

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)

    def get_token(self) -> str | None:
        return self._active().get("token")

    def get_datastore_key(self) -> str | None:
        return self._active().get("datastore_key")

    def get_user(self) -> dict[str, Any] | None:
        return self._active().get("user")

    def is_authenticated(self) -> bool:
        return bool(self.get_token())
