"""
core/context.py
----------------

In‑memory session store for authenticated dashboard users.  Each
session keeps the WooCommerce store URL and consumer credentials so that
later requests can reach the store without the browser resending the
secret.  The browser only holds an opaque random session id in an
HttpOnly cookie.

Note that this store resides in process memory; in a multi‑worker
deployment sessions are not shared across workers and are lost on
restart.
"""

from __future__ import annotations

import secrets
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional


@dataclass(frozen=True)
class Credentials:
    url: str
    consumer_key: str
    consumer_secret: str

    def __repr__(self) -> str:
        return f"Credentials(url={self.url!r})"


@dataclass
class Session:
    session_id: str
    credentials: Credentials
    created_at: float = field(default_factory=time.time)


class SessionStore:
    """Map of session id to :class:`Session` with lazy expiry."""

    def __init__(self, max_age: float, clock: Callable[[], float] = time.time) -> None:
        self.max_age = max_age
        self._clock = clock
        self._sessions: Dict[str, Session] = {}

    def create(self, credentials: Credentials) -> Session:
        """Persist a new session for ``credentials`` and return it."""
        session = Session(
            session_id=secrets.token_urlsafe(32),
            credentials=credentials,
            created_at=self._clock(),
        )
        self._sessions[session.session_id] = session
        return session

    def get(self, session_id: Optional[str]) -> Optional[Session]:
        """Retrieve a live session, dropping it if it has expired."""
        if not session_id:
            return None
        session = self._sessions.get(session_id)
        if session is None:
            return None
        if self._clock() - session.created_at > self.max_age:
            self._sessions.pop(session_id, None)
            return None
        return session

    def destroy(self, session_id: Optional[str]) -> Optional[Session]:
        """Remove a session and return it if it existed."""
        if not session_id:
            return None
        return self._sessions.pop(session_id, None)

    def __len__(self) -> int:
        return len(self._sessions)
