# community_auth/models/session_state.py

import secrets
import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Protocol

from pydantic import BaseModel, Field, PrivateAttr

from community_auth.core.exceptions import session_error

logger = logging.getLogger(__name__)

# Sessions untouched for this long are dropped
DEFAULT_IDLE_TIMEOUT = timedelta(minutes=30)


class SessionHandle(Protocol):
    """Session as seen by the authenticator"""

    session_id: str

    def get_attribute(self, key: str) -> Any: ...
    def set_attribute(self, key: str, value: Any) -> None: ...
    def remove_attribute(self, key: str) -> None: ...
    def invalidate(self) -> None: ...


class AuthRequest(Protocol):
    """The slice of an inbound request the authenticator needs"""

    remote_addr: str

    def get_session(self, create: bool = False) -> Optional[SessionHandle]: ...
    def get_attribute(self, key: str) -> Any: ...
    def set_attribute(self, key: str, value: Any) -> None: ...


class SessionState(BaseModel):
    """
    Server-side session: an id plus a free-form attribute mapping.

    Once invalidated, every attribute access raises SessionError.
    """
    session_id: str = Field(default_factory=lambda: secrets.token_urlsafe(32))
    attributes: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    last_accessed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    invalidated: bool = False

    # Set by the owning store so invalidate() also drops the store entry
    _store: Any = PrivateAttr(default=None)

    def touch(self) -> None:
        """Record an access, restarting the idle clock"""
        self.last_accessed_at = datetime.now(timezone.utc)

    def is_expired(self, idle_timeout: timedelta) -> bool:
        return datetime.now(timezone.utc) - self.last_accessed_at > idle_timeout

    def _check_valid(self) -> None:
        if self.invalidated:
            raise session_error("Session already invalidated", self.session_id)

    def get_attribute(self, key: str) -> Any:
        self._check_valid()
        return self.attributes.get(key)

    def set_attribute(self, key: str, value: Any) -> None:
        self._check_valid()
        self.attributes[key] = value

    def remove_attribute(self, key: str) -> None:
        self._check_valid()
        self.attributes.pop(key, None)

    def invalidate(self) -> None:
        self._check_valid()
        self.attributes.clear()
        self.invalidated = True
        if self._store is not None:
            self._store.discard(self.session_id)


class InMemorySessionStore:
    """
    In-memory session store for development and tests.

    Sessions idle for longer than idle_timeout are dropped: lazily when
    looked up, and by a sweep that runs at most once per cleanup_interval
    when sessions are created.

    The lock only covers the id -> session mapping; attribute writes on one
    session are last-writer-wins.
    """

    def __init__(
        self,
        idle_timeout: timedelta = DEFAULT_IDLE_TIMEOUT,
        cleanup_interval: timedelta = timedelta(minutes=5)
    ):
        self._sessions: Dict[str, SessionState] = {}
        self._lock = threading.Lock()
        self.idle_timeout = idle_timeout
        self._cleanup_interval = cleanup_interval
        self._last_cleanup = datetime.now(timezone.utc)

    def create_session(self) -> SessionState:
        session = SessionState()
        session._store = self
        with self._lock:
            self._cleanup_expired()
            self._sessions[session.session_id] = session
        return session

    def get(self, session_id: Optional[str]) -> Optional[SessionState]:
        if not session_id:
            return None
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            if session.is_expired(self.idle_timeout):
                del self._sessions[session_id]
                logger.debug(f"⏰ Session {session_id[:8]}... expired")
                return None
            session.touch()
            return session

    def discard(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)

    def invalidate(self, session_id: str) -> bool:
        session = self.get(session_id)
        if session is None:
            return False
        session.invalidate()
        return True

    def _cleanup_expired(self) -> None:
        """Drop idle sessions; caller holds the lock"""
        now = datetime.now(timezone.utc)

        if now - self._last_cleanup < self._cleanup_interval:
            return

        expired_ids = [
            sid for sid, session in self._sessions.items()
            if session.is_expired(self.idle_timeout)
        ]
        for sid in expired_ids:
            del self._sessions[sid]

        self._last_cleanup = now

        if expired_ids:
            logger.info(f"🧹 Cleaned up {len(expired_ids)} idle sessions")

    def __len__(self) -> int:
        return len(self._sessions)


class SimpleRequest:
    """
    Framework-free AuthRequest bound to an InMemorySessionStore.

    Request attributes live only as long as this object does.
    """

    def __init__(
        self,
        store: InMemorySessionStore,
        session_id: Optional[str] = None,
        remote_addr: str = "127.0.0.1"
    ):
        self.store = store
        self.session_id = session_id
        self.remote_addr = remote_addr
        self.attributes: Dict[str, Any] = {}

    def get_session(self, create: bool = False) -> Optional[SessionState]:
        session = self.store.get(self.session_id)
        if session is None and create:
            session = self.store.create_session()
            self.session_id = session.session_id
        return session

    def get_attribute(self, key: str) -> Any:
        return self.attributes.get(key)

    def set_attribute(self, key: str, value: Any) -> None:
        self.attributes[key] = value
