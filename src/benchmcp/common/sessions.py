"""
benchmcp session registry

Tracks connected MCP client sessions and evicts the ones that stay idle for
longer than the inactivity window. Every activity event pushes the eviction
deadline back (sliding expiration).
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from .constants import INACTIVITY_TIMEOUT
from .protocol import short_id
from .scheduling import ScheduledTask, Scheduler

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """One connected protocol client"""
    id: str
    connected_at: datetime
    last_activity: datetime
    # Client name/version from the MCP initialize request
    client_name: Optional[str] = None
    client_version: Optional[str] = None
    timeout_handle: Optional[ScheduledTask] = field(default=None, repr=False, compare=False)

    @property
    def display_name(self) -> str:
        if self.client_name:
            if self.client_version:
                return f"{self.client_name} v{self.client_version}"
            return self.client_name
        return short_id(self.id)

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {
            "id": self.id,
            "connectedAt": self.connected_at.isoformat(),
            "lastActivity": self.last_activity.isoformat(),
            "clientName": self.client_name,
            "clientVersion": self.client_version,
        }


SessionListener = Callable[[List[Session]], None]


class SessionManager:
    """Session registry

    Args:
        scheduler: schedules the per-session eviction tasks
        inactivity_timeout: idle seconds before a session is evicted
        dispatch: ``dispatch(fn, *args)`` runs listener calls on the thread that
            owns the listeners, e.g. ``HostEditor.run_on_main``. Direct calls when None.
    """

    def __init__(self, scheduler: Scheduler, inactivity_timeout: float = INACTIVITY_TIMEOUT,
                 dispatch: Optional[Callable[..., Any]] = None):
        self.scheduler = scheduler
        self.inactivity_timeout = inactivity_timeout
        self.dispatch = dispatch
        self._sessions: Dict[str, Session] = {}
        self._listeners: List[SessionListener] = []

    def add(self, session_id: str) -> None:
        """Register a session, or refresh it when it is already known"""
        if session_id in self._sessions:
            self.update_activity(session_id)
            return

        now = self.scheduler.clock.now()
        session = Session(id=session_id, connected_at=now, last_activity=now)
        self._reset_timeout(session)
        self._sessions[session_id] = session
        self._notify_listeners()

        logger.info(f"[MCP] Session connected: {short_id(session_id)}")

    def remove(self, session_id: str) -> None:
        session = self._sessions.get(session_id)
        if session is None:
            return

        self.scheduler.cancel(session.timeout_handle)
        session.timeout_handle = None
        del self._sessions[session_id]
        self._notify_listeners()

        logger.info(f"[MCP] Session disconnected: {short_id(session_id)}")

    def update_activity(self, session_id: str) -> None:
        session = self._sessions.get(session_id)
        if session is not None:
            session.last_activity = self.scheduler.clock.now()
            self._reset_timeout(session)

    def update_client_info(self, session_id: str, client_name: Optional[str] = None,
                           client_version: Optional[str] = None) -> None:
        session = self._sessions.get(session_id)
        if session is None:
            return

        session.client_name = client_name
        session.client_version = client_version
        self._notify_listeners()

        suffix = f" v{client_version}" if client_version else ""
        logger.info(f"[MCP] Session identified: {client_name or short_id(session_id)}{suffix}")

    def _reset_timeout(self, session: Session) -> None:
        self.scheduler.cancel(session.timeout_handle)
        session_id = session.id

        def expire() -> None:
            logger.info(f"[MCP] Session timed out: {short_id(session_id)}")
            self.remove(session_id)

        session.timeout_handle = self.scheduler.call_later(self.inactivity_timeout, expire)

    def get(self, session_id: str) -> Optional[Session]:
        return self._sessions.get(session_id)

    def get_all(self) -> List[Session]:
        return list(self._sessions.values())

    def get_count(self) -> int:
        return len(self._sessions)

    def has(self, session_id: str) -> bool:
        return session_id in self._sessions

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a listener and call it right away with the current sessions

        Returns:
            callable that removes the listener again
        """
        if listener not in self._listeners:
            self._listeners.append(listener)
        self._call_listener(listener, self.get_all())

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _call_listener(self, listener: SessionListener, sessions: List[Session]) -> None:
        if self.dispatch is None:
            self._run_listener(listener, sessions)
        else:
            self.dispatch(self._run_listener, listener, sessions)

    def _run_listener(self, listener: SessionListener, sessions: List[Session]) -> None:
        try:
            listener(sessions)
        except Exception as e:
            logger.error(f"[MCP] Session listener error: {e}", exc_info=True)

    def _notify_listeners(self) -> None:
        sessions = self.get_all()
        for listener in list(self._listeners):
            self._call_listener(listener, sessions)

    def clear(self) -> None:
        """Drop all sessions, timeouts and listeners. Used during plugin unload."""
        for session in self._sessions.values():
            self.scheduler.cancel(session.timeout_handle)
            session.timeout_handle = None
        self._sessions.clear()
        self._listeners.clear()
