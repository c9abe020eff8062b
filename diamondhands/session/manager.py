"""
Session Manager - Tracks the participants connected to one server process.

LIFECYCLE:
1. A participant opens a session (optionally with their identity)
2. They either create a room (host) or join one (watcher)
3. Hosts play; watchers poll
4. Session ends -> role is torn down, session forgotten

PERSISTENCE RULES:
- Sessions are in-memory only
- The only shared state between participants is the ledger store
- Each session gets its own ledger client: hosts write under their own
  identity, watchers read with no write credential
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any
import logging
import random
import time
import uuid

from ..config import Settings, get_settings
from ..replication.ledger import InMemoryLedger
from .coordinator import RoomCoordinator

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """
    One participant.

    identity is None for pure watchers.
    """
    session_id: str
    coordinator: RoomCoordinator
    created_at: float
    identity: str | None = None
    last_seen: float = 0.0
    metadata: dict[str, Any] = field(default_factory=dict)

    def is_active(self) -> bool:
        """A session is active while it holds a role."""
        return self.coordinator.role is not None

    def touch(self):
        self.last_seen = time.time()


class SessionManager:
    """
    Manages participant sessions.

    Responsibilities:
    - Create sessions bound to a ledger client
    - Track active sessions
    - Tear down roles when sessions end
    """

    def __init__(
        self,
        store: InMemoryLedger | None = None,
        settings: Settings | None = None,
        rng: random.Random | None = None,
    ):
        self.store = store if store is not None else InMemoryLedger()
        self.settings = settings or get_settings()
        self.rng = rng
        self._sessions: dict[str, Session] = {}

    def create_session(self, identity: str | None = None) -> Session:
        """Create a participant session with its own ledger client."""
        session_id = str(uuid.uuid4())
        coordinator = RoomCoordinator(
            ledger=self.store.for_identity(identity),
            total_rounds=self.settings.total_rounds,
            debounce=self.settings.publish_debounce,
            poll_interval=self.settings.poll_interval,
            rng=self.rng,
        )
        now = time.time()
        session = Session(
            session_id=session_id,
            coordinator=coordinator,
            created_at=now,
            identity=identity,
            last_seen=now,
        )
        self._sessions[session_id] = session
        logger.info("Created session %s", session_id)
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Get a session by ID."""
        session = self._sessions.get(session_id)
        if session:
            session.touch()
        return session

    def end_session(self, session_id: str) -> bool:
        """
        End a session and clean up.

        The participant leaves its room (stopping polling or closing the
        replicator) and the session is removed from memory.
        """
        session = self._sessions.pop(session_id, None)
        if not session:
            return False
        session.coordinator.leave_room()
        logger.info("Ended session %s", session_id)
        return True

    def list_active_sessions(self) -> list[str]:
        """List IDs of sessions currently in a room."""
        return [
            sid for sid, session in self._sessions.items()
            if session.is_active()
        ]

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600) -> int:
        """
        End sessions not seen for max_age_seconds.

        Returns how many were removed.
        """
        current_time = time.time()
        to_remove = [
            session_id for session_id, session in self._sessions.items()
            if current_time - session.last_seen > max_age_seconds
        ]
        for session_id in to_remove:
            self.end_session(session_id)
        return len(to_remove)

    def close_all(self):
        for session_id in list(self._sessions):
            self.end_session(session_id)
