"""
Session registry.

Sole owner of session lifetime: sessions are created here on presenter
request and only ever destroyed by the sweep.
"""

import logging
from typing import Dict, List, Optional

from utils.constants import SESSION_CONFIG
from utils.helpers import generate_session_code, normalize_code
from .models import Session

logger = logging.getLogger(__name__)


class SessionRegistry:
    """In-memory store of live sessions keyed by code."""

    def __init__(self, grace_seconds: float = SESSION_CONFIG['GRACE_SECONDS'],
                 code_length: int = SESSION_CONFIG['CODE_LENGTH']):
        """
        Initialize registry.

        Args:
            grace_seconds: How long an unattended session survives
            code_length: Number of characters in new session codes
        """
        self.sessions: Dict[str, Session] = {}
        self.grace_seconds = grace_seconds
        self.code_length = code_length

    def create(self) -> Session:
        """
        Create a session with a fresh, collision-checked code.

        Returns:
            The new session
        """
        code = generate_session_code(self.code_length, existing=self.sessions)
        session = Session(code=code)
        self.sessions[code] = session
        logger.info(f"Created session: {code}")
        return session

    def get(self, code) -> Optional[Session]:
        """
        Look up a session by code (case-insensitive).

        Args:
            code: Session code as typed by a user

        Returns:
            Session or None if no such session is live
        """
        return self.sessions.get(normalize_code(code))

    def mark_attended(self, session: Session):
        """Record that something is connected to the session again."""
        session.abandoned_since = None

    def mark_abandoned(self, session: Session, now: float):
        """Record when the session lost its last live connection."""
        if session.is_unattended and session.abandoned_since is None:
            session.abandoned_since = now
            logger.info(f"Session {session.code} is unattended; eligible for removal in "
                        f"{self.grace_seconds}s")

    def sweep(self, now: float) -> List[Session]:
        """
        Remove sessions that have been unattended for longer than the grace window.

        Args:
            now: Current monotonic time

        Returns:
            The sessions removed
        """
        removed = []
        for code, session in list(self.sessions.items()):
            if not session.is_unattended:
                session.abandoned_since = None
                continue
            if session.abandoned_since is None:
                session.abandoned_since = now
                continue
            if session.abandoned_since + self.grace_seconds <= now:
                del self.sessions[code]
                removed.append(session)
                logger.info(f"Removed abandoned session: {code}")
        return removed

    def list_sessions(self) -> List[Session]:
        return list(self.sessions.values())

    def get_stats(self) -> Dict[str, int]:
        """
        Get registry statistics.

        Returns:
            Session and participant counts
        """
        sessions = self.list_sessions()
        return {
            'sessions': len(sessions),
            'playing': sum(1 for s in sessions if s.is_playing),
            'participants': sum(len(s.participants) for s in sessions),
            'connected_participants': sum(s.connected_count for s in sessions)
        }
