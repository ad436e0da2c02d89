"""
Connection Manager for Party Hub sessions.

Tracks which socket connection belongs to which session and in what role.
Contains no game logic - purely connection bookkeeping.
"""

import logging
from typing import Dict, List, Optional

from utils.constants import ROLES
from .models import ConnectionBinding

logger = logging.getLogger(__name__)


class ConnectionManager:
    """
    Maps socket ids to session bindings.

    A connection is bound at most once; binding it again replaces the
    previous binding.
    """

    def __init__(self):
        self.bindings: Dict[str, ConnectionBinding] = {}  # sid -> ConnectionBinding
        logger.debug("Connection manager initialized")

    def bind_presenter(self, sid: str, session_code: str) -> ConnectionBinding:
        """
        Bind a connection as the presenter of a session.

        Args:
            sid: Socket connection ID
            session_code: Session the presenter displays

        Returns:
            The new binding
        """
        binding = ConnectionBinding(sid=sid, session_code=session_code, role=ROLES['PRESENTER'])
        self._store(binding)
        return binding

    def bind_participant(self, sid: str, session_code: str, participant_id: str) -> ConnectionBinding:
        """
        Bind a connection to a participant of a session.

        Args:
            sid: Socket connection ID
            session_code: Session joined
            participant_id: Participant identity the connection speaks for

        Returns:
            The new binding
        """
        binding = ConnectionBinding(
            sid=sid,
            session_code=session_code,
            role=ROLES['PARTICIPANT'],
            participant_id=participant_id
        )
        self._store(binding)
        return binding

    def _store(self, binding: ConnectionBinding):
        previous = self.bindings.get(binding.sid)
        if previous:
            logger.debug(f"Rebinding {binding.sid}: {previous.session_code}/{previous.role} -> "
                         f"{binding.session_code}/{binding.role}")
        self.bindings[binding.sid] = binding
        logger.info(f"Bound {binding.role} connection {binding.sid} to session {binding.session_code}")

    def unbind(self, sid: str) -> Optional[ConnectionBinding]:
        """
        Remove the binding of a connection.

        Args:
            sid: Socket connection ID

        Returns:
            The removed binding, or None if the connection was not bound
        """
        binding = self.bindings.pop(sid, None)
        if binding:
            logger.info(f"Unbound {binding.role} connection {sid} from session {binding.session_code}")
        return binding

    def get_binding(self, sid: str) -> Optional[ConnectionBinding]:
        return self.bindings.get(sid)

    def touch(self, sid: str) -> bool:
        """Update last activity time for a connection."""
        binding = self.bindings.get(sid)
        if binding:
            binding.update_activity()
            return True
        return False

    def get_bindings_for_session(self, session_code: str) -> List[ConnectionBinding]:
        return [b for b in self.bindings.values() if b.session_code == session_code]

    def remove_session(self, session_code: str) -> int:
        """
        Drop every binding that points at a session.

        Returns:
            Number of bindings removed
        """
        stale = [sid for sid, b in self.bindings.items() if b.session_code == session_code]
        for sid in stale:
            del self.bindings[sid]
        if stale:
            logger.debug(f"Removed {len(stale)} bindings for session {session_code}")
        return len(stale)

    def get_status(self) -> Dict[str, int]:
        """
        Get connection statistics.

        Returns:
            Counts of bound connections by role
        """
        presenters = sum(1 for b in self.bindings.values() if b.is_presenter)
        return {
            'total_connections': len(self.bindings),
            'presenters': presenters,
            'participant_connections': len(self.bindings) - presenters
        }
