"""
Broadcast channel for session snapshots.

Pushes the full session snapshot to the presenter and every connected
participant, and delivers private payloads to single connections.
"""

import logging
from typing import Any, Dict, Optional

from utils.constants import EVENTS
from .models import Session

logger = logging.getLogger(__name__)


class Broadcaster:
    """
    Sends session state over Socket.IO.

    The emitter is anything with `emit(event, data, to=sid)`; in production
    this is the SocketIO instance.
    """

    def __init__(self, emitter, game_registry):
        """
        Initialize broadcaster.

        Args:
            emitter: Object used to send events to a single connection
            game_registry: Registry used to find the handler owning the game state
        """
        self.emitter = emitter
        self.game_registry = game_registry

    def snapshot(self, session: Session) -> Dict[str, Any]:
        """
        Build the snapshot every connection sees.

        The game state is passed through its owning handler's public view,
        so private payloads never leave the server.
        """
        game_state = None
        if session.game_state is not None:
            handler = self.game_registry.get(session.selected_game_id)
            if handler:
                game_state = handler.serialize_state(session.game_state)
        return session.to_dict(game_state=game_state)

    def broadcast(self, session: Session) -> int:
        """
        Send the snapshot to the presenter and all connected participants.

        Args:
            session: Session to broadcast

        Returns:
            Number of connections the snapshot was sent to
        """
        snapshot = self.snapshot(session)
        sent = 0

        if session.presenter_sid:
            self.emitter.emit(EVENTS['STATE'], snapshot, to=session.presenter_sid)
            sent += 1

        for participant in session.participants:
            sid = session.get_sid(participant.id)
            if participant.connected and sid:
                self.emitter.emit(EVENTS['STATE'], snapshot, to=sid)
                sent += 1

        logger.debug(f"Broadcast session {session.code} to {sent} connections")
        return sent

    def push_to_presenter(self, session: Session, event: str, data: Any) -> bool:
        """Deliver an event to the presenter only."""
        if not session.presenter_sid:
            logger.debug(f"No presenter for session {session.code}; dropped {event}")
            return False
        self.emitter.emit(event, data, to=session.presenter_sid)
        return True

    def push_to_participant(self, session: Session, participant_id: str, event: str, data: Any) -> bool:
        """Deliver an event to one participant's connection."""
        sid = session.get_sid(participant_id)
        if not sid:
            return False
        self.emitter.emit(event, data, to=sid)
        return True

    def send_to(self, sid: Optional[str], event: str, data: Any) -> bool:
        """Deliver an event to a connection that may not be bound to any session."""
        if not sid:
            return False
        self.emitter.emit(event, data, to=sid)
        return True

    def send_error(self, sid: Optional[str], message: str):
        """Report an error to a single connection."""
        self.send_to(sid, EVENTS['ERROR'], {'message': message})
