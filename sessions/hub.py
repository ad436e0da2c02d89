"""
Session hub: the connection multiplexer.

Resolves each inbound socket event to a (session, role, participant)
binding, checks authorization, applies the mutation or delegates it to the
active game handler, and broadcasts the result. Every entry point runs
inside the scheduler's serialization lock.

Return convention is the usual (success, message, data) tuple. A failed
call with an empty message was ignored silently (bad payload or caller not
allowed); a failed call with a message should be reported to the caller.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from utils.constants import EVENTS, ROLES, SESSION_STATES
from .broadcast import Broadcaster
from .connection_manager import ConnectionManager
from .models import ConnectionBinding, Participant, Session
from .participant_manager import ParticipantManager
from .registry import SessionRegistry

logger = logging.getLogger(__name__)

IGNORED = (False, "", None)


class SessionHub:
    """Coordinates sessions, connections and game handlers."""

    def __init__(self, sessions: SessionRegistry, games, broadcaster: Broadcaster, scheduler,
                 connections: Optional[ConnectionManager] = None,
                 participants: Optional[ParticipantManager] = None):
        """
        Initialize hub.

        Args:
            sessions: Session registry
            games: Game handler registry
            broadcaster: Broadcast channel
            scheduler: Task scheduler providing the serialization lock
            connections: Connection binding table
            participants: Roster rules
        """
        self.sessions = sessions
        self.games = games
        self.broadcaster = broadcaster
        self.scheduler = scheduler
        self.connections = connections or ConnectionManager()
        self.participants = participants or ParticipantManager()

    # Presenter operations

    def create_session(self, sid: str) -> Tuple[bool, str, Optional[Session]]:
        """
        Create a session and bind the caller as its presenter.

        Args:
            sid: Presenter connection

        Returns:
            tuple: (success, message, session)
        """
        with self.scheduler.serialized():
            self._release_connection(sid)
            session = self.sessions.create()
            self._attach_presenter(session, sid)
            self.broadcaster.broadcast(session)
            return True, "Session created", session

    def resume_session(self, sid: str, code) -> Tuple[bool, str, Optional[Session]]:
        """
        Bind the caller as presenter of an existing session.

        A previous presenter connection is superseded.

        Args:
            sid: Presenter connection
            code: Session code

        Returns:
            tuple: (success, message, session)
        """
        with self.scheduler.serialized():
            session = self.sessions.get(code)
            if not session:
                return False, "Session not found", None

            self._release_connection(sid, session.code, role=ROLES['PRESENTER'])
            self._attach_presenter(session, sid)
            self.broadcaster.broadcast(session)
            return True, "Presenter attached", session

    # Participant operations

    def join_participant(self, sid: str, code, name, participant_id=None,
                         token=None) -> Tuple[bool, str, Optional[Participant]]:
        """
        Join a session as a participant, or reclaim an earlier identity.

        Args:
            sid: Participant connection
            code: Session code
            name: Display name for a new participant
            participant_id: Identity issued at an earlier join, if any
            token: Capability token issued with that identity

        Returns:
            tuple: (success, message, participant)
        """
        with self.scheduler.serialized():
            session = self.sessions.get(code)
            if not session:
                return False, "Session not found", None

            if participant_id is not None:
                binding = self.connections.get_binding(sid)
                if binding and binding.participant_id != participant_id:
                    self._release_connection(sid)

                ok, message, participant = self.participants.reconnect_participant(
                    session, participant_id, token)
                if ok:
                    old_sid = session.get_sid(participant.id)
                    if old_sid and old_sid != sid:
                        self.connections.unbind(old_sid)
                    self._attach_participant(session, participant, sid)
                    self._notify_join(session, participant)
                    self.broadcaster.broadcast(session)
                    return True, message, participant
                logger.debug(f"Unknown identity {participant_id} for session {session.code}; joining fresh")

            if session.is_playing and not session.join_visible:
                return False, "Game in progress, cannot join", None

            ok, message, participant = self.participants.add_participant(session, name)
            if not ok:
                return False, message, None

            self._release_connection(sid)
            self._attach_participant(session, participant, sid)
            self._notify_join(session, participant)
            self.broadcaster.broadcast(session)
            return True, message, participant

    def rename_participant(self, sid: str, name) -> Tuple[bool, str, Optional[Participant]]:
        """
        Rename the participant bound to a connection.

        Returns:
            tuple: (success, message, participant)
        """
        with self.scheduler.serialized():
            session, participant = self._resolve_participant(sid)
            if not participant:
                return IGNORED

            ok, message, participant = self.participants.rename_participant(session, participant.id, name)
            if not ok:
                return False, message, None

            self.broadcaster.broadcast(session)
            return True, message, participant

    # Master controls

    def select_game(self, sid: str, game_id) -> Tuple[bool, str, Optional[str]]:
        """
        Select the game to play next. Master only, lobby only.

        Returns:
            tuple: (success, message, game_id)
        """
        with self.scheduler.serialized():
            session, master = self._resolve_master(sid)
            if not master or session.is_playing:
                return IGNORED

            if not self.games.has(game_id):
                return False, "Game not found", None

            session.selected_game_id = game_id
            logger.info(f"Session {session.code} selected game {game_id}")
            self.broadcaster.broadcast(session)
            return True, "Game selected", game_id

    def start_game(self, sid: str) -> Tuple[bool, str, Optional[Session]]:
        """
        Start the selected game. Master only.

        Returns:
            tuple: (success, message, session)
        """
        with self.scheduler.serialized():
            session, master = self._resolve_master(sid)
            if not master or session.is_playing:
                return IGNORED

            handler = self.games.get(session.selected_game_id)
            if not handler:
                return False, "No game selected", None

            player_count = len(session.get_active_participants())
            if player_count < handler.min_players:
                return False, f"Need at least {handler.min_players} players to start", None
            if player_count > handler.max_players:
                return False, f"Too many players for {handler.name} (max {handler.max_players})", None

            session.status = SESSION_STATES['PLAYING']
            session.join_visible = False
            try:
                handler.on_start(session)
            except Exception as e:
                logger.error(f"Error starting {handler.id} in session {session.code}: {e}", exc_info=True)
                self._reset_to_lobby(session)
                self.broadcaster.broadcast(session)
                return False, "Failed to start game", None

            logger.info(f"Session {session.code} started {handler.id} with {player_count} players")
            self.broadcaster.broadcast(session)
            return True, "Game started", session

    def end_game(self, sid: str) -> Tuple[bool, str, Optional[Session]]:
        """
        End the running game and return to the lobby. Master only.

        Returns:
            tuple: (success, message, session)
        """
        with self.scheduler.serialized():
            session, master = self._resolve_master(sid)
            if not master or not session.is_playing:
                return IGNORED

            self._end_game(session)
            self.broadcaster.broadcast(session)
            return True, "Game ended", session

    def set_join_visible(self, sid: str, visible=None) -> Tuple[bool, str, Optional[bool]]:
        """
        Show or hide the join prompt; toggles when `visible` is omitted. Master only.

        Returns:
            tuple: (success, message, join_visible)
        """
        with self.scheduler.serialized():
            session, master = self._resolve_master(sid)
            if not master:
                return IGNORED

            if visible is None:
                visible = not session.join_visible
            elif not isinstance(visible, bool):
                return IGNORED

            session.join_visible = visible
            self.broadcaster.broadcast(session)
            return True, "Join visibility updated", visible

    # Game actions

    def game_action(self, sid: str, action) -> Tuple[bool, str, None]:
        """
        Forward an action from an active participant to the running game.

        Returns:
            tuple: (success, message, None)
        """
        with self.scheduler.serialized():
            session, participant = self._resolve_participant(sid)
            if not participant or not participant.is_active or not session.is_playing:
                return IGNORED

            if not isinstance(action, dict) or not isinstance(action.get('type'), str):
                logger.debug(f"Malformed action from {participant.name}: {action!r}")
                return IGNORED

            handler = self.games.get(session.selected_game_id)
            if not handler or session.game_state is None:
                return IGNORED

            self.connections.touch(sid)
            try:
                handler.on_action(session, participant.id, action)
            except Exception as e:
                logger.error(f"Error in {handler.id} action {action.get('type')}: {e}", exc_info=True)

            self.broadcaster.broadcast(session)
            return True, "Action applied", None

    # Connection lifecycle

    def disconnect(self, sid: str) -> Tuple[bool, str, Optional[Session]]:
        """
        Handle a dropped connection.

        Returns:
            tuple: (success, message, session)
        """
        with self.scheduler.serialized():
            binding = self.connections.get_binding(sid)
            if not binding:
                return False, "Connection not found", None

            session = self._disconnect_binding(binding)
            return True, "Disconnected", session

    def sweep(self, now: Optional[float] = None) -> int:
        """
        Remove sessions left unattended past the grace window.

        Returns:
            Number of sessions removed
        """
        with self.scheduler.serialized():
            now = self.scheduler.time() if now is None else now
            removed = self.sessions.sweep(now)
            for session in removed:
                if session.is_playing:
                    self._end_game(session)
                self.connections.remove_session(session.code)
            return len(removed)

    # Queries

    def catalog(self) -> List[Dict[str, Any]]:
        return self.games.catalog_dicts()

    def get_snapshot(self, code) -> Optional[Dict[str, Any]]:
        with self.scheduler.serialized():
            session = self.sessions.get(code)
            return self.broadcaster.snapshot(session) if session else None

    def get_binding(self, sid: str) -> Optional[ConnectionBinding]:
        return self.connections.get_binding(sid)

    def get_status(self) -> Dict[str, Any]:
        with self.scheduler.serialized():
            status = self.sessions.get_stats()
            status.update(self.connections.get_status())
            status['games'] = len(self.games.catalog())
            return status

    # Internals

    def _attach_presenter(self, session: Session, sid: str):
        old_sid = session.presenter_sid
        if old_sid and old_sid != sid:
            self.connections.unbind(old_sid)
            self.broadcaster.send_to(old_sid, EVENTS['SUPERSEDED'], {'code': session.code})
            logger.info(f"Presenter {old_sid} of session {session.code} superseded by {sid}")

        session.presenter_sid = sid
        self.connections.bind_presenter(sid, session.code)
        self.sessions.mark_attended(session)

    def _attach_participant(self, session: Session, participant: Participant, sid: str):
        session.participant_sids[participant.id] = sid
        self.connections.bind_participant(sid, session.code, participant.id)
        self.sessions.mark_attended(session)

    def _notify_join(self, session: Session, participant: Participant):
        if not session.is_playing or not participant.is_active:
            return
        handler = self.games.get(session.selected_game_id)
        if handler and session.game_state is not None:
            try:
                handler.on_player_join(session, participant)
            except Exception as e:
                logger.error(f"Error in {handler.id} join hook: {e}", exc_info=True)

    def _release_connection(self, sid: str, session_code: Optional[str] = None, role: Optional[str] = None):
        """Drop an existing binding of `sid` unless it already matches the target."""
        binding = self.connections.get_binding(sid)
        if not binding:
            return
        if session_code and binding.session_code == session_code and binding.role == role:
            return
        self._disconnect_binding(binding)

    def _disconnect_binding(self, binding: ConnectionBinding) -> Optional[Session]:
        self.connections.unbind(binding.sid)
        session = self.sessions.get(binding.session_code)
        if not session:
            return None

        if binding.is_presenter:
            if session.presenter_sid != binding.sid:
                return session
            session.presenter_sid = None
            logger.info(f"Presenter left session {session.code}")
        else:
            participant_id = binding.participant_id
            if session.participant_sids.get(participant_id) != binding.sid:
                return session
            del session.participant_sids[participant_id]

            ok, _, participant = self.participants.disconnect_participant(session, participant_id)
            if ok and session.is_playing:
                handler = self.games.get(session.selected_game_id)
                if handler and session.game_state is not None:
                    try:
                        handler.on_player_leave(session, participant)
                    except Exception as e:
                        logger.error(f"Error in {handler.id} leave hook: {e}", exc_info=True)

        self.broadcaster.broadcast(session)

        if session.is_unattended:
            self.sessions.mark_abandoned(session, self.scheduler.time())
            self._schedule_sweep()
        return session

    def _schedule_sweep(self):
        # One sweep per abandonment
        self.scheduler.call_later(self.sessions.grace_seconds, self.sweep)

    def _resolve_participant(self, sid: str) -> Tuple[Optional[Session], Optional[Participant]]:
        binding = self.connections.get_binding(sid)
        if not binding or not binding.is_participant:
            return None, None

        session = self.sessions.get(binding.session_code)
        if not session:
            return None, None

        participant = session.get_participant(binding.participant_id)
        if not participant or not participant.connected:
            return None, None
        return session, participant

    def _resolve_master(self, sid: str) -> Tuple[Optional[Session], Optional[Participant]]:
        session, participant = self._resolve_participant(sid)
        if not participant or not participant.is_master:
            if session:
                logger.warning(f"Ignored master-only request from non-master {sid} in session {session.code}")
            return None, None
        return session, participant

    def _end_game(self, session: Session):
        handler = self.games.get(session.selected_game_id)
        if handler and session.game_state is not None:
            try:
                handler.on_end(session)
            except Exception as e:
                logger.error(f"Error ending {handler.id} in session {session.code}: {e}", exc_info=True)
        logger.info(f"Session {session.code} returned to lobby")
        self._reset_to_lobby(session)

    def _reset_to_lobby(self, session: Session):
        session.game_state = None
        session.status = SESSION_STATES['LOBBY']
        session.selected_game_id = None
        session.join_visible = True
        self.participants.activate_waiting(session)
