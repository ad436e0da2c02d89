"""
Participant management for sessions.

Handles roster operations: joining, reconnecting, disconnecting, renaming
and game master assignment.
"""

import logging
from typing import Optional, Tuple

from utils.helpers import clean_display_name, validate_display_name
from utils.constants import SESSION_CONFIG
from .models import Participant, Session, new_participant_id

logger = logging.getLogger(__name__)


class ParticipantManager:
    """Manages participant operations within sessions."""

    def __init__(self, max_name_length: int = SESSION_CONFIG['MAX_NAME_LENGTH']):
        self.max_name_length = max_name_length

    def prepare_name(self, session: Session, raw_name,
                     exclude_id: Optional[str] = None) -> Tuple[bool, str, Optional[str]]:
        """
        Clean and validate a display name for a session.

        Args:
            session: Session the name will be used in
            raw_name: Name as supplied by the client
            exclude_id: Participant whose own name should not count as taken

        Returns:
            tuple: (success, error_message, cleaned_name)
        """
        name = clean_display_name(raw_name, self.max_name_length)
        is_valid, error_msg = validate_display_name(name)
        if not is_valid:
            return False, error_msg or "Invalid name", None

        for participant in session.get_connected_participants():
            if participant.id != exclude_id and participant.name.casefold() == name.casefold():
                return False, f"Name '{name}' is already taken", None

        return True, "", name

    def add_participant(self, session: Session, raw_name) -> Tuple[bool, str, Optional[Participant]]:
        """
        Add a participant to a session.

        The participant becomes game master when no connected master exists,
        and waits (inactive) when a game is already running.

        Args:
            session: The session to join
            raw_name: Participant's chosen display name

        Returns:
            tuple: (success, message, participant)
        """
        ok, error_msg, name = self.prepare_name(session, raw_name)
        if not ok:
            return False, error_msg, None

        participant = Participant(
            id=new_participant_id(),
            name=name,
            is_master=session.get_master() is None,
            is_active=not session.is_playing,
            connected=True
        )
        session.participants.append(participant)

        logger.info(f"Participant {name} joined session {session.code}"
                    f"{' as game master' if participant.is_master else ''}"
                    f"{' (waiting for next game)' if not participant.is_active else ''}")
        return True, "Participant added successfully", participant

    def reconnect_participant(self, session: Session, participant_id,
                              token) -> Tuple[bool, str, Optional[Participant]]:
        """
        Reclaim an existing participant identity.

        Args:
            session: The session containing the participant
            participant_id: Identity issued at first join
            token: Capability token issued with that identity

        Returns:
            tuple: (success, message, participant)
        """
        participant = session.get_participant(participant_id) if isinstance(participant_id, str) else None
        if not participant or not isinstance(token, str) or participant.token != token:
            return False, "Participant not found", None

        participant.connected = True
        if session.get_master() is None:
            participant.is_master = True

        logger.info(f"Participant {participant.name} reconnected to session {session.code}")
        return True, f"Participant {participant.name} reconnected", participant

    def disconnect_participant(self, session: Session,
                               participant_id: str) -> Tuple[bool, str, Optional[Participant]]:
        """
        Mark a participant as disconnected without removing them.

        A disconnecting master hands the role to the first other connected
        participant in roster order, or to nobody.

        Args:
            session: The session containing the participant
            participant_id: Participant to disconnect

        Returns:
            tuple: (success, message, participant)
        """
        participant = session.get_participant(participant_id)
        if not participant:
            return False, "Participant not found in session", None

        participant.connected = False
        if participant.is_master:
            participant.is_master = False
            new_master = self.assign_master(session)
            if new_master:
                logger.info(f"Game master moved from {participant.name} to {new_master.name} "
                            f"in session {session.code}")

        logger.info(f"Participant {participant.name} disconnected from session {session.code}")
        return True, f"Participant {participant.name} disconnected", participant

    def assign_master(self, session: Session) -> Optional[Participant]:
        """
        Make the first connected participant master if nobody connected is.

        Returns:
            The master after assignment, or None
        """
        master = session.get_master()
        if master:
            return master

        for participant in session.participants:
            if participant.connected:
                participant.is_master = True
                return participant
        return None

    def rename_participant(self, session: Session, participant_id: str,
                           raw_name) -> Tuple[bool, str, Optional[Participant]]:
        """
        Change a participant's display name.

        Returns:
            tuple: (success, message, participant)
        """
        participant = session.get_participant(participant_id)
        if not participant:
            return False, "Participant not found in session", None

        ok, error_msg, name = self.prepare_name(session, raw_name, exclude_id=participant_id)
        if not ok:
            return False, error_msg, None

        old_name = participant.name
        participant.name = name
        logger.info(f"Participant {old_name} renamed to {name} in session {session.code}")
        return True, "Name changed", participant

    def activate_waiting(self, session: Session) -> int:
        """
        Let every waiting participant take part in the next game.

        Returns:
            Number of participants activated
        """
        waiting = [p for p in session.participants if not p.is_active]
        for participant in waiting:
            participant.is_active = True
        return len(waiting)
