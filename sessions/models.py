"""
Data models for session management.

These are pure data structures used to pass information between
session management, game handlers, and the socket layer.
"""

import secrets
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from utils.constants import SESSION_STATES, ROLES


def new_participant_id() -> str:
    return str(uuid.uuid4())


def new_token() -> str:
    return secrets.token_urlsafe(16)


@dataclass
class Participant:
    """Represents a handset connected to a session."""
    id: str
    name: str
    is_master: bool = False
    is_active: bool = True
    connected: bool = True
    token: str = field(default_factory=new_token, repr=False)
    joined_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization. The token stays private."""
        return {
            'id': self.id,
            'name': self.name,
            'is_master': self.is_master,
            'is_active': self.is_active,
            'connected': self.connected
        }


@dataclass
class Session:
    """Represents one presenter display and its participants."""
    code: str
    created_at: datetime = field(default_factory=datetime.now)
    participants: List[Participant] = field(default_factory=list)
    selected_game_id: Optional[str] = None
    game_state: Any = None
    status: str = SESSION_STATES['LOBBY']
    join_visible: bool = True
    presenter_sid: Optional[str] = None
    participant_sids: Dict[str, str] = field(default_factory=dict)
    abandoned_since: Optional[float] = None

    @property
    def is_playing(self) -> bool:
        return self.status == SESSION_STATES['PLAYING']

    @property
    def has_presenter(self) -> bool:
        return self.presenter_sid is not None

    @property
    def connected_count(self) -> int:
        """Number of connected participants."""
        return len(self.get_connected_participants())

    @property
    def is_unattended(self) -> bool:
        """True when neither the presenter nor any participant is connected."""
        return not self.has_presenter and self.connected_count == 0

    def get_participant(self, participant_id: str) -> Optional[Participant]:
        """Find participant by id."""
        for participant in self.participants:
            if participant.id == participant_id:
                return participant
        return None

    def get_master(self) -> Optional[Participant]:
        """Get the connected game master, if any."""
        for participant in self.participants:
            if participant.is_master and participant.connected:
                return participant
        return None

    def get_connected_participants(self) -> List[Participant]:
        return [p for p in self.participants if p.connected]

    def get_active_participants(self) -> List[Participant]:
        """Get connected participants taking part in the current game."""
        return [p for p in self.participants if p.connected and p.is_active]

    def get_sid(self, participant_id: str) -> Optional[str]:
        return self.participant_sids.get(participant_id)

    def to_dict(self, game_state: Any = None) -> Dict[str, Any]:
        """
        Convert to the snapshot sent to every connection.

        Args:
            game_state: Public view of the game state, produced by its handler

        Returns:
            Snapshot dictionary
        """
        return {
            'id': self.code,
            'participants': [p.to_dict() for p in self.participants],
            'selected_game_id': self.selected_game_id,
            'game_state': game_state,
            'status': self.status,
            'join_visible': self.join_visible
        }


@dataclass
class ConnectionBinding:
    """Binds one socket connection to a session and role."""
    sid: str
    session_code: str
    role: str
    participant_id: Optional[str] = None
    connected_at: datetime = field(default_factory=datetime.now)
    last_activity: datetime = field(default_factory=datetime.now)

    @property
    def is_presenter(self) -> bool:
        return self.role == ROLES['PRESENTER']

    @property
    def is_participant(self) -> bool:
        return self.role == ROLES['PARTICIPANT']

    def update_activity(self):
        self.last_activity = datetime.now()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'sid': self.sid,
            'session_code': self.session_code,
            'role': self.role,
            'participant_id': self.participant_id,
            'connected_at': self.connected_at.isoformat(),
            'last_activity': self.last_activity.isoformat()
        }
