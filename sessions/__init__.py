"""
Sessions Module for Party Hub.

Session lifecycle, participant roster, connection bindings and the
broadcast channel. Contains no game logic - games plug in through the hub.
"""

from .models import Session, Participant, ConnectionBinding
from .registry import SessionRegistry
from .connection_manager import ConnectionManager
from .participant_manager import ParticipantManager
from .broadcast import Broadcaster
from .hub import SessionHub

__all__ = [
    'Session',
    'Participant',
    'ConnectionBinding',
    'SessionRegistry',
    'ConnectionManager',
    'ParticipantManager',
    'Broadcaster',
    'SessionHub'
]
