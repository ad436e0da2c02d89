"""
Buzz Race game handler.

A name appears on the presenter screen; that participant should buzz.
Correct buzzes score a point and draw a new name, wrong buzzes lose one.
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from sessions.models import Participant, Session
from .base import GameHandler, PhasedState

logger = logging.getLogger(__name__)


@dataclass
class BuzzRaceState(PhasedState):
    """Per-session state of a buzz race."""
    current_player_id: Optional[str] = None
    scores: Dict[str, int] = field(default_factory=dict)
    round_number: int = 1
    last_buzz: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'phase': self.phase,
            'current_player_id': self.current_player_id,
            'scores': dict(self.scores),
            'round_number': self.round_number,
            'last_buzz': self.last_buzz
        }


class BuzzRaceGame(GameHandler):
    """Untimed reaction game."""

    id = 'buzz-race'
    name = 'Buzz Race'
    description = 'Buzz when your name shows up. Buzz at the wrong time and lose a point!'
    min_players = 2
    max_players = 20

    def on_start(self, session: Session) -> None:
        state = BuzzRaceState(scores={p.id: 0 for p in self.active_participants(session)})
        state.enter('playing')
        state.current_player_id = self._pick_player(session)
        session.game_state = state
        logger.info(f"Buzz race started in session {session.code}")

    def on_end(self, session: Session) -> None:
        if isinstance(session.game_state, BuzzRaceState):
            session.game_state.retire()
        session.game_state = None

    def on_action(self, session: Session, participant_id: str, action: Dict[str, Any]) -> None:
        state = session.game_state
        if not isinstance(state, BuzzRaceState) or action.get('type') != 'buzz':
            return
        if not state.current_player_id:
            return

        correct = participant_id == state.current_player_id
        if correct:
            state.scores[participant_id] = state.scores.get(participant_id, 0) + 1
            state.round_number += 1
            state.current_player_id = self._pick_player(session)
        else:
            state.scores[participant_id] = state.scores.get(participant_id, 0) - 1

        state.last_buzz = {'participant_id': participant_id, 'correct': correct}

    def on_player_join(self, session: Session, participant: Participant) -> None:
        state = session.game_state
        if isinstance(state, BuzzRaceState):
            state.scores.setdefault(participant.id, 0)
            if state.current_player_id is None:
                state.current_player_id = self._pick_player(session)

    def on_player_leave(self, session: Session, participant: Participant) -> None:
        state = session.game_state
        if isinstance(state, BuzzRaceState) and state.current_player_id == participant.id:
            state.current_player_id = self._pick_player(session)

    def _pick_player(self, session: Session) -> Optional[str]:
        candidates = self.active_participants(session)
        if not candidates:
            return None
        return random.choice(candidates).id
