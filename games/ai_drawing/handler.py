"""
AI Drawing Contest game handler.

Everyone draws the same word against the clock; the drawings are combined
into a labelled collage and ranked by the drawing judge. A judging failure
moves the game to an error phase the master can retry from.
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from sessions.models import Participant, Session
from utils.constants import DRAWING_WORDS
from ..base import GameHandler, PhasedState
from .collage import CollageError, build_collage, decode_image_data, label_drawings

logger = logging.getLogger(__name__)

PHASES = {
    'DRAWING': 'drawing',
    'JUDGING': 'judging',
    'RESULTS': 'results',
    'ERROR': 'error'
}

MAX_DRAWING_BYTES = 2 * 1024 * 1024


@dataclass
class DrawingResult:
    """A judged drawing."""
    label: str
    participant_id: str
    rank: int
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'label': self.label,
            'participant_id': self.participant_id,
            'rank': self.rank,
            'reason': self.reason
        }


@dataclass
class AIDrawingState(PhasedState):
    """Per-session state of a drawing contest."""
    word: str = ''
    round_number: int = 1
    images: Dict[str, str] = field(default_factory=dict, repr=False)  # participant id -> base64 image
    labels: Dict[str, str] = field(default_factory=dict)  # label -> participant id
    results: List[DrawingResult] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Public view. Drawings themselves go to the presenter directly."""
        return {
            'phase': self.phase,
            'word': self.word,
            'round_number': self.round_number,
            'time_remaining': self.time_remaining,
            'submitted_ids': list(self.images.keys()),
            'labels': dict(self.labels),
            'results': [result.to_dict() for result in self.results],
            'error_message': self.error_message
        }


class AIDrawingGame(GameHandler):
    """Timed drawing contest judged by AI."""

    id = 'ai-drawing'
    name = 'AI Drawing Contest'
    description = 'Draw the word before time runs out. An AI judge ranks the masterpieces!'
    min_players = 2
    max_players = 8

    def __init__(self, services, words: Optional[List[str]] = None):
        super().__init__(services)
        self.words = list(words or DRAWING_WORDS)

    @property
    def drawing_seconds(self) -> int:
        return self.setting('DRAWING_SECONDS', 60)

    # Lifecycle

    def on_start(self, session: Session) -> None:
        state = AIDrawingState(word=self._pick_word())
        session.game_state = state
        logger.info(f"Drawing contest started in session {session.code}: {state.word}")
        self._begin_drawing(session, state)

    def on_end(self, session: Session) -> None:
        if isinstance(session.game_state, AIDrawingState):
            session.game_state.retire()
        session.game_state = None

    def on_action(self, session: Session, participant_id: str, action: Dict[str, Any]) -> None:
        state = session.game_state
        if not isinstance(state, AIDrawingState):
            return

        action_type = action.get('type')
        payload = action.get('payload') if isinstance(action.get('payload'), dict) else {}

        if action_type == 'submit-drawing':
            self._handle_submit_drawing(session, state, participant_id, payload)
        elif action_type == 'retry-judging':
            if state.phase == PHASES['ERROR'] and self.is_master(session, participant_id):
                logger.info(f"Retrying judging in session {session.code}")
                self._begin_judging(session, state)
        elif action_type == 'next-round':
            if state.phase == PHASES['RESULTS'] and self.is_master(session, participant_id):
                state.round_number += 1
                state.word = self._pick_word(exclude=state.word)
                self._begin_drawing(session, state)

    def on_player_leave(self, session: Session, participant: Participant) -> None:
        state = session.game_state
        if isinstance(state, AIDrawingState) and state.phase == PHASES['DRAWING'] and self._everyone_submitted(session, state):
            self._begin_judging(session, state)

    # Actions

    def _handle_submit_drawing(self, session, state, participant_id, payload):
        if state.phase != PHASES['DRAWING'] or participant_id in state.images:
            return

        image_data = payload.get('image_data')
        try:
            raw = decode_image_data(image_data)
        except CollageError as e:
            logger.debug(f"Ignored drawing from {participant_id}: {e}")
            return
        if len(raw) > MAX_DRAWING_BYTES:
            logger.warning(f"Ignored oversized drawing from {participant_id} ({len(raw)} bytes)")
            return

        state.images[participant_id] = image_data
        self.broadcaster.push_to_presenter(session, 'drawing:image', {
            'participant_id': participant_id,
            'image_data': image_data
        })

        if self._everyone_submitted(session, state):
            self._begin_judging(session, state)

    # Transitions

    def _begin_drawing(self, session: Session, state: AIDrawingState):
        state.enter(PHASES['DRAWING'])
        state.images = {}
        state.labels = {}
        state.results = []
        self.start_timer(session, state, self.drawing_seconds,
                         lambda: self._begin_judging(session, state))

    def _begin_judging(self, session: Session, state: AIDrawingState):
        state.enter(PHASES['JUDGING'])

        if not state.images:
            state.enter(PHASES['RESULTS'])
            return

        judge = self.ai.judge if self.ai else None
        if judge is None:
            self._fail(state, "The drawing judge is not available")
            return

        state.labels = label_drawings(state.images)
        drawings = [(label, state.images[pid]) for label, pid in state.labels.items()]
        names = {}
        for label, pid in state.labels.items():
            participant = session.get_participant(pid)
            names[label] = participant.name if participant else label
        labels = dict(state.labels)
        word = state.word

        self.run_external(
            session, state,
            lambda: judge.rank(word, build_collage(drawings), names),
            on_success=lambda rankings: self._apply_rankings(state, labels, rankings),
            on_failure=lambda error: self._fail(state, f"Judging failed: {error}"),
            description='drawing judging'
        )

    def _apply_rankings(self, state: AIDrawingState, labels: Dict[str, str], rankings):
        state.results = [
            DrawingResult(label=r.label, participant_id=labels[r.label], rank=r.rank, reason=r.reason)
            for r in rankings if r.label in labels
        ]
        state.enter(PHASES['RESULTS'])

    def _fail(self, state: AIDrawingState, message: str):
        state.enter(PHASES['ERROR'])
        state.error_message = message

    # Queries

    def _everyone_submitted(self, session: Session, state: AIDrawingState) -> bool:
        active = self.active_participants(session)
        return bool(active) and all(p.id in state.images for p in active)

    def _pick_word(self, exclude: Optional[str] = None) -> str:
        choices = [w for w in self.words if w != exclude] or self.words
        return random.choice(choices)
