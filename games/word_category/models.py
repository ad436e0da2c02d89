"""
State models for the word category game.

The state object is owned by the handler and stored on the session. Only
`to_dict()` leaves the server, and it never contains unrevealed answers.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

from ..base import PhasedState
from .scoring import AnswerScore
from .voting import ChallengeVote

PHASES = {
    'SUBMITTING': 'submitting',
    'REVEALING': 'revealing',
    'VOTING': 'voting',
    'RESULTS': 'results'
}


@dataclass
class CategoryResult:
    """Scored answers of one finished category."""
    category: str
    letter: str
    scores: List[AnswerScore] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'category': self.category,
            'letter': self.letter,
            'answers': [score.to_dict() for score in self.scores]
        }


@dataclass
class WordCategoryState(PhasedState):
    """Per-session state of a word category game."""
    categories: List[str] = field(default_factory=list)
    letters: List[str] = field(default_factory=list)
    category_index: int = 0
    round_number: int = 1
    submissions: Dict[str, str] = field(default_factory=dict)  # participant id -> answer
    reveal_order: List[str] = field(default_factory=list)
    reveal_index: int = 0
    challenge: Optional[ChallengeVote] = None
    rejected_ids: Set[str] = field(default_factory=set)
    challenged_ids: Set[str] = field(default_factory=set)
    category_history: List[CategoryResult] = field(default_factory=list)
    scores: Dict[str, int] = field(default_factory=dict)

    @property
    def current_category(self) -> Optional[str]:
        if self.category_index < len(self.categories):
            return self.categories[self.category_index]
        return None

    @property
    def current_letter(self) -> Optional[str]:
        if self.category_index < len(self.letters):
            return self.letters[self.category_index]
        return None

    @property
    def is_last_category(self) -> bool:
        return self.category_index >= len(self.categories) - 1

    @property
    def reveals_done(self) -> bool:
        return self.reveal_index >= len(self.reveal_order)

    @property
    def revealed_owner_id(self) -> Optional[str]:
        """Owner of the answer currently on screen."""
        if self.reveals_done:
            return None
        return self.reveal_order[self.reveal_index]

    def revealed_answers(self) -> List[Dict[str, Any]]:
        """Answers revealed so far in this category, in reveal order."""
        if self.phase not in (PHASES['REVEALING'], PHASES['VOTING']):
            return []
        shown = self.reveal_order[:self.reveal_index + 1]
        return [
            {
                'participant_id': participant_id,
                'answer': self.submissions.get(participant_id, ''),
                'challenged': participant_id in self.challenged_ids,
                'rejected': participant_id in self.rejected_ids
            }
            for participant_id in shown
        ]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the public dictionary sent in snapshots."""
        return {
            'phase': self.phase,
            'round_number': self.round_number,
            'category_index': self.category_index,
            'category_count': len(self.categories),
            'category': self.current_category,
            'letter': self.current_letter,
            'time_remaining': self.time_remaining,
            'submitted_ids': list(self.submissions.keys()),
            'revealed_answers': self.revealed_answers(),
            'reveal_index': self.reveal_index,
            'reveal_count': len(self.reveal_order),
            'reveals_done': self.reveals_done,
            'challenge': self.challenge.to_dict() if self.challenge else None,
            'rejected_ids': sorted(self.rejected_ids),
            'challenged_ids': sorted(self.challenged_ids),
            'category_history': [result.to_dict() for result in self.category_history],
            'scores': dict(self.scores)
        }
