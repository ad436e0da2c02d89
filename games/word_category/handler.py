"""
Word Category game handler.

Each round has several categories, each paired with a letter. For every
category participants submit an answer, the answers are revealed one at a
time, any answer can be challenged and voted on, and the category is scored
once all answers have been shown.

Phase flow per category: submitting -> revealing (-> voting -> revealing)*
and, after the last category, results.
"""

import logging
import random
from typing import Any, Dict, List

from sessions.models import Participant, Session
from utils.constants import LETTERS, MAX_ANSWER_LENGTH
from utils.helpers import pick_random_letters, sanitize_text, shuffled
from ..base import GameHandler
from .categories import CategoryProvider, StaticCategoryProvider
from .models import PHASES, CategoryResult, WordCategoryState
from .scoring import score_category
from .voting import ChallengeVote

logger = logging.getLogger(__name__)


class WordCategoryGame(GameHandler):
    """Phase state machine for the word category game."""

    id = 'word-category'
    name = 'Word Category'
    description = 'Name something in each category that starts with the given letter. Unique answers score!'
    min_players = 2
    max_players = 10

    def __init__(self, services, category_provider: CategoryProvider = None):
        """
        Initialize handler.

        Args:
            services: Shared hub services
            category_provider: Source of categories (random static list by default)
        """
        super().__init__(services)
        self.category_provider = category_provider or StaticCategoryProvider()
        self._actions = {
            'submit-answer': self._handle_submit_answer,
            'submission-complete': self._handle_submission_complete,
            'reroll-letter': self._handle_reroll_letter,
            'challenge-answer': self._handle_challenge_answer,
            'vote': self._handle_vote,
            'next-reveal': self._handle_next_reveal,
            'next-category': self._handle_next_category,
            'show-results': self._handle_show_results,
            'next-round': self._handle_next_round
        }

    # Settings

    @property
    def submission_seconds(self) -> int:
        return self.setting('WORD_SUBMISSION_SECONDS', 60)

    @property
    def reveal_seconds(self) -> int:
        return self.setting('WORD_REVEAL_SECONDS', 5)

    @property
    def voting_seconds(self) -> int:
        return self.setting('WORD_VOTING_SECONDS', 10)

    @property
    def challenge_result_seconds(self) -> int:
        return self.setting('WORD_CHALLENGE_RESULT_SECONDS', 3)

    @property
    def categories_per_round(self) -> int:
        return self.setting('WORD_CATEGORIES_PER_ROUND', 5)

    @property
    def points_per_word(self) -> int:
        return self.setting('WORD_POINTS_PER_WORD', 10)

    @property
    def keep_scores(self) -> bool:
        return self.setting('WORD_KEEP_SCORES_BETWEEN_ROUNDS', True)

    # Lifecycle

    def on_start(self, session: Session) -> None:
        state = WordCategoryState(scores={p.id: 0 for p in self.active_participants(session)})
        self._setup_round(state)
        session.game_state = state

        logger.info(f"Word category started in session {session.code}: "
                    f"{state.current_category} ({state.current_letter})")
        self._begin_submitting(session, state)

    def on_end(self, session: Session) -> None:
        state = session.game_state
        if isinstance(state, WordCategoryState):
            state.retire()
        session.game_state = None

    def on_action(self, session: Session, participant_id: str, action: Dict[str, Any]) -> None:
        state = session.game_state
        if not isinstance(state, WordCategoryState):
            return

        handler = self._actions.get(action.get('type'))
        if not handler:
            logger.debug(f"Unknown word category action: {action.get('type')}")
            return

        payload = action.get('payload')
        handler(session, state, participant_id, payload if isinstance(payload, dict) else {})

    def on_player_join(self, session: Session, participant: Participant) -> None:
        state = session.game_state
        if isinstance(state, WordCategoryState):
            state.scores.setdefault(participant.id, 0)

    def on_player_leave(self, session: Session, participant: Participant) -> None:
        state = session.game_state
        if not isinstance(state, WordCategoryState):
            return

        if state.phase == PHASES['SUBMITTING'] and self._everyone_submitted(session, state):
            self._begin_revealing(session, state)
        elif (state.phase == PHASES['VOTING'] and state.challenge and not state.challenge.is_resolved
              and self._eligible_voters(session, state)
              and state.challenge.has_everyone_voted(self._eligible_voters(session, state))):
            self._resolve_challenge(session, state)

    # Actions

    def _handle_submit_answer(self, session, state, participant_id, payload):
        if state.phase != PHASES['SUBMITTING']:
            return

        answer = payload.get('answer')
        if not isinstance(answer, str):
            return

        answer = sanitize_text(answer, max_length=MAX_ANSWER_LENGTH)
        state.submissions[participant_id] = answer
        self.broadcaster.push_to_participant(session, participant_id, 'word:submission', {
            'category_index': state.category_index,
            'answer': answer
        })

        if self._everyone_submitted(session, state):
            self._begin_revealing(session, state)

    def _handle_submission_complete(self, session, state, participant_id, payload):
        if state.phase != PHASES['SUBMITTING'] or not self.is_master(session, participant_id):
            return
        self._begin_revealing(session, state)

    def _handle_reroll_letter(self, session, state, participant_id, payload):
        if state.phase != PHASES['SUBMITTING'] or not self.is_master(session, participant_id):
            return

        current = state.current_letter
        choices = [letter for letter in LETTERS if letter != current]
        state.letters[state.category_index] = random.choice(choices)
        logger.info(f"Letter rerolled from {current} to {state.current_letter} in session {session.code}")
        self._begin_submitting(session, state)

    def _handle_challenge_answer(self, session, state, participant_id, payload):
        if state.phase != PHASES['REVEALING']:
            return

        owner_id = state.revealed_owner_id
        if owner_id is None or owner_id == participant_id or owner_id in state.challenged_ids:
            return

        self._begin_voting(session, state, participant_id, owner_id)

    def _handle_vote(self, session, state, participant_id, payload):
        if state.phase != PHASES['VOTING'] or not state.challenge:
            return

        eligible = self._eligible_voters(session, state)
        if not state.challenge.record_vote(participant_id, payload.get('vote'), eligible):
            return

        if state.challenge.has_everyone_voted(eligible):
            self._resolve_challenge(session, state)

    def _handle_next_reveal(self, session, state, participant_id, payload):
        if state.phase != PHASES['REVEALING'] or not self.is_master(session, participant_id):
            return
        self._advance_reveal(session, state)

    def _handle_next_category(self, session, state, participant_id, payload):
        if state.phase != PHASES['REVEALING'] or not state.reveals_done:
            return
        if not self.is_master(session, participant_id):
            return
        self._finish_category(session, state)

    def _handle_show_results(self, session, state, participant_id, payload):
        if state.phase != PHASES['REVEALING'] or not state.reveals_done or not state.is_last_category:
            return
        if not self.is_master(session, participant_id):
            return
        self._finish_category(session, state)

    def _handle_next_round(self, session, state, participant_id, payload):
        if state.phase != PHASES['RESULTS'] or not self.is_master(session, participant_id):
            return

        state.round_number += 1
        if not self.keep_scores:
            state.scores = {pid: 0 for pid in state.scores}
        for participant in self.active_participants(session):
            state.scores.setdefault(participant.id, 0)

        self._setup_round(state)
        logger.info(f"Word category round {state.round_number} in session {session.code}")
        self._begin_submitting(session, state)

    # Transitions

    def _setup_round(self, state: WordCategoryState):
        state.categories = self.category_provider.get_categories(self.categories_per_round)
        state.letters = pick_random_letters(LETTERS, len(state.categories))
        state.category_index = 0
        state.category_history = []

    def _begin_submitting(self, session: Session, state: WordCategoryState):
        state.enter(PHASES['SUBMITTING'])
        state.submissions = {}
        state.reveal_order = []
        state.reveal_index = 0
        state.challenge = None
        state.rejected_ids = set()
        state.challenged_ids = set()
        self.start_timer(session, state, self.submission_seconds,
                         lambda: self._begin_revealing(session, state))

    def _begin_revealing(self, session: Session, state: WordCategoryState):
        state.enter(PHASES['REVEALING'])
        state.reveal_order = shuffled([pid for pid, answer in state.submissions.items() if answer.strip()])
        state.reveal_index = 0
        logger.debug(f"Revealing {len(state.reveal_order)} answers in session {session.code}")
        self._schedule_reveal(session, state)

    def _schedule_reveal(self, session: Session, state: WordCategoryState):
        # After the last answer the phase waits for the master
        if not state.reveals_done:
            self.start_timer(session, state, self.reveal_seconds,
                             lambda: self._advance_reveal(session, state))

    def _advance_reveal(self, session: Session, state: WordCategoryState):
        if not state.reveals_done:
            state.reveal_index += 1
        state.enter(PHASES['REVEALING'])
        state.challenge = None
        self._schedule_reveal(session, state)

    def _begin_voting(self, session: Session, state: WordCategoryState, challenger_id: str, owner_id: str):
        state.enter(PHASES['VOTING'])
        state.challenged_ids.add(owner_id)
        state.challenge = ChallengeVote(
            owner_id=owner_id,
            challenger_id=challenger_id,
            answer=state.submissions.get(owner_id, '')
        )
        logger.info(f"Answer '{state.challenge.answer}' challenged in session {session.code}")

        if not self._eligible_voters(session, state):
            self._resolve_challenge(session, state)
            return

        self.start_timer(session, state, self.voting_seconds,
                         lambda: self._resolve_challenge(session, state))

    def _resolve_challenge(self, session: Session, state: WordCategoryState):
        result = state.challenge.resolve()
        if result.rejected:
            state.rejected_ids.add(state.challenge.owner_id)

        # Show the result, then continue with the next answer
        state.stop_timer()
        state.generation += 1
        self.start_timer(session, state, self.challenge_result_seconds,
                         lambda: self._advance_reveal(session, state), broadcast_ticks=False)

    def _finish_category(self, session: Session, state: WordCategoryState):
        letter = state.current_letter
        scores = score_category(state.submissions, letter, state.rejected_ids, self.points_per_word)
        for score in scores:
            state.scores[score.participant_id] = state.scores.get(score.participant_id, 0) + score.points
        state.category_history.append(CategoryResult(
            category=state.current_category,
            letter=letter,
            scores=scores
        ))

        if state.is_last_category:
            state.enter(PHASES['RESULTS'])
            logger.info(f"Word category round {state.round_number} finished in session {session.code}")
            return

        state.category_index += 1
        self._begin_submitting(session, state)

    # Queries

    def _everyone_submitted(self, session: Session, state: WordCategoryState) -> bool:
        active = self.active_participants(session)
        return bool(active) and all(p.id in state.submissions for p in active)

    def _eligible_voters(self, session: Session, state: WordCategoryState) -> List[str]:
        owner_id = state.challenge.owner_id if state.challenge else None
        return [p.id for p in self.active_participants(session) if p.id != owner_id]
