"""
Group Story game handler.

Every participant gets a short question; the answers are woven into a
story segment with an illustration, which the host then reads out. Each
round continues the story. Generation failures land in an error phase the
master can retry from.

Phase flow: preparing -> answering -> generating -> displaying, plus error.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from ai.client import AIError
from ai.storyteller import Story, fallback_questions
from sessions.models import Participant, Session
from utils.constants import MAX_ANSWER_LENGTH
from utils.helpers import sanitize_text
from .announcer import Announcer
from .base import GameHandler, PhasedState

logger = logging.getLogger(__name__)

PHASES = {
    'PREPARING': 'preparing',
    'ANSWERING': 'answering',
    'GENERATING': 'generating',
    'DISPLAYING': 'displaying',
    'ERROR': 'error'
}


@dataclass
class GroupStoryState(PhasedState):
    """Per-session state of a group story."""
    round_number: int = 1
    questions: Dict[str, str] = field(default_factory=dict)  # participant id -> question
    answers: Dict[str, str] = field(default_factory=dict, repr=False)
    story: Optional[Story] = None
    has_image: bool = False
    story_history: List[str] = field(default_factory=list)

    @property
    def previous_story(self) -> Optional[str]:
        return ' '.join(self.story_history) if self.story_history else None

    def to_dict(self) -> Dict[str, Any]:
        """Public view. Answers stay private until they appear in the story."""
        return {
            'phase': self.phase,
            'round_number': self.round_number,
            'questions': dict(self.questions),
            'answered_ids': list(self.answers.keys()),
            'story_text': self.story.text if self.story else None,
            'has_image': self.has_image,
            'story_history': list(self.story_history),
            'time_remaining': self.time_remaining,
            'error_message': self.error_message
        }


class GroupStoryGame(GameHandler):
    """Collaborative AI story game."""

    id = 'group-story'
    name = 'Group Story'
    description = 'Answer quick questions and watch the AI turn them into an illustrated story.'
    min_players = 2
    max_players = 10

    def __init__(self, services, announcer: Optional[Announcer] = None):
        super().__init__(services)
        speech = self.ai.speech if self.ai else None
        self.announcer = announcer or Announcer(self.broadcaster, self.scheduler, speech)

    @property
    def answering_seconds(self) -> int:
        return self.setting('ANSWERING_SECONDS', 30)

    @property
    def storyteller(self):
        return self.ai.storyteller if self.ai else None

    @property
    def images(self):
        return self.ai.images if self.ai else None

    # Lifecycle

    def on_start(self, session: Session) -> None:
        state = GroupStoryState()
        session.game_state = state
        logger.info(f"Group story started in session {session.code}")
        self._begin_preparing(session, state)

    def on_end(self, session: Session) -> None:
        if isinstance(session.game_state, GroupStoryState):
            session.game_state.retire()
        session.game_state = None

    def on_action(self, session: Session, participant_id: str, action: Dict[str, Any]) -> None:
        state = session.game_state
        if not isinstance(state, GroupStoryState):
            return

        action_type = action.get('type')
        payload = action.get('payload') if isinstance(action.get('payload'), dict) else {}

        if action_type == 'submit-answer':
            self._handle_submit_answer(session, state, participant_id, payload)
            return

        if not self.is_master(session, participant_id):
            return

        if action_type == 'retry-generation' and state.phase == PHASES['ERROR'] and state.answers:
            self._begin_generating(session, state)
        elif action_type == 'retry-questions' and state.phase == PHASES['ERROR']:
            self._begin_preparing(session, state)
        elif action_type == 'next-round' and state.phase == PHASES['DISPLAYING']:
            if state.story:
                state.story_history.append(state.story.text)
            state.round_number += 1
            state.story = None
            state.has_image = False
            self._begin_preparing(session, state)

    def on_player_join(self, session: Session, participant: Participant) -> None:
        state = session.game_state
        if isinstance(state, GroupStoryState) and state.phase == PHASES['ANSWERING']:
            if participant.id not in state.questions:
                state.questions[participant.id] = fallback_questions(len(state.questions) + 1)[-1]

    def on_player_leave(self, session: Session, participant: Participant) -> None:
        state = session.game_state
        if isinstance(state, GroupStoryState) and state.phase == PHASES['ANSWERING'] and self._everyone_answered(session, state):
            self._begin_generating(session, state)

    # Actions

    def _handle_submit_answer(self, session, state, participant_id, payload):
        if state.phase != PHASES['ANSWERING'] or participant_id not in state.questions:
            return

        answer = payload.get('answer')
        if not isinstance(answer, str):
            return

        state.answers[participant_id] = sanitize_text(answer, max_length=MAX_ANSWER_LENGTH)
        if self._everyone_answered(session, state):
            self._begin_generating(session, state)

    # Transitions

    def _begin_preparing(self, session: Session, state: GroupStoryState):
        state.enter(PHASES['PREPARING'])
        state.questions = {}
        state.answers = {}
        participant_ids = [p.id for p in self.active_participants(session)]

        storyteller = self.storyteller
        if storyteller is None:
            self._assign_questions(session, state, participant_ids, fallback_questions(len(participant_ids)))
            return

        previous_story = state.previous_story
        self.run_external(
            session, state,
            lambda: storyteller.generate_questions(len(participant_ids), previous_story),
            on_success=lambda questions: self._assign_questions(session, state, participant_ids, questions),
            on_failure=lambda error: self._assign_questions(
                session, state, participant_ids, fallback_questions(len(participant_ids))),
            description='question generation'
        )

    def _assign_questions(self, session: Session, state: GroupStoryState,
                          participant_ids: List[str], questions: List[str]):
        fallback = fallback_questions(len(participant_ids))
        state.questions = {
            pid: questions[i] if i < len(questions) else fallback[i]
            for i, pid in enumerate(participant_ids)
        }
        self._begin_answering(session, state)

    def _begin_answering(self, session: Session, state: GroupStoryState):
        state.enter(PHASES['ANSWERING'])
        state.answers = {}
        self.start_timer(session, state, self.answering_seconds,
                         lambda: self._begin_generating(session, state))

    def _begin_generating(self, session: Session, state: GroupStoryState):
        state.enter(PHASES['GENERATING'])

        details = self._collect_details(session, state)
        if not details:
            self._fail(state, "Nobody answered. Try again!")
            return

        storyteller = self.storyteller
        if storyteller is None:
            self._fail(state, "The storyteller is not available")
            return

        images = self.images
        previous_story = state.previous_story

        def job() -> Tuple[Story, Optional[str]]:
            story = storyteller.write_story(details, previous_story)
            image = None
            if images:
                try:
                    image = images.generate(story.image_prompt)
                except AIError as e:
                    logger.warning(f"Story illustration failed, showing text only: {e}")
            return story, image

        self.run_external(
            session, state, job,
            on_success=lambda result: self._show_story(session, state, *result),
            on_failure=lambda error: self._fail(state, f"Story generation failed: {error}"),
            description='story generation'
        )

    def _show_story(self, session: Session, state: GroupStoryState, story: Story, image: Optional[str]):
        state.enter(PHASES['DISPLAYING'])
        state.story = story
        state.has_image = bool(image)
        if image:
            self.broadcaster.push_to_presenter(session, 'story:image', {
                'round_number': state.round_number,
                'image': image
            })
        self.announcer.announce(session, story.text)

    def _fail(self, state: GroupStoryState, message: str):
        state.enter(PHASES['ERROR'])
        state.error_message = message

    # Queries

    def _collect_details(self, session: Session, state: GroupStoryState) -> List[Tuple[str, str, str]]:
        details = []
        for pid, question in state.questions.items():
            answer = state.answers.get(pid, '').strip()
            if not answer:
                continue
            participant = session.get_participant(pid)
            details.append((participant.name if participant else 'Someone', question, answer))
        return details

    def _everyone_answered(self, session: Session, state: GroupStoryState) -> bool:
        expected = [p.id for p in self.active_participants(session) if p.id in state.questions]
        return bool(expected) and all(pid in state.answers for pid in expected)
