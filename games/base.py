"""
Game handler protocol.

Every pluggable game implements GameHandler. The hub calls the lifecycle
hooks; the handler owns the shape of `session.game_state` and decides what
part of it is public.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from sessions.models import Participant, Session
from .timer import CountdownTimer

logger = logging.getLogger(__name__)


@dataclass
class GameServices:
    """Hub services shared by every game handler."""
    broadcaster: Any
    scheduler: Any
    ai: Any = None
    settings: Dict[str, Any] = field(default_factory=dict)


@dataclass
class PhasedState:
    """
    Common part of a handler's per-session state.

    `generation` is bumped on every phase change; callbacks and service
    continuations compare it against the value they captured.
    """
    phase: str = ''
    generation: int = 0
    time_remaining: Optional[int] = None
    error_message: Optional[str] = None
    timer: Optional[CountdownTimer] = field(default=None, repr=False, compare=False)

    def stop_timer(self):
        if self.timer:
            self.timer.stop()
            self.timer = None

    def enter(self, phase: str):
        """Switch phase, stopping any running timer."""
        self.stop_timer()
        self.phase = phase
        self.generation += 1
        self.time_remaining = None
        self.error_message = None

    def retire(self):
        """Make the state inert once its game has ended."""
        self.stop_timer()
        self.generation += 1


class GameHandler(ABC):
    """
    Base class for games.

    Class attributes describe the catalog entry. Subclasses implement the
    three required hooks; the join/leave hooks are optional.
    """

    id: str = ''
    name: str = ''
    description: str = ''
    min_players: int = 1
    max_players: int = 10

    def __init__(self, services: GameServices):
        self.services = services

    @property
    def scheduler(self):
        return self.services.scheduler

    @property
    def broadcaster(self):
        return self.services.broadcaster

    @property
    def ai(self):
        return self.services.ai

    def setting(self, name: str, default: Any) -> Any:
        return self.services.settings.get(name, default)

    # Lifecycle hooks

    @abstractmethod
    def on_start(self, session: Session) -> None:
        """Initialize `session.game_state` for a new game."""

    @abstractmethod
    def on_end(self, session: Session) -> None:
        """Stop every timer and clear `session.game_state`."""

    @abstractmethod
    def on_action(self, session: Session, participant_id: str, action: Dict[str, Any]) -> None:
        """Apply a participant action. Invalid actions are ignored."""

    def on_player_join(self, session: Session, participant: Participant) -> None:
        pass

    def on_player_leave(self, session: Session, participant: Participant) -> None:
        pass

    def serialize_state(self, state: Any) -> Any:
        """Public view of the state sent in every snapshot."""
        return state.to_dict()

    # Helpers

    def broadcast(self, session: Session):
        self.broadcaster.broadcast(session)

    def is_master(self, session: Session, participant_id: str) -> bool:
        participant = session.get_participant(participant_id)
        return bool(participant and participant.is_master and participant.connected)

    def is_active(self, session: Session, participant_id: str) -> bool:
        participant = session.get_participant(participant_id)
        return bool(participant and participant.is_active and participant.connected)

    def active_participants(self, session: Session) -> List[Participant]:
        return session.get_active_participants()

    def is_current(self, session: Session, state: Any, generation: int) -> bool:
        """True if `state` is still the live state and has not changed phase."""
        return session.game_state is state and state.generation == generation

    def start_timer(self, session: Session, state: PhasedState, duration: int,
                    on_complete: Callable[[], None], broadcast_ticks: bool = True) -> CountdownTimer:
        """
        Start a phase timer stored on the state.

        Ticks update `state.time_remaining`; both ticks and completion are
        ignored once the state has moved to another phase.
        """
        state.stop_timer()
        generation = state.generation

        def on_tick(remaining: int):
            if not self.is_current(session, state, generation):
                return
            state.time_remaining = remaining
            if broadcast_ticks:
                self.broadcast(session)

        def on_done():
            if not self.is_current(session, state, generation):
                logger.debug(f"[timer-abort] {self.id} session {session.code} phase moved on")
                return
            logger.debug(f"[timer-fire] {self.id} session {session.code} phase {state.phase}")
            on_complete()
            self.broadcast(session)

        timer = CountdownTimer(self.scheduler, duration, on_tick=on_tick, on_complete=on_done)
        state.timer = timer
        state.time_remaining = duration
        timer.start()
        logger.debug(f"[timer-set] {self.id} session {session.code} phase {state.phase} {duration}s")
        return timer

    def run_external(self, session: Session, state: PhasedState, job: Callable[[], Any],
                     on_success: Callable[[Any], None],
                     on_failure: Optional[Callable[[Exception], None]] = None,
                     description: str = 'external call'):
        """
        Run a slow external call outside the event stream.

        The continuation re-enters the event stream and only applies the
        result if the state is still in the phase the call was issued from.
        """
        generation = state.generation

        def worker():
            try:
                result, error = job(), None
            except Exception as e:
                logger.warning(f"[{self.id}] {description} failed for session {session.code}: {e}")
                result, error = None, e

            with self.scheduler.serialized():
                if not self.is_current(session, state, generation):
                    logger.info(f"[{self.id}] Discarded stale {description} result for session {session.code}")
                    return
                try:
                    if error is None:
                        on_success(result)
                    elif on_failure:
                        on_failure(error)
                except Exception as e:
                    logger.error(f"[{self.id}] Error applying {description} result: {e}", exc_info=True)
                self.broadcast(session)

        self.scheduler.spawn(worker)
