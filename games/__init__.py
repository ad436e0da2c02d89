"""
Games Module for Party Hub.

Game handler protocol, registry, countdown timer and the bundled games.
Each game owns its per-session state; the hub only forwards it.
"""

from .base import GameHandler, GameServices, PhasedState
from .registry import GameRegistry, GameCatalogEntry
from .scheduler import TaskScheduler, ScheduledCall
from .timer import CountdownTimer
from .announcer import Announcer
from .word_category import WordCategoryGame
from .buzz_race import BuzzRaceGame
from .ai_drawing import AIDrawingGame
from .group_story import GroupStoryGame


def register_games(registry: GameRegistry, services: GameServices) -> GameRegistry:
    """
    Register every bundled game.

    Args:
        registry: Registry to fill (usually still empty)
        services: Shared hub services handed to each handler

    Returns:
        The populated registry
    """
    registry.register(WordCategoryGame(services))
    registry.register(BuzzRaceGame(services))
    registry.register(AIDrawingGame(services))
    registry.register(GroupStoryGame(services))
    return registry


__all__ = [
    'GameHandler',
    'GameServices',
    'PhasedState',
    'GameRegistry',
    'GameCatalogEntry',
    'TaskScheduler',
    'ScheduledCall',
    'CountdownTimer',
    'Announcer',
    'WordCategoryGame',
    'BuzzRaceGame',
    'AIDrawingGame',
    'GroupStoryGame',
    'register_games'
]
