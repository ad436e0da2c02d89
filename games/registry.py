"""
Game handler registry and catalog.

Maps game ids to handler instances; the catalog is the list of games a
master can pick from.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .base import GameHandler

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GameCatalogEntry:
    """Static description of an available game."""
    id: str
    name: str
    description: str
    min_players: int
    max_players: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'min_players': self.min_players,
            'max_players': self.max_players
        }


class GameRegistry:
    """Registry of game handlers, filled once at process start."""

    def __init__(self):
        self.handlers: Dict[str, GameHandler] = {}

    def register(self, handler: GameHandler) -> GameHandler:
        """
        Register a handler under its id.

        Args:
            handler: Game handler instance

        Returns:
            The registered handler
        """
        if not handler.id:
            raise ValueError(f"{type(handler).__name__} has no game id")
        if handler.id in self.handlers:
            raise ValueError(f"Game '{handler.id}' is already registered")

        self.handlers[handler.id] = handler
        logger.info(f"Registered game: {handler.id} ({handler.name})")
        return handler

    def get(self, game_id) -> Optional[GameHandler]:
        if not isinstance(game_id, str):
            return None
        return self.handlers.get(game_id)

    def has(self, game_id) -> bool:
        return self.get(game_id) is not None

    def get_entry(self, game_id) -> Optional[GameCatalogEntry]:
        handler = self.get(game_id)
        return self._entry(handler) if handler else None

    def catalog(self) -> List[GameCatalogEntry]:
        """Catalog entries in registration order."""
        return [self._entry(handler) for handler in self.handlers.values()]

    def catalog_dicts(self) -> List[Dict[str, Any]]:
        return [entry.to_dict() for entry in self.catalog()]

    @staticmethod
    def _entry(handler: GameHandler) -> GameCatalogEntry:
        return GameCatalogEntry(
            id=handler.id,
            name=handler.name,
            description=handler.description,
            min_players=handler.min_players,
            max_players=handler.max_players
        )
