"""
Category providers for the word category game.
"""

import random
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from utils.constants import WORD_CATEGORIES


class CategoryProvider(ABC):
    """Source of category names for a round."""

    name: str = 'base'

    @abstractmethod
    def get_categories(self, count: int) -> List[str]:
        """Return `count` distinct categories (fewer if not enough exist)."""


class StaticCategoryProvider(CategoryProvider):
    """Draws random categories from a fixed list."""

    name = 'static'

    def __init__(self, categories: Optional[Sequence[str]] = None):
        self.categories = list(categories or WORD_CATEGORIES)

    def get_categories(self, count: int) -> List[str]:
        return random.sample(self.categories, min(count, len(self.categories)))


class FixedCategoryProvider(CategoryProvider):
    """Always returns the first categories of its list in order."""

    name = 'fixed'

    def __init__(self, categories: Sequence[str]):
        self.categories = list(categories)

    def get_categories(self, count: int) -> List[str]:
        return self.categories[:count]
