"""
Word Category game.

Phase state machine, challenge voting, scoring and category providers.
"""

from .handler import WordCategoryGame
from .models import PHASES, WordCategoryState, CategoryResult
from .scoring import score_category, count_valid_words, AnswerScore
from .voting import ChallengeVote, ChallengeResult
from .categories import CategoryProvider, StaticCategoryProvider, FixedCategoryProvider

__all__ = [
    'WordCategoryGame',
    'PHASES',
    'WordCategoryState',
    'CategoryResult',
    'score_category',
    'count_valid_words',
    'AnswerScore',
    'ChallengeVote',
    'ChallengeResult',
    'CategoryProvider',
    'StaticCategoryProvider',
    'FixedCategoryProvider'
]
