"""
Utilities module for Party Hub.

This module contains constants and helper functions
used throughout the application.
"""

from .constants import SESSION_STATES, ROLES, EVENTS, SESSION_CONFIG, LETTERS, WORD_CATEGORIES
from .helpers import (
    generate_session_code,
    normalize_code,
    clean_display_name,
    validate_display_name,
    normalize_answer,
    first_letter,
)

__all__ = [
    'SESSION_STATES',
    'ROLES',
    'EVENTS',
    'SESSION_CONFIG',
    'LETTERS',
    'WORD_CATEGORIES',
    'generate_session_code',
    'normalize_code',
    'clean_display_name',
    'validate_display_name',
    'normalize_answer',
    'first_letter'
]
