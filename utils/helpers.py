"""
Helper utilities for Party Hub.

This module contains utility functions used throughout the application
for validation, generation, and text normalization.
"""

import random
import re
import string
import time
from typing import Container, List, Optional, Tuple

from .constants import SESSION_CONFIG


def generate_session_code(length: int = 6, existing: Optional[Container[str]] = None,
                          max_attempts: int = SESSION_CONFIG['CODE_ATTEMPTS']) -> str:
    """
    Generate a short session code that is not already in use.

    Args:
        length: Number of characters in the code
        existing: Codes that are already taken
        max_attempts: How many random codes to try before falling back

    Returns:
        Upper-case alphanumeric code
    """
    existing = existing or ()
    characters = string.ascii_uppercase + string.digits

    for _ in range(max_attempts):
        code = ''.join(random.choices(characters, k=length))
        if code not in existing:
            return code

    # Fall back to a timestamp suffix; practically never reached
    suffix = str(int(time.time() * 1000))[-(length - 2):]
    return ''.join(random.choices(string.ascii_uppercase, k=2)) + suffix


def normalize_code(code) -> str:
    """Normalize a user supplied session code for lookup."""
    if not isinstance(code, str):
        return ''
    return code.strip().upper()


def sanitize_text(text: str, max_length: int = 500) -> str:
    """
    Sanitize free text supplied by a client.

    Args:
        text: Raw text content
        max_length: Maximum length kept

    Returns:
        Sanitized text
    """
    # Remove potential HTML/script content
    text = re.sub(r'<[^>]*>', '', text)

    # Collapse excessive whitespace
    text = re.sub(r'\s+', ' ', text.strip())

    return text[:max_length]


def clean_display_name(name, max_length: int = SESSION_CONFIG['MAX_NAME_LENGTH']) -> str:
    """Trim and truncate a display name. Non-strings become empty."""
    if not isinstance(name, str):
        return ''
    return sanitize_text(name, max_length=max_length).strip()


def validate_display_name(name: str) -> Tuple[bool, Optional[str]]:
    """
    Validate an already cleaned display name.

    Returns:
        tuple: (is_valid, error_message)
    """
    if not name:
        return False, "Name cannot be empty"

    if len(name) < SESSION_CONFIG['MIN_NAME_LENGTH']:
        return False, f"Name must be at least {SESSION_CONFIG['MIN_NAME_LENGTH']} characters"

    return True, None


def normalize_answer(answer: str) -> str:
    """Normalize an answer for comparison (trim and case-fold)."""
    return (answer or '').strip().casefold()


def first_letter(word: str) -> Optional[str]:
    """
    Find the first alphabetic character of a word, skipping leading punctuation.

    Args:
        word: Word to inspect

    Returns:
        Lower-case letter or None if the word has no letters
    """
    for char in word or '':
        if char.isalpha():
            return char.lower()
    return None


def shuffled(items: List) -> List:
    """
    Return a shuffled copy of a list.

    Args:
        items: List of items

    Returns:
        Shuffled copy
    """
    copy = list(items)
    random.shuffle(copy)
    return copy


def pick_random_letters(letters: List[str], count: int) -> List[str]:
    """Pick `count` distinct letters (fewer if the alphabet is smaller)."""
    return random.sample(letters, min(count, len(letters)))
