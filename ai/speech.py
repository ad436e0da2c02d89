"""
Speech synthesis for the presenter's host voice.

Synthesis never raises: on failure the result carries an estimated
duration so the presenter can still pace subtitles.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .client import AIError, OpenAIClient

logger = logging.getLogger(__name__)

WORDS_PER_SECOND = 2.5
MIN_DURATION_MS = 1000
MAX_DURATION_MS = 30000


def estimate_duration_ms(text: str) -> int:
    """
    Estimate how long it takes to say `text`.

    Args:
        text: Text to be spoken

    Returns:
        Duration in milliseconds, bounded to a sensible range
    """
    words = len((text or '').split())
    duration = int(words / WORDS_PER_SECOND * 1000)
    return max(MIN_DURATION_MS, min(MAX_DURATION_MS, duration))


@dataclass
class SpeechResult:
    """Outcome of a synthesis request."""
    text: str
    duration_ms: int
    audio_b64: Optional[str] = None
    success: bool = True
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'text': self.text,
            'duration_ms': self.duration_ms,
            'audio': self.audio_b64,
            'success': self.success,
            'error': self.error
        }


class SpeechSynthesizer:
    """Produces spoken audio for host announcements."""

    def __init__(self, client: OpenAIClient):
        self.client = client

    def synthesize(self, text: str) -> SpeechResult:
        """
        Synthesize speech for `text`.

        Returns:
            SpeechResult; on failure `success` is False and the duration is estimated
        """
        duration_ms = estimate_duration_ms(text)
        try:
            audio = self.client.synthesize_speech(text)
        except AIError as e:
            logger.warning(f"Speech synthesis failed, falling back to estimate: {e}")
            return SpeechResult(text=text, duration_ms=duration_ms, success=False, error=str(e))

        return SpeechResult(text=text, duration_ms=duration_ms, audio_b64=audio)
