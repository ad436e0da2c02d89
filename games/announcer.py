"""
Host narration on the presenter display.

Announcements are fire-and-forget: the presenter gets the text and an
estimated duration right away, and the audio (or an error) later. Phase
timers never wait on speech.
"""

import logging
import uuid

from ai.speech import estimate_duration_ms
from sessions.models import Session

logger = logging.getLogger(__name__)


class Announcer:
    """Pushes spoken host lines to a session's presenter."""

    def __init__(self, broadcaster, scheduler, speech=None):
        """
        Initialize announcer.

        Args:
            broadcaster: Broadcast channel used for direct presenter pushes
            scheduler: Scheduler used to run synthesis in the background
            speech: Speech synthesizer, or None for text-only announcements
        """
        self.broadcaster = broadcaster
        self.scheduler = scheduler
        self.speech = speech

    def announce(self, session: Session, text: str) -> int:
        """
        Start an announcement.

        Args:
            session: Session whose presenter should speak
            text: Line to speak

        Returns:
            Estimated duration in milliseconds
        """
        message_id = str(uuid.uuid4())
        estimated_ms = estimate_duration_ms(text)
        self.broadcaster.push_to_presenter(session, 'host:speak-start', {
            'message_id': message_id,
            'text': text,
            'estimated_ms': estimated_ms
        })

        if self.speech is None:
            return estimated_ms

        def worker():
            result = self.speech.synthesize(text)
            with self.scheduler.serialized():
                if result.success:
                    self.broadcaster.push_to_presenter(session, 'host:audio', {
                        'message_id': message_id,
                        'audio': result.audio_b64,
                        'duration_ms': result.duration_ms
                    })
                else:
                    self.broadcaster.push_to_presenter(session, 'host:speak-error', {
                        'message_id': message_id,
                        'error': result.error,
                        'duration_ms': result.duration_ms
                    })

        self.scheduler.spawn(worker)
        logger.debug(f"Announcement {message_id} started in session {session.code}")
        return estimated_ms
