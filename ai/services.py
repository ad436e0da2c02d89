"""
AI service bundle handed to game handlers.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .client import OpenAIClient
from .images import ImageGenerator
from .judge import DrawingJudge
from .speech import SpeechSynthesizer
from .storyteller import Storyteller
from .text import TextGenerator

logger = logging.getLogger(__name__)


@dataclass
class AIServices:
    """External collaborators used by the AI-driven games."""
    judge: Optional[DrawingJudge] = None
    images: Optional[ImageGenerator] = None
    speech: Optional[SpeechSynthesizer] = None
    storyteller: Optional[Storyteller] = None
    client: Optional[OpenAIClient] = None

    def get_status(self) -> Dict[str, Any]:
        return self.client.get_status() if self.client else {'available': False}


def build_ai_services(settings: Dict[str, Any]) -> AIServices:
    """
    Build the AI services from configuration.

    Args:
        settings: Application settings (OPENAI_* keys)

    Returns:
        AIServices sharing one OpenAI client
    """
    client = OpenAIClient(
        api_key=settings.get('OPENAI_API_KEY'),
        model=settings.get('OPENAI_MODEL', 'gpt-4o-mini'),
        image_model=settings.get('OPENAI_IMAGE_MODEL', 'dall-e-3'),
        image_size=settings.get('OPENAI_IMAGE_SIZE', '1024x1024'),
        tts_model=settings.get('OPENAI_TTS_MODEL', 'tts-1'),
        tts_voice=settings.get('OPENAI_TTS_VOICE', 'alloy')
    )
    text = TextGenerator(client)

    services = AIServices(
        judge=DrawingJudge(client),
        images=ImageGenerator(client),
        speech=SpeechSynthesizer(client),
        storyteller=Storyteller(text),
        client=client
    )
    logger.info(f"AI services ready (available: {client.is_available()})")
    return services
