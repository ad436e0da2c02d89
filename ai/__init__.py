"""
AI Integration Module for Party Hub.

This module handles all OpenAI API interactions: drawing judging, image
generation, speech synthesis and story writing.
Contains no game/session logic - purely AI prompting and API access.
"""

from .client import OpenAIClient, AIError, AIResponse
from .judge import DrawingJudge, Ranking
from .images import ImageGenerator
from .speech import SpeechSynthesizer, SpeechResult, estimate_duration_ms
from .storyteller import Storyteller, Story
from .text import TextGenerator
from .services import AIServices, build_ai_services

__all__ = [
    'OpenAIClient',
    'AIError',
    'AIResponse',
    'DrawingJudge',
    'Ranking',
    'ImageGenerator',
    'SpeechSynthesizer',
    'SpeechResult',
    'estimate_duration_ms',
    'Storyteller',
    'Story',
    'TextGenerator',
    'AIServices',
    'build_ai_services'
]
