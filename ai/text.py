"""
Text generation service.

Thin wrapper turning AIResponse failures into AIError so callers can use
ordinary exception handling.
"""

import logging
from typing import Any, Dict

from .client import AIError, OpenAIClient

logger = logging.getLogger(__name__)


class TextGenerator:
    """Generates free text and structured JSON from prompts."""

    def __init__(self, client: OpenAIClient):
        self.client = client

    def complete(self, prompt: str, max_tokens: int = 300, temperature: float = 0.8) -> str:
        """
        Generate free text.

        Raises:
            AIError: When generation fails
        """
        response = self.client.generate_completion(
            [{'role': 'user', 'content': prompt}],
            max_tokens=max_tokens,
            temperature=temperature
        )
        if not response.success:
            raise AIError(response.error_message or "Text generation failed")
        return response.content

    def complete_json(self, prompt: str, name: str, schema: Dict[str, Any],
                      max_tokens: int = 800) -> Dict[str, Any]:
        """
        Generate a JSON object matching `schema`.

        Raises:
            AIError: When generation fails
        """
        return self.client.generate_json(
            [{'role': 'user', 'content': prompt}],
            name,
            schema,
            max_tokens=max_tokens
        )
