"""
Image generation service.
"""

import logging

from .client import AIError, OpenAIClient

logger = logging.getLogger(__name__)


class ImageGenerator:
    """Turns a text prompt into an illustration."""

    def __init__(self, client: OpenAIClient, style: str = "colorful storybook illustration"):
        self.client = client
        self.style = style

    def generate(self, prompt: str) -> str:
        """
        Generate an image for a prompt.

        Args:
            prompt: Description of the image

        Returns:
            Base64 encoded PNG

        Raises:
            AIError: When no image could be produced
        """
        if not prompt or not prompt.strip():
            raise AIError("Image prompt is empty")

        logger.info(f"Generating image: {prompt[:80]}...")
        return self.client.generate_image(f"{prompt.strip()}. Style: {self.style}.")
