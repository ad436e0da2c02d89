"""
OpenAI API Client for Party Hub.

Handles OpenAI API connections, error handling, retries, and rate limiting
for text, structured JSON, image and speech requests.
Contains no game logic - purely API interaction utilities.
"""

import base64
import json
import logging
import os
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

import openai
from openai import OpenAI

logger = logging.getLogger(__name__)


class AIError(Exception):
    """Base exception for AI-related errors."""
    pass


class RateLimitError(AIError):
    """Raised when OpenAI rate limit is exceeded."""
    pass


class APIKeyError(AIError):
    """Raised when OpenAI API key is invalid or missing."""
    pass


class ContentFilterError(AIError):
    """Raised when content is filtered by OpenAI."""
    pass


@dataclass
class AIResponse:
    """Response from OpenAI API."""
    content: str
    tokens_used: int
    model_used: str
    success: bool = True
    error_message: Optional[str] = None


class OpenAIClient:
    """
    OpenAI API client with error handling and retry logic.

    Handles all OpenAI API interactions with proper error handling,
    rate limiting, and retry logic. Contains no game logic.
    """

    def __init__(self, api_key: Optional[str] = None, model: str = "gpt-4o-mini",
                 image_model: str = "dall-e-3", image_size: str = "1024x1024",
                 tts_model: str = "tts-1", tts_voice: str = "alloy"):
        """
        Initialize OpenAI client.

        Args:
            api_key: OpenAI API key (defaults to environment variable)
            model: Chat model used for text, JSON and vision requests
            image_model: Model used for image generation
            image_size: Size of generated images
            tts_model: Model used for speech synthesis
            tts_voice: Voice used for speech synthesis
        """
        self.api_key = api_key or os.getenv('OPENAI_API_KEY')
        self.model = model
        self.image_model = image_model
        self.image_size = image_size
        self.tts_model = tts_model
        self.tts_voice = tts_voice
        self.client = None
        self.max_retries = 3
        self.base_delay = 1.0  # seconds

        if not self.api_key:
            logger.warning("OpenAI API key not provided; AI features are disabled")
            return

        try:
            self.client = OpenAI(api_key=self.api_key)
            logger.info("OpenAI client initialized successfully")
        except Exception as e:
            logger.error(f"Failed to initialize OpenAI client: {e}")

    def is_available(self) -> bool:
        """Check if OpenAI client is available and configured."""
        return self.client is not None and self.api_key is not None

    def _require_client(self):
        if not self.is_available():
            raise APIKeyError("OpenAI client not available")

    def _with_retries(self, description: str, request: Callable[[], Any]) -> Any:
        """
        Run an API request, retrying rate limits and transient failures.

        Args:
            description: What the request does, for logging
            request: Callable performing the request

        Returns:
            The request's return value

        Raises:
            AIError: When the request cannot be completed
        """
        self._require_client()
        last_error = None

        for attempt in range(self.max_retries):
            try:
                logger.debug(f"OpenAI {description} attempt {attempt + 1}/{self.max_retries}")
                return request()

            except openai.RateLimitError as e:
                last_error = RateLimitError(f"Rate limit exceeded: {e}")
                delay = self.base_delay * (2 ** attempt)  # Exponential backoff
                logger.warning(f"Rate limit hit, waiting {delay}s before retry {attempt + 1}")
                time.sleep(delay)

            except openai.AuthenticationError as e:
                # Don't retry authentication errors
                raise APIKeyError(f"API key invalid: {e}") from e

            except openai.BadRequestError as e:
                if "content_filter" in str(e).lower() or "content_policy" in str(e).lower():
                    raise ContentFilterError(f"Content filtered: {e}") from e
                raise AIError(f"Bad request: {e}") from e

            except AIError:
                raise

            except Exception as e:
                last_error = AIError(f"Unexpected error: {e}")
                delay = self.base_delay * (attempt + 1)
                logger.warning(f"API error, waiting {delay}s before retry {attempt + 1}: {e}")
                time.sleep(delay)

        error_msg = f"{description} failed after {self.max_retries} attempts: {last_error}"
        logger.error(error_msg)
        raise AIError(error_msg)

    def generate_completion(self, messages: List[Dict[str, Any]],
                            max_tokens: int = 150,
                            temperature: float = 0.7) -> AIResponse:
        """
        Generate a completion from OpenAI API with error handling.

        Args:
            messages: List of message dictionaries for the conversation
            max_tokens: Maximum tokens to generate
            temperature: Temperature for randomness (0.0 to 1.0)

        Returns:
            AIResponse with content and metadata
        """
        def request():
            response = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                max_tokens=max_tokens,
                temperature=temperature,
                timeout=30.0
            )
            content = response.choices[0].message.content
            if not content:
                raise ContentFilterError("Empty response from OpenAI")
            tokens_used = response.usage.total_tokens if response.usage else 0
            return AIResponse(content=content.strip(), tokens_used=tokens_used, model_used=self.model)

        try:
            return self._with_retries("completion", request)
        except AIError as e:
            return AIResponse(
                content="AI service temporarily unavailable",
                tokens_used=0,
                model_used=self.model,
                success=False,
                error_message=str(e)
            )

    def generate_json(self, messages: List[Dict[str, Any]], schema_name: str,
                      schema: Dict[str, Any], max_tokens: int = 800,
                      temperature: float = 0.8) -> Dict[str, Any]:
        """
        Generate a JSON object matching a schema.

        Args:
            messages: Conversation messages; content may include image parts
            schema_name: Name of the response schema
            schema: JSON schema the response must follow

        Returns:
            Parsed JSON object

        Raises:
            AIError: When the request fails or the response is not valid JSON
        """
        def request():
            response = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                max_tokens=max_tokens,
                temperature=temperature,
                response_format={
                    'type': 'json_schema',
                    'json_schema': {'name': schema_name, 'schema': schema, 'strict': True}
                },
                timeout=60.0
            )
            return response.choices[0].message.content

        content = self._with_retries(f"{schema_name} generation", request)
        if not content:
            raise ContentFilterError("Empty response from OpenAI")

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise AIError(f"Invalid JSON from OpenAI: {e}") from e

        if not isinstance(data, dict):
            raise AIError("Expected a JSON object from OpenAI")
        return data

    def generate_image(self, prompt: str) -> str:
        """
        Generate an image.

        Args:
            prompt: Image description

        Returns:
            Base64 encoded PNG

        Raises:
            AIError: When the image cannot be generated
        """
        def request():
            response = self.client.images.generate(
                model=self.image_model,
                prompt=prompt,
                size=self.image_size,
                n=1,
                response_format='b64_json'
            )
            return response.data[0].b64_json

        image = self._with_retries("image generation", request)
        if not image:
            raise AIError("No image data returned")
        return image

    def synthesize_speech(self, text: str) -> str:
        """
        Convert text to speech.

        Args:
            text: Text to speak

        Returns:
            Base64 encoded MP3 audio

        Raises:
            AIError: When speech cannot be synthesized
        """
        def request():
            response = self.client.audio.speech.create(
                model=self.tts_model,
                voice=self.tts_voice,
                input=text
            )
            return response.content

        audio = self._with_retries("speech synthesis", request)
        return base64.b64encode(audio).decode('ascii')

    def get_status(self) -> Dict[str, Any]:
        """
        Get current client status.

        Returns:
            Status information dictionary
        """
        return {
            'available': self.is_available(),
            'model': self.model,
            'image_model': self.image_model,
            'tts_model': self.tts_model,
            'has_api_key': bool(self.api_key),
            'max_retries': self.max_retries
        }
