"""
Storyteller for the group story game.

Uses the text generation service to produce per-player questions and to
weave the players' answers into a story with an illustration prompt.
Contains no game logic - purely AI prompting.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from utils.constants import FALLBACK_STORY_QUESTIONS
from .client import AIError
from .text import TextGenerator

logger = logging.getLogger(__name__)

QUESTIONS_SCHEMA = {
    'type': 'object',
    'properties': {
        'questions': {'type': 'array', 'items': {'type': 'string'}}
    },
    'required': ['questions'],
    'additionalProperties': False
}

STORY_SCHEMA = {
    'type': 'object',
    'properties': {
        'text': {'type': 'string', 'description': 'The story paragraph'},
        'image_prompt': {'type': 'string', 'description': 'Detailed image prompt'}
    },
    'required': ['text', 'image_prompt'],
    'additionalProperties': False
}


@dataclass
class Story:
    """A generated story segment."""
    text: str
    image_prompt: str

    def to_dict(self) -> Dict[str, Any]:
        return {'text': self.text, 'image_prompt': self.image_prompt}


def fallback_questions(count: int) -> List[str]:
    """Questions used when none could be generated."""
    return [FALLBACK_STORY_QUESTIONS[i % len(FALLBACK_STORY_QUESTIONS)] for i in range(count)]


class Storyteller:
    """
    Generates story questions and stories.

    Question generation falls back to a fixed list; story generation raises
    AIError so the game can show its error phase.
    """

    def __init__(self, text_generator: TextGenerator):
        """
        Initialize storyteller.

        Args:
            text_generator: Text generation service
        """
        self.text_generator = text_generator

    def generate_questions(self, count: int, previous_story: Optional[str] = None) -> List[str]:
        """
        Generate one short question per player.

        Args:
            count: Number of questions needed
            previous_story: Story so far, if continuing

        Returns:
            Exactly `count` questions
        """
        if count <= 0:
            return []

        context = ''
        if previous_story:
            context = f'Continue building on this story: "{previous_story[:200]}..."\n\n'

        prompt = (
            f"{context}Generate exactly {count} unique creative questions about different aspects of a story.\n"
            f"Each question should ask for a SHORT answer (1-3 words).\n"
            f"Questions should cover different aspects like: setting, characters, events, themes, "
            f"details, objects, time, mood.\n"
            f"Focus on the most important/basic questions first."
        )

        try:
            data = self.text_generator.complete_json(prompt, 'story_questions', QUESTIONS_SCHEMA)
            questions = [q.strip() for q in data.get('questions', []) if isinstance(q, str) and q.strip()]
        except AIError as e:
            logger.warning(f"Question generation failed, using fallbacks: {e}")
            return fallback_questions(count)

        # Pad or trim to the exact number of players
        fallback = fallback_questions(count)
        questions = questions[:count]
        while len(questions) < count:
            questions.append(fallback[len(questions)])

        logger.debug(f"Generated {count} story questions")
        return questions

    def write_story(self, details: Sequence[Tuple[str, str, str]],
                    previous_story: Optional[str] = None) -> Story:
        """
        Write a story segment from the players' answers.

        Args:
            details: (player name, question, answer) triples
            previous_story: Story so far, if continuing

        Returns:
            Story with text and image prompt

        Raises:
            AIError: When the story cannot be generated
        """
        lines = '\n'.join(f'{name}: {question} -> "{answer}"' for name, question, answer in details)

        if previous_story:
            prompt = (
                f"Continue this story using the new details provided:\n\n"
                f"Previous story segment:\n{previous_story}\n\n"
                f"New details from players:\n{lines}\n\n"
                f"Write one paragraph continuing the story in an engaging way. "
                f"Incorporate the new details naturally.\n"
                f"Also create a detailed visual description for an image that captures this story segment."
            )
        else:
            prompt = (
                f"Create an engaging story from these details provided by players:\n\n{lines}\n\n"
                f"Write one paragraph that weaves these details into a cohesive, creative narrative.\n"
                f"Also create a detailed visual description for an image that captures the essence of this story."
            )

        data = self.text_generator.complete_json(prompt, 'story_segment', STORY_SCHEMA)
        text = str(data.get('text', '')).strip()
        image_prompt = str(data.get('image_prompt', '')).strip()
        if not text:
            raise AIError("Story generation returned no text")

        logger.info(f"Generated story segment ({len(text)} characters)")
        return Story(text=text, image_prompt=image_prompt or text[:300])
