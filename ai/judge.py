"""
Drawing judge for the AI drawing contest.

Sends a labelled collage of all drawings to a vision model and returns a
ranking. Contains no game logic - purely prompting and response checking.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List

from .client import AIError, OpenAIClient

logger = logging.getLogger(__name__)

RANKING_SCHEMA = {
    'type': 'object',
    'properties': {
        'rankings': {
            'type': 'array',
            'items': {
                'type': 'object',
                'properties': {
                    'label': {'type': 'string', 'description': 'Drawing label (A, B, C, ...)'},
                    'rank': {'type': 'number', 'description': 'Rank position (1 = best)'},
                    'reason': {'type': 'string', 'description': 'One sentence explaining the ranking'}
                },
                'required': ['label', 'rank', 'reason'],
                'additionalProperties': False
            }
        }
    },
    'required': ['rankings'],
    'additionalProperties': False
}


@dataclass
class Ranking:
    """One drawing's place in the judge's ranking."""
    label: str
    rank: int
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {'label': self.label, 'rank': self.rank, 'reason': self.reason}


class DrawingJudge:
    """Ranks drawings using a vision-capable chat model."""

    def __init__(self, client: OpenAIClient):
        self.client = client

    def build_prompt(self, word: str, labels: Dict[str, str]) -> str:
        players = ', '.join(f"{label}: {name}" for label, name in labels.items())
        return (
            f'You are judging a drawing competition. The word to draw was: "{word}".\n'
            f'The image shows drawings labeled A, B, C, etc. Each drawing was created by a different player.\n'
            f'Rank ALL drawings from best to worst based on:\n'
            f'1. How well it represents "{word}"\n'
            f'2. Creativity and artistic quality\n'
            f'3. Clarity and recognizability\n\n'
            f'For each drawing, provide a single sentence explaining your ranking.\n\n'
            f'Players: {players}'
        )

    def rank(self, word: str, collage_b64: str, labels: Dict[str, str]) -> List[Ranking]:
        """
        Rank the drawings in a collage.

        Args:
            word: The word that was drawn
            collage_b64: Base64 PNG collage with labelled cells
            labels: label -> player name for every drawing in the collage

        Returns:
            Rankings sorted best first, one per known label

        Raises:
            AIError: When the judge fails or returns an unusable ranking
        """
        messages = [{
            'role': 'user',
            'content': [
                {'type': 'text', 'text': self.build_prompt(word, labels)},
                {'type': 'image_url', 'image_url': {'url': f"data:image/png;base64,{collage_b64}"}}
            ]
        }]

        data = self.client.generate_json(messages, 'drawing_rankings', RANKING_SCHEMA, temperature=0.3)
        rankings = []
        for item in data.get('rankings', []):
            label = str(item.get('label', '')).strip().upper()
            if label not in labels or any(r.label == label for r in rankings):
                continue
            try:
                rank = int(item.get('rank'))
            except (TypeError, ValueError):
                continue
            rankings.append(Ranking(label=label, rank=rank, reason=str(item.get('reason', ''))))

        if not rankings:
            raise AIError("Judge returned no usable rankings")

        rankings.sort(key=lambda r: r.rank)
        logger.info(f"Judged {len(rankings)} drawings for '{word}'")
        return rankings
