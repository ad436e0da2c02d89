"""
AI Drawing Contest game.
"""

from .handler import AIDrawingGame, AIDrawingState, DrawingResult, PHASES
from .collage import build_collage, label_drawings, CollageError

__all__ = [
    'AIDrawingGame',
    'AIDrawingState',
    'DrawingResult',
    'PHASES',
    'build_collage',
    'label_drawings',
    'CollageError'
]
