"""
Collage building for the drawing judge.

Combines the submitted drawings into one labelled grid image with Pillow.
"""

import base64
import binascii
import io
import logging
import math
import string
from typing import Dict, List, Sequence, Tuple

from PIL import Image, ImageDraw, UnidentifiedImageError

logger = logging.getLogger(__name__)

CELL_SIZE = 400
LABEL_HEIGHT = 40
MAX_COLUMNS = 3
BACKGROUND = (255, 255, 255)
LABEL_COLOR = (0, 0, 0)


class CollageError(ValueError):
    """Raised when a drawing cannot be decoded."""


def labels_for(count: int) -> List[str]:
    """Labels A, B, C, ... for `count` drawings."""
    return list(string.ascii_uppercase[:count])


def decode_image_data(image_data: str) -> bytes:
    """
    Decode a base64 image, with or without a data URL prefix.

    Raises:
        CollageError: When the data is not valid base64
    """
    if not isinstance(image_data, str) or not image_data:
        raise CollageError("Empty image data")
    if image_data.startswith('data:'):
        image_data = image_data.split(',', 1)[-1]
    try:
        return base64.b64decode(image_data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise CollageError(f"Invalid image data: {e}") from e


def _load_cell(image_data: str) -> Image.Image:
    try:
        with Image.open(io.BytesIO(decode_image_data(image_data))) as src:
            src = src.convert('RGBA')
            flat = Image.new('RGB', src.size, BACKGROUND)
            flat.paste(src, mask=src.split()[3])
    except (OSError, UnidentifiedImageError) as e:
        raise CollageError(f"Unreadable image: {e}") from e

    flat.thumbnail((CELL_SIZE, CELL_SIZE - LABEL_HEIGHT))
    cell = Image.new('RGB', (CELL_SIZE, CELL_SIZE), BACKGROUND)
    offset = ((CELL_SIZE - flat.width) // 2, LABEL_HEIGHT + (CELL_SIZE - LABEL_HEIGHT - flat.height) // 2)
    cell.paste(flat, offset)
    return cell


def build_collage(drawings: Sequence[Tuple[str, str]]) -> str:
    """
    Build a labelled grid of drawings.

    Args:
        drawings: (label, base64 image) pairs in display order

    Returns:
        Base64 encoded PNG of the collage

    Raises:
        CollageError: When no drawings are given or one cannot be decoded
    """
    if not drawings:
        raise CollageError("No drawings to combine")

    columns = min(MAX_COLUMNS, len(drawings))
    rows = math.ceil(len(drawings) / columns)
    collage = Image.new('RGB', (columns * CELL_SIZE, rows * CELL_SIZE), BACKGROUND)
    draw = ImageDraw.Draw(collage)

    for index, (label, image_data) in enumerate(drawings):
        x = (index % columns) * CELL_SIZE
        y = (index // columns) * CELL_SIZE
        collage.paste(_load_cell(image_data), (x, y))
        draw.rectangle([x, y, x + CELL_SIZE - 1, y + CELL_SIZE - 1], outline=LABEL_COLOR, width=2)
        draw.text((x + 12, y + 10), label, fill=LABEL_COLOR)

    buffer = io.BytesIO()
    collage.save(buffer, format='PNG')
    logger.debug(f"Built collage of {len(drawings)} drawings ({collage.width}x{collage.height})")
    return base64.b64encode(buffer.getvalue()).decode('ascii')


def label_drawings(drawings: Dict[str, str]) -> Dict[str, str]:
    """Assign labels to participant ids in submission order: label -> participant id."""
    return dict(zip(labels_for(len(drawings)), drawings.keys()))
