"""
TIFF tag check — Detects Wang annotations embedded in TIFF page directories.

Annotation data is never decoded; the check only reports whether any page
carries the Wang annotation tag.
"""

from __future__ import annotations

import io
import logging
from typing import Optional

from PIL import Image, ImageSequence, UnidentifiedImageError

logger = logging.getLogger("contentstore.documents.tiff")

WANG_ANNOTATION_TAG = 32932


def has_tiff_tag_annotations(data: Optional[bytes]) -> bool:
    """True if any page of a TIFF image carries tag 32932."""
    if not data:
        return False
    try:
        with Image.open(io.BytesIO(data)) as image:
            if image.format != "TIFF":
                return False
            for page, frame in enumerate(ImageSequence.Iterator(image)):
                if WANG_ANNOTATION_TAG in frame.tag_v2:
                    logger.debug(f"Wang annotation tag found on page {page}")
                    return True
    except UnidentifiedImageError:
        return False
    except (OSError, EOFError, SyntaxError, ValueError) as e:
        logger.debug(f"Unreadable TIFF data: {e}")
        return False
    return False
