"""
Image subjects and data-URI encoding.

Images are re-encoded losslessly as PNG before being inlined into the
request, so the declared media type is always ``image/png``.
"""

import base64
import io
import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from PIL import Image

from ..core.exceptions import RequestBuildError
from ..core.types import SubjectType
from .base import Subject


logger = logging.getLogger(__name__)

IMAGE_FORMAT = "PNG"
IMAGE_MEDIA_TYPE = "image/png"
IMAGE_DETAIL = "high"

# Modes Pillow can write to PNG unchanged
PNG_MODES = frozenset({"1", "L", "LA", "I", "I;16", "P", "RGB", "RGBA"})


def to_png_mode(image: Image.Image) -> Image.Image:
    """Convert modes PNG cannot store (CMYK, YCbCr, LAB) to RGB, or RGBA when there is alpha."""
    if image.mode in PNG_MODES:
        return image
    target = "RGBA" if "A" in image.getbands() else "RGB"
    logger.debug(f"Converting {image.mode} image to {target} for PNG encoding")
    return image.convert(target)


def image_to_base64(image: Image.Image) -> str:
    """
    Re-encode an image as PNG and return the base64 text of the bytes.

    Args:
        image: Decoded Pillow image; modes PNG cannot hold are converted

    Returns:
        Standard base64 (with padding) of the PNG file
    """
    buffer = io.BytesIO()
    to_png_mode(image).save(buffer, format=IMAGE_FORMAT)
    return base64.b64encode(buffer.getvalue()).decode("ascii")


def image_to_data_uri(image: Image.Image) -> str:
    """Wrap an image as a ``data:image/png;base64,...`` URI."""
    return f"data:{IMAGE_MEDIA_TYPE};base64,{image_to_base64(image)}"


def decode_data_uri(data_uri: str) -> Image.Image:
    """
    Decode a data URI produced by ``image_to_data_uri`` back into an image.

    Raises:
        ValueError: If the string is not a base64 data URI
    """
    header, sep, payload = data_uri.partition(",")
    if not sep or not header.startswith("data:") or not header.endswith(";base64"):
        raise ValueError("Not a base64 data URI")
    image = Image.open(io.BytesIO(base64.b64decode(payload)))
    image.load()
    return image


class ImageSubject(Subject):
    """
    An image to score.

    The PNG data URI is built on first use and cached; every prompt of a run
    sends the same bytes.
    """

    subject_type = SubjectType.IMAGE

    def __init__(self, image: Image.Image):
        self.image = image
        self._data_uri: Optional[str] = None
        self._lock = threading.Lock()

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "ImageSubject":
        """Open and decode an image file."""
        with Image.open(path) as img:
            img.load()
            return cls(img.copy())

    @property
    def data(self) -> Image.Image:
        return self.image

    def data_uri(self) -> str:
        with self._lock:
            if self._data_uri is None:
                try:
                    self._data_uri = image_to_data_uri(self.image)
                except (OSError, ValueError) as e:
                    raise RequestBuildError(f"Failed to encode image: {e}") from e
                logger.debug(f"Encoded image subject ({len(self._data_uri)} chars)")
            return self._data_uri

    def render_content(self, prompt: str) -> List[Dict[str, Any]]:
        return [
            {"type": "text", "text": prompt},
            {
                "type": "image_url",
                "image_url": {"url": self.data_uri(), "detail": IMAGE_DETAIL},
            },
        ]

    def describe(self) -> str:
        width, height = self.image.size
        return f"<image {self.image.mode} {width}x{height}>"
