"""
Subjects: the payloads dim turns into vectors.
"""

from .base import MessageContent, Subject, TextSubject
from .image import ImageSubject, image_to_base64, image_to_data_uri, decode_data_uri, to_png_mode

__all__ = [
    "MessageContent",
    "Subject",
    "TextSubject",
    "ImageSubject",
    "image_to_base64",
    "image_to_data_uri",
    "decode_data_uri",
    "to_png_mode",
]
