"""
Vector container: a subject plus the ordered float32 scores produced for it.
"""

from typing import Any, Sequence

import numpy as np
from PIL import Image

from ..subjects import ImageSubject, Subject, TextSubject
from .types import SubjectType


class Vector:
    """
    A vectorized subject.

    ``vector`` starts empty and is only ever replaced wholesale by
    ``overwrite_vector``; one entry per prompt, in prompt order.

    Example:
        >>> vector = Vector.from_text("Hello, world!")
        >>> vector.dimensionality
        0
    """

    def __init__(self, subject: Subject):
        self.subject = subject
        self._vector = np.empty(0, dtype=np.float32)

    @classmethod
    def from_image(cls, image: Image.Image) -> "Vector":
        return cls(ImageSubject(image))

    @classmethod
    def from_text(cls, text: str) -> "Vector":
        return cls(TextSubject(text))

    @property
    def subject_type(self) -> SubjectType:
        return self.subject.subject_type

    @property
    def vector(self) -> np.ndarray:
        """Read-only view of the current scores."""
        view = self._vector.view()
        view.flags.writeable = False
        return view

    @property
    def dimensionality(self) -> int:
        return int(self._vector.shape[0])

    def get_vector(self) -> np.ndarray:
        """Return a copy of the scores."""
        return self._vector.copy()

    def get_data(self) -> Any:
        return self.subject.data

    def get_data_type(self) -> SubjectType:
        return self.subject_type

    def overwrite_vector(self, values: Sequence[float]) -> None:
        """Replace the whole vector with ``values`` as float32."""
        self._vector = np.asarray(values, dtype=np.float32).reshape(-1).copy()

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "subject_type": self.subject_type.value,
            "dimensionality": self.dimensionality,
            "vector": [float(v) for v in self._vector],
        }

    def __repr__(self) -> str:
        return (
            f"Vector(subject_type={self.subject_type.value}, "
            f"dimensionality={self.dimensionality}, subject={self.subject.describe()})"
        )
