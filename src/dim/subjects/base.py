"""
Subject sum type.

A subject knows how to render itself, together with one prompt, into the
content of a chat-completion user message. The engine never inspects the
payload beyond that.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Union

from ..core.types import SubjectType


# Message content is either plain text or a list of typed parts
MessageContent = Union[str, List[Dict[str, Any]]]


class Subject(ABC):
    """Abstract base class for vectorizable payloads."""

    subject_type: SubjectType

    @property
    @abstractmethod
    def data(self) -> Any:
        """The raw payload."""
        pass

    @abstractmethod
    def render_content(self, prompt: str) -> MessageContent:
        """
        Render this subject and a prompt into user message content.

        Raises:
            RequestBuildError: If the subject cannot be rendered
        """
        pass

    def describe(self) -> str:
        """Short description for logs."""
        return f"<{self.subject_type.value}>"


class TextSubject(Subject):
    """A block of text to score. The text is appended after the prompt."""

    subject_type = SubjectType.TEXT

    def __init__(self, text: str):
        self.text = text

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "TextSubject":
        return cls(Path(path).read_text(encoding="utf-8"))

    @property
    def data(self) -> str:
        return self.text

    def render_content(self, prompt: str) -> str:
        return f"{prompt}\n\nText to analyze: {self.text}"

    def describe(self) -> str:
        preview = self.text[:40].replace("\n", " ")
        return f"<text {len(self.text)} chars: {preview!r}>"
