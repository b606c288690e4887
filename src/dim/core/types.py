"""
Core data types for the dim vectorization engine.

Uses dataclasses following the same pattern as the rest of the package.
"""

import random
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional


# OpenAI-compatible servers accept 32-bit seeds; larger values are rejected by some.
MAX_SEED = 2**31 - 1


class SubjectType(str, Enum):
    """Kind of payload being vectorized."""
    IMAGE = "image"
    TEXT = "text"
    # Reserved, no renderer yet
    AUDIO = "audio"
    VIDEO = "video"


def generate_seed() -> int:
    """Generate a fresh request seed."""
    return random.randint(0, MAX_SEED)


@dataclass(frozen=True)
class ModelParameters:
    """
    Immutable chat-completion request settings shared by every task in a run.

    Attributes:
        model: Model identifier (e.g., 'minicpm-v', 'gpt-4o-mini')
        temperature: Sampling temperature (0.0-2.0)
        seed: Sampling seed. When None, ``for_run`` generates one that
            every prompt of the run reuses.
    """
    model: str
    temperature: float = 0.0
    seed: Optional[int] = None

    def for_run(self) -> "ModelParameters":
        """Return a copy with a concrete seed for one vectorization run."""
        if self.seed is not None:
            return self
        return replace(self, seed=generate_seed())

    def validate(self) -> List[str]:
        """
        Check parameter ranges.

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = []
        if not isinstance(self.model, str) or not self.model.strip():
            errors.append("model must be a non-empty string")
        if not isinstance(self.temperature, (int, float)) or isinstance(self.temperature, bool):
            errors.append("temperature must be a number")
        elif not 0.0 <= self.temperature <= 2.0:
            errors.append(f"temperature {self.temperature} outside 0.0-2.0")
        if self.seed is not None and (not isinstance(self.seed, int) or isinstance(self.seed, bool)):
            errors.append("seed must be an integer")
        return errors

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "model": self.model,
            "temperature": self.temperature,
            "seed": self.seed,
        }


@dataclass
class ChatRequest:
    """
    A chat-completion request as sent through a gateway.

    Attributes:
        model: Model identifier
        messages: OpenAI-style message list
        temperature: Sampling temperature
        seed: Sampling seed
        response_format: Constrained output format
    """
    model: str
    messages: List[Dict[str, Any]]
    temperature: float = 0.0
    seed: Optional[int] = None
    response_format: Dict[str, Any] = field(default_factory=lambda: {"type": "json_object"})

    def to_payload(self) -> Dict[str, Any]:
        """Build the JSON body for /chat/completions."""
        payload = {
            "model": self.model,
            "messages": self.messages,
            "temperature": self.temperature,
            "response_format": self.response_format,
            "stream": False,
        }
        if self.seed is not None:
            payload["seed"] = self.seed
        return payload


@dataclass
class ChatResponse:
    """
    Reply from a chat-completion gateway.

    Attributes:
        content: First choice's message content (None if absent)
        model: Model that generated the response
        raw_response: Full response JSON
        prompt_tokens: Number of prompt tokens (if available)
        completion_tokens: Number of completion tokens (if available)
        total_tokens: Total tokens used (if available)
    """
    content: Optional[str] = None
    model: Optional[str] = None
    raw_response: Optional[Dict[str, Any]] = None
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    total_tokens: Optional[int] = None
