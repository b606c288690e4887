"""
dim - LLM-scored feature vectors

This package turns an image or a block of text into a fixed-length vector by
asking a chat-completion model one question per dimension and validating that
each reply is a single non-negative JSON number.

Key components:
- core/: Types, Vector container, exceptions, and logging utilities
- subjects/: Image and text subjects and how they render into requests
- providers/: Chat-completion gateways (OpenAI-compatible HTTP)
- vectorization/: JSON leaf extraction and the retrying single-prompt vectorizer
- runners/: Concurrent dispatcher with per-prompt outcomes
- prompts/: Prompt directory loader and rating templates
- config/: YAML and environment configuration
- cli/: Command-line entry point
"""

from .core.types import ModelParameters, SubjectType
from .core.vector import Vector
from .providers.openai_client import OpenAICompatibleClient
from .runners.dispatcher import (
    ConcurrentDispatcher,
    DispatcherConfig,
    DispatchResult,
    vectorize_concurrently,
)
from .subjects import ImageSubject, TextSubject
from .utils.retry import RetryPolicy

__version__ = "0.1.0"

__all__ = [
    "ModelParameters",
    "SubjectType",
    "Vector",
    "OpenAICompatibleClient",
    "ConcurrentDispatcher",
    "DispatcherConfig",
    "DispatchResult",
    "vectorize_concurrently",
    "ImageSubject",
    "TextSubject",
    "RetryPolicy",
]
