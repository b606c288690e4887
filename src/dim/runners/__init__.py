"""
Run orchestration.
"""

from .dispatcher import (
    ConcurrentDispatcher,
    DispatcherConfig,
    DispatchResult,
    PromptOutcome,
    vectorize_concurrently,
)

__all__ = [
    "ConcurrentDispatcher",
    "DispatcherConfig",
    "DispatchResult",
    "PromptOutcome",
    "vectorize_concurrently",
]
