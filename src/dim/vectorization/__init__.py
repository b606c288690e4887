"""
Per-prompt vectorization: JSON leaf extraction, scalar validation and the
retrying single-prompt vectorizer.
"""

from .leaves import coerce_leaf, extract_leaf_values, validate_scalars
from .single_prompt import PromptScore, SinglePromptVectorizer, build_request

__all__ = [
    "coerce_leaf",
    "extract_leaf_values",
    "validate_scalars",
    "PromptScore",
    "SinglePromptVectorizer",
    "build_request",
]
