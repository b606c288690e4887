"""
JSON leaf extraction and scalar validation.

A reply such as ``{"offensiveness": 3.5}`` is flattened to its leaf values,
each leaf is coerced to a float, and the result must be exactly one
non-negative finite number.
"""

import math
from typing import Any, List

import numpy as np

from ..core.exceptions import ScalarValidationError


# Largest score the float32 vector can hold without becoming inf
FLOAT32_MAX = float(np.finfo(np.float32).max)


def extract_leaf_values(value: Any) -> List[Any]:
    """
    Recursively collect the terminal values of a parsed JSON tree.

    Objects are walked in key insertion order, arrays in element order,
    depth-first.

    Example:
        >>> extract_leaf_values({"a": {"b": 3}, "c": [1, 2]})
        [3, 1, 2]
    """
    if isinstance(value, dict):
        leaves = []
        for child in value.values():
            leaves.extend(extract_leaf_values(child))
        return leaves
    if isinstance(value, list):
        leaves = []
        for child in value:
            leaves.extend(extract_leaf_values(child))
        return leaves
    return [value]


def coerce_leaf(leaf: Any) -> float:
    """Numbers pass through as float; strings, booleans and null become 0.0."""
    # bool is an int subclass
    if isinstance(leaf, bool) or not isinstance(leaf, (int, float)):
        return 0.0
    try:
        return float(leaf)
    except OverflowError:
        # int too large for a float; validation rejects it
        return math.inf


def validate_scalars(values: List[float]) -> float:
    """
    Check that a coerced leaf list holds exactly one non-negative scalar.

    Returns:
        The single scalar

    Raises:
        ScalarValidationError: If the list is empty, has several values, or
            its value is negative or not representable as a finite float32
    """
    if not values:
        raise ScalarValidationError(
            "Validation error: reply has no leaf values",
            validation_errors=["empty"],
            leaves=values,
        )
    if len(values) > 1:
        raise ScalarValidationError(
            f"Validation error: reply has {len(values)} leaf values, expected 1",
            validation_errors=["multiple_leaves"],
            leaves=values,
        )

    value = values[0]
    if not math.isfinite(value) or abs(value) > FLOAT32_MAX:
        raise ScalarValidationError(
            f"Validation error: value {value} is not a finite float32",
            validation_errors=["not_finite"],
            leaves=values,
        )
    if value < 0.0:
        raise ScalarValidationError(
            f"Validation error: value {value} is negative",
            validation_errors=["negative"],
            leaves=values,
        )
    return value
