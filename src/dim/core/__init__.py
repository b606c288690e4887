"""
Core subpackage for dim.

Contains types, exceptions, and logging utilities.
"""

from .types import (
    SubjectType,
    ModelParameters,
    ChatRequest,
    ChatResponse,
    generate_seed,
)
from .exceptions import (
    DimError,
    GatewayError,
    EmptyResponseError,
    ResponseParseError,
    ScalarValidationError,
    RequestBuildError,
    RetryExhaustedError,
    VectorizationCancelled,
    PartialVectorError,
    DimConfigError,
    PromptLoadError,
)

__all__ = [
    # Types
    "SubjectType",
    "ModelParameters",
    "ChatRequest",
    "ChatResponse",
    "generate_seed",
    # Exceptions
    "DimError",
    "GatewayError",
    "EmptyResponseError",
    "ResponseParseError",
    "ScalarValidationError",
    "RequestBuildError",
    "RetryExhaustedError",
    "VectorizationCancelled",
    "PartialVectorError",
    "DimConfigError",
    "PromptLoadError",
]
