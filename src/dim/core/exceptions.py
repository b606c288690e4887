"""
Custom exceptions for the dim vectorization engine.
"""


class DimError(Exception):
    """Base exception for all dim errors."""
    pass


class GatewayError(DimError):
    """
    Error communicating with the chat-completion gateway.

    Raised when:
    - Endpoint is unreachable
    - Request times out
    - Endpoint returns an error response
    - Response body is not a chat-completion document
    """

    def __init__(self, message: str, provider: str = None, status_code: int = None):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


class EmptyResponseError(DimError):
    """The gateway replied without any message content."""
    pass


class ResponseParseError(DimError):
    """
    Reply content is not valid JSON.

    Keeps the raw content so the retry loop can log it.
    """

    def __init__(self, message: str, raw_content: str = None):
        super().__init__(message)
        self.raw_content = raw_content


class ScalarValidationError(DimError):
    """
    Parsed reply does not hold exactly one non-negative scalar.

    Raised when:
    - The JSON tree has no leaf values
    - The JSON tree has more than one leaf value
    - The single leaf is negative or not finite
    """

    def __init__(self, message: str, validation_errors: list = None, leaves: list = None):
        super().__init__(message)
        self.validation_errors = validation_errors or []
        self.leaves = leaves or []


class RequestBuildError(DimError):
    """
    Error building a chat-completion request before it is sent.

    Raised when:
    - The prompt is empty
    - Model parameters are invalid
    - The subject cannot be rendered (e.g. image encoding fails)
    """
    pass


class RetryExhaustedError(DimError):
    """
    A single-prompt task used every attempt its retry policy allows.

    Attributes:
        attempts: Number of attempts made
        last_error: The error from the final attempt
        error_history: String form of every attempt's error
    """

    def __init__(self, message: str, attempts: int = 0, last_error: Exception = None,
                 error_history: list = None):
        super().__init__(message)
        self.attempts = attempts
        self.last_error = last_error
        self.error_history = error_history or []


class VectorizationCancelled(DimError):
    """A task stopped because the run was cancelled or its deadline passed."""

    def __init__(self, message: str, attempts: int = 0):
        super().__init__(message)
        self.attempts = attempts


class PartialVectorError(DimError):
    """
    A vectorization run finished with at least one failed prompt.

    The target vector is left untouched. The full per-prompt outcome list is
    available on ``result`` so callers can inspect or accept the partial data.
    """

    def __init__(self, message: str, result=None):
        super().__init__(message)
        self.result = result


class DimConfigError(DimError):
    """
    Error in dim configuration.

    Raised when:
    - Configuration file is missing or invalid
    - Required configuration values are not set
    - Configuration values are out of valid range
    """
    pass


class PromptLoadError(DimError):
    """
    Error loading prompts.

    Raised when:
    - Prompt directory does not exist
    - No prompt files with a recognised extension were found
    - A prompt file is empty
    """
    pass
