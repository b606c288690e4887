"""
Single-prompt vectorizer.

Turns one (subject, prompt) pair into one validated scalar. Transport
failures, empty replies, unparseable JSON and invalid scalars are all retried
within the configured RetryPolicy; request-build failures are not.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..core.exceptions import (
    EmptyResponseError,
    GatewayError,
    RequestBuildError,
    ResponseParseError,
    RetryExhaustedError,
    ScalarValidationError,
    VectorizationCancelled,
)
from ..core.types import ChatRequest, ModelParameters
from ..providers.base import ChatGateway
from ..subjects.base import Subject
from ..utils.retry import RetryPolicy, parse_json_content, retry_with_backoff
from .leaves import coerce_leaf, extract_leaf_values, validate_scalars


logger = logging.getLogger(__name__)

RETRYABLE_ERRORS = (
    GatewayError,
    EmptyResponseError,
    ResponseParseError,
    ScalarValidationError,
)


@dataclass
class PromptScore:
    """A validated scalar and the number of attempts it took."""
    value: float
    attempts: int


def build_request(subject: Subject, prompt: str, params: ModelParameters) -> ChatRequest:
    """
    Build the chat-completion request for one prompt.

    Raises:
        RequestBuildError: If the prompt is empty, parameters are invalid or
            the subject cannot be rendered
    """
    if not isinstance(prompt, str) or not prompt.strip():
        raise RequestBuildError("Prompt must be a non-empty string")

    errors = params.validate()
    if errors:
        raise RequestBuildError(f"Invalid model parameters: {'; '.join(errors)}")

    content = subject.render_content(prompt)

    return ChatRequest(
        model=params.model,
        messages=[{"role": "user", "content": content}],
        temperature=float(params.temperature),
        seed=params.seed,
    )


class SinglePromptVectorizer:
    """
    Scores one subject against one prompt.

    Example:
        >>> vectorizer = SinglePromptVectorizer(gateway, RetryPolicy(max_attempts=3))
        >>> vectorizer.vectorize(TextSubject("hi"), "Rate friendliness...", params)
        7.0
    """

    def __init__(
        self,
        gateway: ChatGateway,
        retry_policy: Optional[RetryPolicy] = None,
        extract_embedded_json: bool = False,
    ):
        self.gateway = gateway
        self.retry_policy = retry_policy or RetryPolicy()
        self.extract_embedded_json = extract_embedded_json

    def vectorize(
        self,
        subject: Subject,
        prompt: str,
        params: ModelParameters,
        cancel_event: Optional[threading.Event] = None,
        deadline: Optional[float] = None,
    ) -> float:
        """Return the validated scalar for one prompt."""
        return self.score(subject, prompt, params, cancel_event, deadline).value

    def score(
        self,
        subject: Subject,
        prompt: str,
        params: ModelParameters,
        cancel_event: Optional[threading.Event] = None,
        deadline: Optional[float] = None,
        log_extra: Optional[Dict[str, Any]] = None,
    ) -> PromptScore:
        """
        Score one prompt, retrying until a valid scalar arrives.

        Args:
            subject: Subject to score
            prompt: Instruction asking for a JSON-wrapped scalar
            params: Model parameters with the run's seed
            cancel_event: Set to stop retrying
            deadline: ``time.monotonic()`` value after which no attempt starts
            log_extra: Context fields for log records (run_id, prompt_index)

        Returns:
            PromptScore with the scalar and attempt count

        Raises:
            RequestBuildError: If the request cannot be built
            RetryExhaustedError: If every allowed attempt failed
            VectorizationCancelled: If cancelled or past the deadline
        """
        request = build_request(subject, prompt, params)
        extra = dict(log_extra or {})
        extra.setdefault("subject_type", subject.subject_type.value)

        result = retry_with_backoff(
            lambda attempt: self._attempt(request, prompt, extra),
            self.retry_policy,
            retry_on=RETRYABLE_ERRORS,
            operation_name=f"vectorize prompt {extra.get('prompt_index', '?')}",
            cancel_event=cancel_event,
            deadline=deadline,
            log_extra=extra,
        )

        if result.success:
            return PromptScore(value=result.result, attempts=result.attempts)

        if result.cancelled:
            raise VectorizationCancelled(
                f"Cancelled after {result.attempts} attempts", attempts=result.attempts
            )

        if result.error is not None and not isinstance(result.error, RETRYABLE_ERRORS):
            raise result.error

        raise RetryExhaustedError(
            f"No valid scalar after {result.attempts} attempts: {result.error}",
            attempts=result.attempts,
            last_error=result.error,
            error_history=result.error_history,
        )

    def _attempt(self, request: ChatRequest, prompt: str, extra: Dict[str, Any]) -> float:
        """One request/parse/validate round trip."""
        try:
            response = self.gateway.complete(request)
        except GatewayError:
            raise
        except OSError as e:
            raise GatewayError(f"Transport failure: {e}") from e

        content = response.content
        if content is None:
            raise EmptyResponseError("Empty content in response")
        if not isinstance(content, str):
            raise ResponseParseError(
                f"Expected text content, got {type(content).__name__}", raw_content=repr(content)
            )
        if not content.strip():
            raise EmptyResponseError("Empty content in response")

        ok, parsed, errors = parse_json_content(content, extract_embedded=self.extract_embedded_json)
        if not ok:
            raise ResponseParseError(f"JSON parsing failed: {errors[-1]}", raw_content=content)

        values = [coerce_leaf(leaf) for leaf in extract_leaf_values(parsed)]
        try:
            return validate_scalars(values)
        except ScalarValidationError:
            logger.warning(
                f"Validation failed. Prompt: {prompt!r} Result: {content!r} "
                f"Parsed: {parsed!r} Output: {values}",
                extra=extra,
            )
            raise
