"""
Retry logic with exponential backoff for per-prompt LLM calls.

Every attempt checks a cancellation event and an optional deadline, and the
backoff sleep waits on the same event so a cancelled run stops promptly.
"""

import itertools
import json
import logging
import random
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """
    Configuration for retry behavior.

    Attributes:
        max_attempts: Maximum number of attempts (including first try);
            None retries until cancelled
        initial_delay_ms: Initial delay in milliseconds
        max_delay_ms: Maximum delay in milliseconds
        backoff_multiplier: Multiplier for exponential backoff
        jitter: Whether to add random jitter to delay
    """
    max_attempts: Optional[int] = 5
    initial_delay_ms: float = 250.0
    max_delay_ms: float = 5000.0
    backoff_multiplier: float = 2.0
    jitter: bool = True

    def __post_init__(self):
        if self.max_attempts is not None and self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1 (or None for unbounded)")
        if self.initial_delay_ms < 0 or self.max_delay_ms < 0:
            raise ValueError("delays must be non-negative")


@dataclass
class RetryResult:
    """
    Result of a retry operation.

    Attributes:
        success: Whether the operation succeeded
        result: The result value if successful
        attempts: Number of attempts made
        error: The final error if failed
        error_history: List of errors from each attempt
        cancelled: Whether the loop stopped on cancellation or deadline
    """
    success: bool
    result: Any = None
    attempts: int = 0
    error: Optional[Exception] = None
    error_history: list = None
    cancelled: bool = False

    def __post_init__(self):
        if self.error_history is None:
            self.error_history = []


def calculate_delay(attempt: int, policy: RetryPolicy) -> float:
    """
    Calculate delay for a given attempt with exponential backoff.

    Args:
        attempt: Attempt number (0-based)
        policy: Retry policy

    Returns:
        Delay in seconds
    """
    delay_ms = min(
        policy.initial_delay_ms * (policy.backoff_multiplier ** attempt),
        policy.max_delay_ms
    )

    # ±25% random variation
    if policy.jitter:
        jitter_factor = 0.75 + (random.random() * 0.5)
        delay_ms *= jitter_factor

    return delay_ms / 1000.0


def should_stop(cancel_event: Optional[threading.Event], deadline: Optional[float]) -> bool:
    """True if the event is set or the monotonic deadline has passed."""
    if cancel_event is not None and cancel_event.is_set():
        return True
    return deadline is not None and time.monotonic() >= deadline


def wait_for_retry(
    delay: float,
    cancel_event: Optional[threading.Event] = None,
    deadline: Optional[float] = None,
) -> bool:
    """
    Sleep before the next attempt.

    Returns:
        False if the wait was cut short by cancellation or the deadline
    """
    if deadline is not None:
        delay = min(delay, max(0.0, deadline - time.monotonic()))
    if cancel_event is not None:
        cancel_event.wait(delay)
    elif delay > 0:
        time.sleep(delay)
    return not should_stop(cancel_event, deadline)


def retry_with_backoff(
    operation: Callable[[int], Any],
    policy: RetryPolicy,
    retry_on: tuple = (Exception,),
    operation_name: str = "operation",
    cancel_event: Optional[threading.Event] = None,
    deadline: Optional[float] = None,
    log_extra: Optional[Dict[str, Any]] = None,
) -> RetryResult:
    """
    Execute an operation with retry and exponential backoff.

    Args:
        operation: Callable taking the 1-based attempt number
        policy: Retry policy
        retry_on: Tuple of exception types to retry on
        operation_name: Name for logging
        cancel_event: Checked before every attempt and during backoff
        deadline: ``time.monotonic()`` value after which no attempt starts
        log_extra: Context fields attached to every log record

    Returns:
        RetryResult with success/failure info

    Example:
        >>> policy = RetryPolicy(max_attempts=3)
        >>> result = retry_with_backoff(lambda attempt: risky_operation(), policy)
        >>> if result.success:
        ...     print(f"Success after {result.attempts} attempts")
    """
    error_history = []
    last_error: Optional[Exception] = None
    extra = dict(log_extra or {})
    limit = policy.max_attempts
    attempts = range(limit) if limit is not None else itertools.count()
    label = str(limit) if limit is not None else "unbounded"
    made = 0

    for attempt in attempts:
        if should_stop(cancel_event, deadline):
            logger.info(f"{operation_name} cancelled after {made} attempts", extra=extra)
            return RetryResult(
                success=False,
                attempts=made,
                error=last_error,
                error_history=error_history,
                cancelled=True,
            )

        made = attempt + 1
        extra["attempt"] = made
        try:
            logger.debug(f"{operation_name}: attempt {made}/{label}", extra=extra)
            result = operation(made)

            if attempt > 0:
                logger.info(f"{operation_name} succeeded after {made} attempts", extra=extra)

            return RetryResult(
                success=True,
                result=result,
                attempts=made,
                error_history=error_history,
            )

        except retry_on as e:
            last_error = e
            error_history.append(str(e))
            logger.warning(
                f"{operation_name} failed on attempt {made}/{label}: {e}", extra=extra
            )

            if limit is None or made < limit:
                delay = calculate_delay(attempt, policy)
                logger.debug(f"Backing off for {delay:.3f}s before retry", extra=extra)
                if not wait_for_retry(delay, cancel_event, deadline):
                    logger.info(f"{operation_name} cancelled during backoff", extra=extra)
                    return RetryResult(
                        success=False,
                        attempts=made,
                        error=last_error,
                        error_history=error_history,
                        cancelled=True,
                    )

        except Exception as e:
            logger.error(f"{operation_name} failed with non-retryable error: {e}", extra=extra)
            error_history.append(str(e))
            return RetryResult(
                success=False,
                attempts=made,
                error=e,
                error_history=error_history,
            )

    logger.error(f"{operation_name} exhausted all {limit} attempts", extra=extra)

    return RetryResult(
        success=False,
        attempts=made,
        error=last_error,
        error_history=error_history,
    )


def parse_json_content(
    content: str,
    extract_embedded: bool = False,
) -> Tuple[bool, Any, list]:
    """
    Parse JSON with optional extraction of an embedded object.

    This function handles:
    1. Direct JSON parsing
    2. Optional extraction of the first {...} block if embedded in text
       (e.g. wrapped in a markdown fence)

    Args:
        content: String content to parse
        extract_embedded: If True, try to extract first JSON object from text

    Returns:
        Tuple of (success, parsed_value, error_list)

    Example:
        >>> success, data, errors = parse_json_content('{"score": 4}')
        >>> if success:
        ...     print(data["score"])
    """
    errors = []

    try:
        return True, json.loads(content), errors
    except ValueError as e:
        # JSONDecodeError, or the int digit limit on very long numbers
        errors.append(f"Direct parse failed: {e}")

    if extract_embedded:
        start = content.find('{')
        if start < 0:
            errors.append("Embedded parse failed: no opening brace found")
            return False, None, errors

        # Simple bracket counting to find matching close
        depth = 0
        for i in range(start, len(content)):
            if content[i] == '{':
                depth += 1
            elif content[i] == '}':
                depth -= 1
                if depth == 0:
                    try:
                        return True, json.loads(content[start:i + 1]), errors
                    except ValueError as e:
                        errors.append(f"Embedded parse failed: {e}")
                        return False, None, errors
        errors.append("Embedded parse failed: no matching closing brace")

    return False, None, errors
