"""
Concurrent Dispatcher - scores every prompt of a prompt set in parallel.

This module provides the dispatcher that:
1. Resolves the run's seed once
2. Submits one single-prompt task per prompt to a bounded thread pool
3. Tags every task with its prompt index
4. Collects an explicit success/failure outcome per index
5. Writes the vector only when every prompt succeeded

Completion order never affects output order.
"""

import logging
import threading
import time
import uuid
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from ..core.exceptions import (
    DimError,
    PartialVectorError,
    RequestBuildError,
    VectorizationCancelled,
)
from ..core.types import ModelParameters
from ..core.vector import Vector
from ..providers.base import ChatGateway
from ..subjects.base import Subject
from ..utils.retry import RetryPolicy
from ..vectorization.single_prompt import SinglePromptVectorizer


logger = logging.getLogger(__name__)


@dataclass
class DispatcherConfig:
    """
    Configuration for the concurrent dispatcher.

    Attributes:
        max_workers: Maximum number of concurrent gateway calls, independent
            of the prompt count
        retry_policy: Per-prompt retry policy
        deadline_seconds: Wall-clock budget for the whole run (None = no limit)
        extract_embedded_json: Accept JSON objects embedded in surrounding text
    """
    max_workers: int = 4
    retry_policy: RetryPolicy = field(default_factory=RetryPolicy)
    deadline_seconds: Optional[float] = None
    extract_embedded_json: bool = False

    def __post_init__(self):
        if self.max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        if self.deadline_seconds is not None and self.deadline_seconds <= 0:
            raise ValueError("deadline_seconds must be positive")


@dataclass
class PromptOutcome:
    """
    Result of one prompt's task.

    Attributes:
        index: Position of the prompt in the prompt set
        prompt: The prompt text
        success: Whether a valid scalar was produced
        value: The scalar (None on failure)
        attempts: Gateway attempts made
        error: The terminal error (None on success)
    """
    index: int
    prompt: str
    success: bool
    value: Optional[float] = None
    attempts: int = 0
    error: Optional[Exception] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        result = {
            "index": self.index,
            "success": self.success,
            "value": self.value,
            "attempts": self.attempts,
        }
        if self.error is not None:
            result["error_type"] = type(self.error).__name__
            result["error_message"] = str(self.error)
        return result


@dataclass
class DispatchResult:
    """
    Index-ordered outcomes of one vectorization run.

    Attributes:
        run_id: Identifier used in log records for this run
        seed: Seed every task of the run sent
        outcomes: One outcome per prompt, ordered by index
        duration_ms: Wall-clock duration of the run
    """
    run_id: str
    seed: Optional[int]
    outcomes: List[PromptOutcome] = field(default_factory=list)
    duration_ms: Optional[int] = None

    @property
    def is_complete(self) -> bool:
        return all(o.success for o in self.outcomes)

    @property
    def failed(self) -> List[PromptOutcome]:
        return [o for o in self.outcomes if not o.success]

    def require_complete(self) -> "DispatchResult":
        """
        Return self if every prompt succeeded.

        Raises:
            PartialVectorError: If any prompt failed
        """
        if not self.is_complete:
            indices = [o.index for o in self.failed]
            raise PartialVectorError(
                f"{len(indices)} of {len(self.outcomes)} prompts failed: indices {indices}",
                result=self,
            )
        return self

    def values(self) -> List[float]:
        """Scalars in prompt order; raises PartialVectorError if incomplete."""
        self.require_complete()
        return [o.value for o in self.outcomes]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "run_id": self.run_id,
            "seed": self.seed,
            "complete": self.is_complete,
            "duration_ms": self.duration_ms,
            "outcomes": [o.to_dict() for o in self.outcomes],
        }


class ConcurrentDispatcher:
    """
    Runs one single-prompt vectorizer per prompt on a bounded thread pool.

    Tasks share the subject, the model parameters and the gateway read-only.

    Example:
        >>> dispatcher = ConcurrentDispatcher(client, DispatcherConfig(max_workers=8))
        >>> vector = Vector.from_text("The weather is beautiful today.")
        >>> dispatcher.vectorize(vector, prompts, ModelParameters("minicpm-v"))
        >>> vector.get_vector()
    """

    def __init__(self, gateway: ChatGateway, config: Optional[DispatcherConfig] = None):
        """
        Initialize the dispatcher.

        Args:
            gateway: Chat-completion gateway shared by all tasks
            config: Dispatcher configuration (uses defaults if not provided)
        """
        self.gateway = gateway
        self.config = config or DispatcherConfig()
        self.vectorizer = SinglePromptVectorizer(
            gateway,
            retry_policy=self.config.retry_policy,
            extract_embedded_json=self.config.extract_embedded_json,
        )

    def run(
        self,
        subject: Subject,
        prompts: Sequence[str],
        params: ModelParameters,
        cancel_event: Optional[threading.Event] = None,
        run_id: Optional[str] = None,
    ) -> DispatchResult:
        """
        Score every prompt against the subject.

        Args:
            subject: Subject to score
            prompts: Ordered prompt set; order is the output dimension order
            params: Model parameters; a missing seed is generated once here
            cancel_event: Set from another thread to stop all tasks
            run_id: Optional run identifier (auto-generated if not provided)

        Returns:
            DispatchResult with one outcome per prompt, ordered by index

        Raises:
            ValueError: If the subject is missing or the prompt set is empty
            RequestBuildError: If the model parameters are invalid
        """
        if subject is None:
            raise ValueError("subject is required")
        prompts = list(prompts)
        if not prompts:
            raise ValueError("prompt set must not be empty")
        errors = params.validate()
        if errors:
            raise RequestBuildError(f"Invalid model parameters: {'; '.join(errors)}")

        run_id = run_id or str(uuid.uuid4())
        run_params = params.for_run()
        cancel_event = cancel_event or threading.Event()
        started = time.monotonic()
        deadline = None
        if self.config.deadline_seconds is not None:
            deadline = started + self.config.deadline_seconds

        logger.info(
            f"Starting vectorization run: {len(prompts)} prompts, "
            f"max_workers={self.config.max_workers}, model={run_params.model}, "
            f"seed={run_params.seed}",
            extra={"run_id": run_id, "subject_type": subject.subject_type.value},
        )

        by_index: Dict[int, PromptOutcome] = {}
        executor = ThreadPoolExecutor(
            max_workers=self.config.max_workers,
            thread_name_prefix="dim-prompt",
        )
        try:
            futures: Dict[Future, int] = {}
            for index, prompt in enumerate(prompts):
                future = executor.submit(
                    self._run_task, index, prompt, subject, run_params,
                    cancel_event, deadline, run_id,
                )
                futures[future] = index

            for future in as_completed(futures):
                index = futures[future]
                if future.cancelled():
                    by_index[index] = PromptOutcome(
                        index=index,
                        prompt=prompts[index],
                        success=False,
                        error=VectorizationCancelled("Task cancelled before it started"),
                    )
                else:
                    by_index[index] = future.result()
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt, cancelling run...", extra={"run_id": run_id})
            cancel_event.set()
            raise
        finally:
            executor.shutdown(wait=True, cancel_futures=cancel_event.is_set())

        result = DispatchResult(
            run_id=run_id,
            seed=run_params.seed,
            outcomes=[by_index[i] for i in sorted(by_index)],
            duration_ms=int((time.monotonic() - started) * 1000),
        )

        logger.info(
            f"Run complete: {len(prompts) - len(result.failed)}/{len(prompts)} prompts "
            f"succeeded in {result.duration_ms}ms",
            extra={"run_id": run_id},
        )
        return result

    def vectorize(
        self,
        vector: Vector,
        prompts: Sequence[str],
        params: ModelParameters,
        cancel_event: Optional[threading.Event] = None,
        run_id: Optional[str] = None,
    ) -> DispatchResult:
        """
        Score the vector's subject and overwrite its scores in one step.

        Raises:
            PartialVectorError: If any prompt failed; the vector is unchanged
        """
        result = self.run(vector.subject, prompts, params, cancel_event, run_id)
        vector.overwrite_vector(result.values())
        return result

    def _run_task(
        self,
        index: int,
        prompt: str,
        subject: Subject,
        params: ModelParameters,
        cancel_event: threading.Event,
        deadline: Optional[float],
        run_id: str,
    ) -> PromptOutcome:
        """Score one prompt and wrap the result or terminal error as an outcome."""
        extra = {"run_id": run_id, "prompt_index": index}
        try:
            score = self.vectorizer.score(
                subject, prompt, params,
                cancel_event=cancel_event,
                deadline=deadline,
                log_extra=extra,
            )
        except DimError as e:
            logger.error(f"Prompt {index} failed: {e}", extra=extra)
            return PromptOutcome(
                index=index,
                prompt=prompt,
                success=False,
                attempts=getattr(e, "attempts", 0),
                error=e,
            )
        except Exception as e:
            logger.exception(f"Prompt {index} failed with unexpected error: {e}", extra=extra)
            return PromptOutcome(index=index, prompt=prompt, success=False, error=e)

        logger.info(f"Prompt {index} finished vectorization", extra=extra)
        return PromptOutcome(
            index=index,
            prompt=prompt,
            success=True,
            value=score.value,
            attempts=score.attempts,
        )


def vectorize_concurrently(
    vector: Vector,
    prompts: Sequence[str],
    gateway: ChatGateway,
    params: ModelParameters,
    config: Optional[DispatcherConfig] = None,
    cancel_event: Optional[threading.Event] = None,
) -> DispatchResult:
    """
    Vectorize an image or text subject with one prompt per dimension.

    Raises:
        PartialVectorError: If any prompt failed; the vector is unchanged
    """
    dispatcher = ConcurrentDispatcher(gateway, config)
    return dispatcher.vectorize(vector, prompts, params, cancel_event=cancel_event)
