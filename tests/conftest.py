"""
Shared test fixtures and configuration for pytest.
"""

import json
import logging
import sys
import threading
import time
from pathlib import Path
from typing import Callable, List, Optional, Union

import pytest

# Add src directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from dim.core.types import ChatRequest, ChatResponse  # noqa: E402
from dim.providers.base import ChatGateway  # noqa: E402
from dim.utils.retry import RetryPolicy  # noqa: E402


logger = logging.getLogger(__name__)


# ============================================================================
# Stub gateway
# ============================================================================

def prompt_of(request: ChatRequest) -> str:
    """Recover the prompt text from a request built by the vectorizer."""
    content = request.messages[0]["content"]
    if isinstance(content, list):
        return content[0]["text"]
    return content.split("\n\nText to analyze: ", 1)[0]


Reply = Union[str, None, Exception]


class StubGateway(ChatGateway):
    """
    Gateway that answers from a handler function instead of the network.

    The handler receives (prompt, call_number_for_that_prompt) and returns
    reply content, None for an empty reply, or an exception to raise.
    """

    def __init__(self, handler: Callable[[str, int], Reply], delay: Optional[Callable[[str], float]] = None):
        self.handler = handler
        self.delay = delay
        self.requests: List[ChatRequest] = []
        self.calls_by_prompt = {}
        self.completion_order: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    def complete(self, request: ChatRequest) -> ChatResponse:
        prompt = prompt_of(request)
        with self._lock:
            self.requests.append(request)
            count = self.calls_by_prompt.get(prompt, 0) + 1
            self.calls_by_prompt[prompt] = count
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay is not None:
                time.sleep(self.delay(prompt))
            reply = self.handler(prompt, count)
        finally:
            with self._lock:
                self.in_flight -= 1
                self.completion_order.append(prompt)
        if isinstance(reply, Exception):
            raise reply
        return ChatResponse(content=reply, model=request.model)


def constant_reply(payload) -> Callable[[str, int], str]:
    """Handler that always returns the same JSON payload."""
    content = json.dumps(payload)
    return lambda prompt, count: content


# ============================================================================
# Pytest hooks
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "integration: Integration tests (requires a live LLM endpoint)")
    config.addinivalue_line("markers", "slow: Tests that take a long time to run")


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def fast_retry() -> RetryPolicy:
    """Retry policy without backoff delays."""
    return RetryPolicy(max_attempts=5, initial_delay_ms=0.0, max_delay_ms=0.0, jitter=False)


@pytest.fixture
def stub_gateway_factory():
    """Factory fixture building StubGateway instances."""
    return StubGateway
