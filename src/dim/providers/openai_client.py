"""
OpenAI-compatible chat-completion client.

Thin HTTP client for any server exposing ``/chat/completions`` in the OpenAI
format (OpenAI, Ollama's /v1 API, LM Studio, vLLM).
"""

import json
import logging
import os
from typing import Any, Dict, List, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from ..core.exceptions import DimConfigError, GatewayError
from ..core.types import ChatRequest, ChatResponse
from .base import ChatGateway


logger = logging.getLogger(__name__)

DEFAULT_BASE_URL_ENV = "OLLAMA_API_BASE"
API_KEY_ENV = "DIM_API_KEY"
DEFAULT_API_KEY = "lm-studio"


class OpenAICompatibleClient(ChatGateway):
    """
    HTTP client for OpenAI-compatible chat-completion endpoints.

    Each call opens its own connection, so one instance can be shared by all
    worker threads.

    Example:
        >>> client = OpenAICompatibleClient("http://localhost:11434/v1")
        >>> response = client.complete(request)
        >>> print(response.content)
    """

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = DEFAULT_API_KEY,
        timeout_seconds: int = 120,
        provider: str = "openai-compatible",
    ):
        """
        Initialize the client.

        Args:
            base_url: API root including the version segment (e.g. ``.../v1``)
            api_key: Bearer token; local servers accept any value
            timeout_seconds: Per-request socket timeout
            provider: Provider label used in errors and logs
        """
        if not base_url:
            raise DimConfigError("base_url is required for the chat gateway")
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout_seconds
        self.provider = provider

        logger.debug(
            f"Initialized OpenAICompatibleClient: base_url={self.base_url}, "
            f"timeout={self.timeout}"
        )

    @classmethod
    def from_env(
        cls,
        env_var_name: Optional[str] = None,
        timeout_seconds: int = 120,
    ) -> "OpenAICompatibleClient":
        """
        Create a client from environment variables.

        Args:
            env_var_name: Variable holding the base URL (default: OLLAMA_API_BASE)
            timeout_seconds: Per-request socket timeout

        Raises:
            DimConfigError: If the base URL variable is unset
        """
        var_name = env_var_name or DEFAULT_BASE_URL_ENV
        base_url = os.environ.get(var_name)
        if not base_url:
            raise DimConfigError(f"Environment variable {var_name} is not set")

        logger.info(f"Using {base_url} as LLM API endpoint")
        return cls(
            base_url=base_url,
            api_key=os.environ.get(API_KEY_ENV, DEFAULT_API_KEY),
            timeout_seconds=timeout_seconds,
        )

    def complete(self, request: ChatRequest) -> ChatResponse:
        url = f"{self.base_url}/chat/completions"
        result = self._make_request(url, request.to_payload())
        return self._parse_response(result)

    def health_check(self) -> bool:
        """
        Check if the endpoint is reachable.

        Returns:
            True if ``/models`` answers with HTTP 200, False otherwise
        """
        try:
            request = Request(f"{self.base_url}/models", headers=self._headers(), method="GET")
            with urlopen(request, timeout=10) as response:
                return response.status == 200
        except (HTTPError, URLError, OSError) as e:
            logger.warning(f"Health check failed: {e}")
            return False

    def list_models(self) -> List[str]:
        """
        Return the model ids advertised by ``/models``.

        Raises:
            GatewayError: If the request fails
        """
        url = f"{self.base_url}/models"
        request = Request(url, headers=self._headers(), method="GET")
        try:
            with urlopen(request, timeout=self.timeout) as response:
                data = json.loads(response.read().decode("utf-8"))
        except (HTTPError, URLError, OSError, json.JSONDecodeError) as e:
            raise GatewayError(f"Failed to list models: {e}", provider=self.provider)
        return [m.get("id") for m in data.get("data", []) if m.get("id")]

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _make_request(self, url: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        POST a JSON payload and return the decoded JSON reply.

        Raises:
            GatewayError: If the request fails
        """
        try:
            data = json.dumps(payload).encode("utf-8")
            request = Request(url, data=data, headers=self._headers(), method="POST")

            logger.debug(f"Making request to {url}")

            with urlopen(request, timeout=self.timeout) as response:
                return json.loads(response.read().decode("utf-8"))

        except HTTPError as e:
            error_body = e.read().decode("utf-8") if e.fp else str(e)
            raise GatewayError(
                f"Chat API error: {e.code} - {error_body}",
                provider=self.provider,
                status_code=e.code,
            )
        except URLError as e:
            raise GatewayError(
                f"Failed to connect to {self.base_url}: {e}",
                provider=self.provider,
            )
        except json.JSONDecodeError as e:
            raise GatewayError(
                f"Invalid JSON response from chat API: {e}",
                provider=self.provider,
            )
        except (OSError, TypeError, ValueError) as e:
            raise GatewayError(
                f"Unexpected error calling chat API: {e}",
                provider=self.provider,
            )

    def _parse_response(self, result: Dict[str, Any]) -> ChatResponse:
        """Parse an OpenAI chat-completion document into a ChatResponse."""
        if not isinstance(result, dict):
            raise GatewayError("Chat API returned a non-object body", provider=self.provider)

        choices = result.get("choices") or []
        if not isinstance(choices, list):
            raise GatewayError("Chat API returned non-list choices", provider=self.provider)
        content = None
        if choices:
            choice = choices[0]
            if not isinstance(choice, dict):
                raise GatewayError("Chat API returned a malformed choice", provider=self.provider)
            message = choice.get("message") or {}
            if not isinstance(message, dict):
                raise GatewayError("Chat API returned a malformed message", provider=self.provider)
            content = message.get("content")
        usage = result.get("usage")
        if not isinstance(usage, dict):
            usage = {}

        return ChatResponse(
            content=content,
            model=result.get("model"),
            raw_response=result,
            prompt_tokens=usage.get("prompt_tokens"),
            completion_tokens=usage.get("completion_tokens"),
            total_tokens=usage.get("total_tokens"),
        )
