"""
Configuration loader for dim.
"""

import copy
import logging
import os
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import yaml

from ..core.exceptions import DimConfigError
from ..core.types import ModelParameters
from ..providers.openai_client import (
    API_KEY_ENV,
    DEFAULT_API_KEY,
    DEFAULT_BASE_URL_ENV,
    OpenAICompatibleClient,
)
from ..runners.dispatcher import DispatcherConfig
from ..utils.retry import RetryPolicy


logger = logging.getLogger(__name__)


DEFAULT_CONFIG: Dict[str, Any] = {
    "gateway": {
        "base_url": "http://localhost:11434/v1",
        "api_key": DEFAULT_API_KEY,
        "timeout_seconds": 120,
    },
    "model": {
        "name": "minicpm-v",
        "temperature": 0.0,
        "seed": None,
    },
    "dispatcher": {
        "max_workers": 4,
        "deadline_seconds": None,
        "extract_embedded_json": False,
    },
    "retry": {
        "max_attempts": 5,
        "initial_delay_ms": 250.0,
        "max_delay_ms": 5000.0,
        "backoff_multiplier": 2.0,
        "jitter": True,
    },
}

# (env var, section, key, converter)
ENV_OVERRIDES = (
    (DEFAULT_BASE_URL_ENV, "gateway", "base_url", str),
    (API_KEY_ENV, "gateway", "api_key", str),
    ("DIM_TIMEOUT_SECONDS", "gateway", "timeout_seconds", int),
    ("DIM_MODEL", "model", "name", str),
    ("DIM_TEMPERATURE", "model", "temperature", float),
    ("DIM_SEED", "model", "seed", int),
    ("DIM_MAX_WORKERS", "dispatcher", "max_workers", int),
    ("DIM_DEADLINE_SECONDS", "dispatcher", "deadline_seconds", float),
    ("DIM_MAX_ATTEMPTS", "retry", "max_attempts", int),
)


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``."""
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class DimConfig:
    """
    Configuration for dim.

    Starts from built-in defaults, merges an optional YAML file, then applies
    environment variable overrides.
    """

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize configuration.

        Args:
            config_path: Path to YAML config file (optional)
        """
        self.config_path = Path(config_path) if config_path else None
        loaded = self._load_config() if self.config_path else {}
        self.config = _merge(DEFAULT_CONFIG, loaded)
        self._apply_env_overrides()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        if not self.config_path.exists():
            raise DimConfigError(f"Config file not found: {self.config_path}")

        logger.info(f"Loading config from: {self.config_path}")

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise DimConfigError(f"Invalid YAML in {self.config_path}: {e}") from e

        if config is not None and not isinstance(config, dict):
            raise DimConfigError(f"Config root must be a mapping: {self.config_path}")
        return config or {}

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides to loaded config."""
        for env_name, section, key, convert in ENV_OVERRIDES:
            raw = os.environ.get(env_name)
            if raw is None or raw == "":
                continue
            self.config.setdefault(section, {})[key] = self._convert(env_name, raw, convert)

    @staticmethod
    def _convert(name: str, raw: str, convert: Callable[[str], Any]) -> Any:
        try:
            return convert(raw)
        except ValueError as e:
            raise DimConfigError(f"Invalid value for {name}: {raw!r}") from e

    def get_gateway_config(self) -> Dict[str, Any]:
        """Get gateway configuration."""
        return self.config.get("gateway", {})

    def get_model_config(self) -> Dict[str, Any]:
        """Get model configuration."""
        return self.config.get("model", {})

    def get_dispatcher_config(self) -> Dict[str, Any]:
        """Get dispatcher configuration."""
        return self.config.get("dispatcher", {})

    def get_retry_config(self) -> Dict[str, Any]:
        """Get retry configuration."""
        return self.config.get("retry", {})

    def model_parameters(self) -> ModelParameters:
        """
        Build ModelParameters from the model section.

        Raises:
            DimConfigError: If the values are invalid
        """
        model = self.get_model_config()
        params = ModelParameters(
            model=model.get("name") or "",
            temperature=model.get("temperature", 0.0),
            seed=model.get("seed"),
        )
        errors = params.validate()
        if errors:
            raise DimConfigError(f"Invalid model config: {'; '.join(errors)}")
        return params

    def retry_policy(self) -> RetryPolicy:
        """Build the per-prompt RetryPolicy."""
        retry = self.get_retry_config()
        try:
            return RetryPolicy(
                max_attempts=retry.get("max_attempts"),
                initial_delay_ms=float(retry.get("initial_delay_ms", 250.0)),
                max_delay_ms=float(retry.get("max_delay_ms", 5000.0)),
                backoff_multiplier=float(retry.get("backoff_multiplier", 2.0)),
                jitter=bool(retry.get("jitter", True)),
            )
        except (TypeError, ValueError) as e:
            raise DimConfigError(f"Invalid retry config: {e}") from e

    def dispatcher_config(self) -> DispatcherConfig:
        """Build the DispatcherConfig, including the retry policy."""
        dispatcher = self.get_dispatcher_config()
        try:
            return DispatcherConfig(
                max_workers=int(dispatcher.get("max_workers", 4)),
                retry_policy=self.retry_policy(),
                deadline_seconds=dispatcher.get("deadline_seconds"),
                extract_embedded_json=bool(dispatcher.get("extract_embedded_json", False)),
            )
        except (TypeError, ValueError) as e:
            raise DimConfigError(f"Invalid dispatcher config: {e}") from e

    def gateway(self) -> OpenAICompatibleClient:
        """Build the chat gateway client."""
        gateway = self.get_gateway_config()
        return OpenAICompatibleClient(
            base_url=gateway.get("base_url") or "",
            api_key=gateway.get("api_key"),
            timeout_seconds=int(gateway.get("timeout_seconds", 120)),
        )
