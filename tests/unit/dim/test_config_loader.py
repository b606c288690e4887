"""
Unit tests for DimConfig.
"""

import pytest

from dim.config import DimConfig
from dim.core.exceptions import DimConfigError
from dim.providers.openai_client import OpenAICompatibleClient


ENV_VARS = (
    "OLLAMA_API_BASE",
    "DIM_API_KEY",
    "DIM_TIMEOUT_SECONDS",
    "DIM_MODEL",
    "DIM_TEMPERATURE",
    "DIM_SEED",
    "DIM_MAX_WORKERS",
    "DIM_DEADLINE_SECONDS",
    "DIM_MAX_ATTEMPTS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the caller's environment out of these tests."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestDefaults:
    """Tests for built-in defaults."""

    def test_defaults_without_file(self):
        config = DimConfig()

        params = config.model_parameters()
        assert params.model == "minicpm-v"
        assert params.temperature == 0.0
        assert params.seed is None

        dispatcher = config.dispatcher_config()
        assert dispatcher.max_workers == 4
        assert dispatcher.retry_policy.max_attempts == 5
        assert dispatcher.deadline_seconds is None

    def test_gateway(self):
        gateway = DimConfig().gateway()

        assert isinstance(gateway, OpenAICompatibleClient)
        assert gateway.base_url == "http://localhost:11434/v1"
        assert gateway.timeout == 120


class TestYamlLoading:
    """Tests for YAML file handling."""

    def test_file_values_merge_over_defaults(self, tmp_path):
        path = tmp_path / "dim.yaml"
        path.write_text(
            "model:\n"
            "  name: llama3.2\n"
            "  seed: 42\n"
            "retry:\n"
            "  max_attempts: 2\n",
            encoding="utf-8",
        )

        config = DimConfig(path)

        params = config.model_parameters()
        assert params.model == "llama3.2"
        assert params.seed == 42
        assert params.temperature == 0.0
        assert config.retry_policy().max_attempts == 2
        assert config.retry_policy().initial_delay_ms == 250.0

    def test_null_max_attempts_is_unbounded(self, tmp_path):
        path = tmp_path / "dim.yaml"
        path.write_text("retry:\n  max_attempts: null\n", encoding="utf-8")

        assert DimConfig(path).retry_policy().max_attempts is None

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")

        assert DimConfig(path).get_dispatcher_config()["max_workers"] == 4

    def test_missing_file(self, tmp_path):
        with pytest.raises(DimConfigError):
            DimConfig(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("model: [unclosed\n", encoding="utf-8")

        with pytest.raises(DimConfigError):
            DimConfig(path)

    def test_non_mapping_root(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(DimConfigError):
            DimConfig(path)


class TestEnvOverrides:
    """Tests for environment variable overrides."""

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / "dim.yaml"
        path.write_text("model:\n  name: llama3.2\n", encoding="utf-8")
        monkeypatch.setenv("DIM_MODEL", "qwen2.5-vl")
        monkeypatch.setenv("DIM_TEMPERATURE", "0.7")
        monkeypatch.setenv("DIM_SEED", "9")
        monkeypatch.setenv("DIM_MAX_WORKERS", "12")
        monkeypatch.setenv("OLLAMA_API_BASE", "http://gpu:11434/v1")

        config = DimConfig(path)

        params = config.model_parameters()
        assert params.model == "qwen2.5-vl"
        assert params.temperature == 0.7
        assert params.seed == 9
        assert config.dispatcher_config().max_workers == 12
        assert config.gateway().base_url == "http://gpu:11434/v1"

    def test_invalid_env_value(self, monkeypatch):
        monkeypatch.setenv("DIM_MAX_WORKERS", "many")

        with pytest.raises(DimConfigError):
            DimConfig()

    def test_empty_env_value_is_ignored(self, monkeypatch):
        monkeypatch.setenv("DIM_MODEL", "")

        assert DimConfig().model_parameters().model == "minicpm-v"


class TestValidation:
    """Tests for invalid configuration values."""

    def test_invalid_temperature(self, monkeypatch):
        monkeypatch.setenv("DIM_TEMPERATURE", "5")

        with pytest.raises(DimConfigError):
            DimConfig().model_parameters()

    def test_invalid_max_attempts(self, monkeypatch):
        monkeypatch.setenv("DIM_MAX_ATTEMPTS", "0")

        with pytest.raises(DimConfigError):
            DimConfig().dispatcher_config()

    def test_invalid_max_workers(self, monkeypatch):
        monkeypatch.setenv("DIM_MAX_WORKERS", "0")

        with pytest.raises(DimConfigError):
            DimConfig().dispatcher_config()
