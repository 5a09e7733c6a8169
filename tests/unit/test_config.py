"""Unit tests for Settings and the YAML config loader."""

from __future__ import annotations

from pathlib import Path

import pytest

from tenant_rag.config.loader import DEFAULT_SYSTEM_PROMPT, load_config
from tenant_rag.config.settings import Settings
from tests.conftest import make_settings


class TestSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for var in ("INDEX_NAME", "EMBEDDING_DIMENSION", "APP_PORT", "CHUNK_SIZE"):
            monkeypatch.delenv(var, raising=False)
        settings = Settings(_env_file=None)
        assert settings.index_name == "rag-docs-llama"
        assert settings.embedding_dimension == 4096
        assert settings.app_port == 3000
        assert settings.chunk_size == 1000
        assert settings.answer_top_k == 3

    def test_environment_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("INDEX_NAME", "from-env")
        monkeypatch.setenv("EMBEDDING_DIMENSION", "768")
        settings = Settings(_env_file=None)
        assert settings.index_name == "from-env"
        assert settings.embedding_dimension == 768

    def test_readiness_policy(self) -> None:
        policy = make_settings().readiness_policy()
        assert policy.base_delay == 2.0
        assert policy.max_attempts == 10
        assert list(policy.delays()) == [2.0] * 9

    def test_http_retry_policy_defaults_to_single_attempt(self) -> None:
        assert make_settings().http_retry_policy().max_attempts == 1


class TestLoadConfig:
    def test_defaults_without_yaml(self, tmp_path: Path) -> None:
        config = load_config(str(tmp_path / "missing.yaml"), settings=make_settings())
        assert config["answer"]["system_prompt"] == DEFAULT_SYSTEM_PROMPT
        assert config["answer"]["context_separator"] == "\n\n"
        assert config["answer"]["top_k"] == 3

    def test_yaml_values_merge(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text('answer:\n  system_prompt: "Be terse."\n  preview_chars: 40\n', encoding="utf-8")

        config = load_config(str(path), settings=make_settings())

        assert config["answer"]["system_prompt"] == "Be terse."
        assert config["answer"]["preview_chars"] == 40
        assert config["answer"]["context_separator"] == "\n\n"

    def test_settings_override_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("index:\n  name: from-yaml\nanswer:\n  top_k: 9\n", encoding="utf-8")

        config = load_config(str(path), settings=make_settings(index_name="from-env", answer_top_k=4))

        assert config["index"]["name"] == "from-env"
        assert config["answer"]["top_k"] == 4

    def test_empty_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("", encoding="utf-8")
        config = load_config(str(path), settings=make_settings(chunk_size=500))
        assert config["chunking"]["max_size"] == 500

    def test_repo_config_file(self) -> None:
        repo_config = Path(__file__).resolve().parents[2] / "config" / "config.yaml"
        config = load_config(str(repo_config), settings=make_settings())
        assert config["answer"]["system_prompt"] == DEFAULT_SYSTEM_PROMPT
        assert config["answer"]["preview_chars"] == 100
