"""YAML configuration loader with environment variable overrides.

# ─── CONFIGURATION HIERARCHY ──────────────────────────────────────────
#
#   1. config/config.yaml  -- static defaults checked into the repo
#                             (prompt template, console summary format)
#   2. .env file           -- local developer overrides
#   3. Environment vars    -- set at deploy time
#
# load_config() reads the YAML first, then deep-merges the values that
# Settings resolved from .env / the environment on top of it:
#   base      = {"answer": {"top_k": 3, "system_prompt": "..."}}
#   overrides = {"answer": {"top_k": 5}}
#   result    = {"answer": {"top_k": 5, "system_prompt": "..."}}
# ──────────────────────────────────────────────────────────────────────
"""

from pathlib import Path

import yaml

from tenant_rag.config.settings import Settings

DEFAULT_SYSTEM_PROMPT = (
    "You are a AI journalist that answers questions based on the provided context"
)

_DEFAULTS: dict = {
    "answer": {
        "system_prompt": DEFAULT_SYSTEM_PROMPT,
        "context_separator": "\n\n",
        "preview_chars": 100,
    },
}


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Environment variables (via Settings) override YAML values where keys overlap.

    Args:
        path: Path to the YAML configuration file.
        settings: Already-resolved settings; a fresh ``Settings()`` otherwise.

    Returns:
        Fully resolved configuration dictionary.
    """
    config: dict = {}
    _deep_merge(config, _DEFAULTS)

    config_path = Path(path)
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            _deep_merge(config, yaml.safe_load(f) or {})

    settings = settings or Settings()
    env_overrides = {
        "app": {
            "host": settings.app_host,
            "port": settings.app_port,
            "env": settings.app_env,
        },
        "index": {
            "backend": settings.vector_store_backend,
            "name": settings.index_name,
            "dimension": settings.embedding_dimension,
            "metric": settings.index_metric,
        },
        "chunking": {
            "max_size": settings.chunk_size,
        },
        "answer": {
            "top_k": settings.answer_top_k,
        },
        "logging": {
            "level": settings.log_level,
        },
    }

    _deep_merge(config, env_overrides)
    return config


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        elif isinstance(value, dict):
            base[key] = {}
            _deep_merge(base[key], value)
        else:
            base[key] = value
