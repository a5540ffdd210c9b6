"""Configuration loading for providers and game-type profiles."""

import os
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .errors import ConfigError
from .schema import GameTypeProfile

PROVIDERS = ("fake", "openai", "ollama")


@dataclass
class AIConfig:
    """
    Provider configuration.

    endpoint is the OpenAI-compatible base URL; empty means the provider
    default (api.openai.com, or localhost:11434 for Ollama).
    """
    provider: str = "fake"
    model: str = "gpt-4o-mini"
    endpoint: str = ""
    api_key: str = ""
    system_prompt_hint: str = ""
    max_retries: int = 5
    temperature: float = 1.0

    def __post_init__(self):
        self.provider = (self.provider or "fake").lower()
        if self.provider not in PROVIDERS:
            raise ConfigError(f"Unknown provider '{self.provider}'. Must be one of {list(PROVIDERS)}")
        if self.max_retries < 1:
            raise ConfigError(f"max_retries must be at least 1, got {self.max_retries}")

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        if data["api_key"]:
            data["api_key"] = "*" * max(0, len(data["api_key"]) - 4) + data["api_key"][-4:]
        return data


def _read_yaml(path: str) -> Dict[str, Any]:
    file_path = Path(path)
    if not file_path.exists():
        raise ConfigError(f"Config file not found: {path}")
    with open(file_path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}")
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def load_ai_config(path: Optional[str] = None) -> AIConfig:
    """Load an AIConfig from YAML; OPENAI_API_KEY fills a missing api_key."""
    data = _read_yaml(path) if path else {}
    fields = set(AIConfig.__dataclass_fields__)
    unknown = set(data) - fields
    if unknown:
        raise ConfigError(f"Unknown AI config keys: {sorted(unknown)}")

    config = AIConfig(**data)
    if not config.api_key:
        config.api_key = os.getenv("OPENAI_API_KEY", "")
    return config


def load_profile(path: str) -> GameTypeProfile:
    """Load a GameTypeProfile from YAML (camelCase keys, as in to_dict)."""
    data = _read_yaml(path)
    try:
        return GameTypeProfile.from_dict(data)
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigError(f"Invalid profile {path}: {e}")
