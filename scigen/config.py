from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from .errors import ConfigError, MissingCredentialError

DEFAULT_API_URL = "https://api.groq.com/openai/v1/chat/completions"
DEFAULT_MODEL = "openai/gpt-oss-120b"


def _env_number(name: str, default: str, cast, kind: str):
    raw = os.getenv(name, default)
    try:
        return cast(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be {kind}, got {raw!r}") from e


def _env_float(name: str, default: str) -> float:
    return _env_number(name, default, float, "a number")


def _env_int(name: str, default: str) -> int:
    return _env_number(name, default, int, "an integer")


@dataclass
class ProviderConfig:
    """Question-generation endpoint settings.

    Defaults target Groq's OpenAI-compatible chat completions API; every
    field can be overridden through ``SCIGEN_*`` environment variables.
    """

    api_url: str = field(default_factory=lambda: os.getenv("SCIGEN_API_URL", DEFAULT_API_URL))
    model: str = field(default_factory=lambda: os.getenv("SCIGEN_MODEL", DEFAULT_MODEL))
    temperature: float = field(default_factory=lambda: _env_float("SCIGEN_TEMPERATURE", "0.7"))
    max_tokens: int = field(default_factory=lambda: _env_int("SCIGEN_MAX_TOKENS", "800"))
    timeout: float = field(default_factory=lambda: _env_float("SCIGEN_TIMEOUT", "30"))
    api_key_env: str = "GROQ_API_KEY"
    api_key: Optional[str] = None  # bundled key; takes precedence over the environment


@dataclass
class LoggingConfig:
    level: str = field(default_factory=lambda: os.getenv("SCIGEN_LOG_LEVEL", "INFO"))
    log_dir: str = "logs"
    filename: str = "scigen.log"
    structured: bool = False

    def file_path(self) -> Path:
        return Path(self.log_dir) / self.filename


@dataclass
class SessionConfig:
    topics: List[str] = field(default_factory=lambda: ["biology", "chemistry", "physics"])
    difficulty: int = 5
    seed: Optional[int] = None


@dataclass
class AppConfig:
    provider: ProviderConfig = field(default_factory=ProviderConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    session: SessionConfig = field(default_factory=SessionConfig)

    @staticmethod
    def from_dict(payload: Mapping[str, Any]) -> "AppConfig":
        try:
            return AppConfig(
                provider=ProviderConfig(**(payload.get("provider") or {})),
                logging=LoggingConfig(**(payload.get("logging") or {})),
                session=SessionConfig(**(payload.get("session") or {})),
            )
        except TypeError as e:
            raise ConfigError(f"Unknown configuration key: {e}") from e

    @staticmethod
    def from_file(path: str | Path) -> "AppConfig":
        """Load configuration from a ``.json``, ``.yaml`` or ``.yml`` file."""
        p = Path(path)
        if not p.is_file():
            raise FileNotFoundError(f"Config file not found: {p}")
        suffix = p.suffix.lower()
        try:
            with open(p, "r", encoding="utf-8") as f:
                if suffix == ".json":
                    payload = json.load(f)
                elif suffix in {".yaml", ".yml"}:
                    payload = yaml.safe_load(f) or {}
                else:
                    raise ConfigError(f"Expected .json, .yaml or .yml config, got: {p.suffix}")
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigError(f"Invalid config format in '{p}': {e}") from e
        if not isinstance(payload, dict):
            raise ConfigError(f"Config root must be a mapping, got {type(payload).__name__}")
        return AppConfig.from_dict(payload)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "provider": asdict(self.provider),
            "logging": asdict(self.logging),
            "session": asdict(self.session),
        }

    def to_json(self, path: str | Path) -> None:
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        with open(p, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)


def default_app_config() -> AppConfig:
    return AppConfig()


def resolve_api_key(
    provider: ProviderConfig, environ: Optional[Mapping[str, str]] = None
) -> str:
    """Return the API key from the bundled config, falling back to the environment.

    Raises:
        MissingCredentialError: If neither source provides a non-empty key
    """
    if provider.api_key and provider.api_key.strip():
        return provider.api_key.strip()
    env = os.environ if environ is None else environ
    key = (env.get(provider.api_key_env) or "").strip()
    if not key:
        raise MissingCredentialError(provider.api_key_env)
    return key
