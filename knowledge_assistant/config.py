"""Unified configuration for the knowledge assistant."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

DEFAULT_MODEL = "gpt-4.1-mini"
DEFAULT_STORE_PATH = Path.home() / ".halo" / "plugins" / "ai-assistant" / "knowledge.json"


@dataclass
class BackendConfig:
    """Generation backend configuration.

    Parameters
    ----------
    type : str
        Registered backend name (``"openai"``, ``"anthropic"``, ``"litellm"``).
    model : str
        Model identifier passed to the backend.
    api_key : str
        Credential. Empty means no backend call is attempted.
    base_url : str
        Service root URL. Empty uses the provider default.
    temperature : float
        Sampling temperature.
    max_tokens : int
        Maximum tokens per completion.
    connect_timeout : float
        Seconds allowed to establish the connection.
    timeout : float
        Seconds allowed for the whole call.
    extra : dict
        Additional kwargs forwarded to the backend constructor.
    """

    type: str = "openai"
    model: str = DEFAULT_MODEL
    api_key: str = field(default="", repr=False)
    base_url: str = ""
    temperature: float = 0.2
    max_tokens: int = 1024
    connect_timeout: float = 10.0
    timeout: float = 60.0
    extra: dict = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.model or not isinstance(self.model, str):
            msg = f"model must be a non-empty string, got {self.model!r}"
            raise ValueError(msg)
        if self.temperature < 0:
            msg = f"temperature must be >= 0, got {self.temperature}"
            raise ValueError(msg)
        if self.max_tokens <= 0:
            msg = f"max_tokens must be > 0, got {self.max_tokens}"
            raise ValueError(msg)
        if self.connect_timeout <= 0 or self.timeout <= 0:
            msg = f"timeouts must be > 0, got connect={self.connect_timeout} total={self.timeout}"
            raise ValueError(msg)
        self.base_url = (self.base_url or "").strip().rstrip("/")
        self.api_key = (self.api_key or "").strip()

    @property
    def has_credential(self) -> bool:
        return bool(self.api_key)


@dataclass
class StoreConfig:
    """Knowledge store persistence settings.

    Parameters
    ----------
    path : Path
        Location of the JSON snapshot.
    save_attempts : int
        Number of write attempts before a save is reported as failed.
    """

    path: Path = DEFAULT_STORE_PATH
    save_attempts: int = 3

    def __post_init__(self) -> None:
        self.path = Path(self.path).expanduser()
        if self.save_attempts <= 0:
            msg = f"save_attempts must be > 0, got {self.save_attempts}"
            raise ValueError(msg)


@dataclass
class PromptConfig:
    """Prompt construction settings.

    Parameters
    ----------
    language : str
        Language the assistant is instructed to answer in.
    default_top_k : int
        Number of sources retrieved when a request does not specify one.
    template : str
        Optional path to a replacement prompt YAML. Empty uses the built-in.
    """

    language: str = "English"
    default_top_k: int = 5
    template: str = ""

    def __post_init__(self) -> None:
        if self.default_top_k <= 0:
            msg = f"default_top_k must be > 0, got {self.default_top_k}"
            raise ValueError(msg)


@dataclass
class AssistantConfig:
    """Top-level configuration.

    Parameters
    ----------
    backend : BackendConfig
        Generation backend settings.
    store : StoreConfig
        Snapshot persistence settings.
    prompt : PromptConfig
        Prompt construction settings.
    """

    backend: BackendConfig = field(default_factory=BackendConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    prompt: PromptConfig = field(default_factory=PromptConfig)


_BACKEND_KEYS = {
    "type",
    "model",
    "api_key",
    "base_url",
    "temperature",
    "max_tokens",
    "connect_timeout",
    "timeout",
}


def load_config(source: AssistantConfig | str | Path | dict[str, Any] | None = None) -> AssistantConfig:
    """Load an AssistantConfig from a YAML file, dict, or environment variables.

    Environment variables take precedence over file and dict values:
    ``AI_ASSISTANT_BACKEND``, ``AI_ASSISTANT_API_KEY``, ``AI_ASSISTANT_BASE_URL``,
    ``AI_ASSISTANT_MODEL``, ``AI_ASSISTANT_TEMPERATURE`` and ``AI_ASSISTANT_KB_PATH``.

    Parameters
    ----------
    source : AssistantConfig | str | Path | dict | None
        An existing config (returned unchanged), a path to a YAML file, a raw
        dict, or ``None`` to use only environment variable overrides on defaults.

    Returns
    -------
    AssistantConfig

    Raises
    ------
    ValueError
        If a value fails validation.
    """
    if isinstance(source, AssistantConfig):
        return source

    raw: dict[str, Any] = {}
    if isinstance(source, dict):
        raw = source
    elif source is not None:
        path = Path(source)
        if path.is_file():
            raw = _load_yaml(path)

    backend_raw = raw.get("backend") or {}
    store_raw = raw.get("store") or {}
    prompt_raw = raw.get("prompt") or {}

    backend = BackendConfig(
        type=_env("AI_ASSISTANT_BACKEND", backend_raw.get("type", "openai")),
        model=_env("AI_ASSISTANT_MODEL", backend_raw.get("model", DEFAULT_MODEL)),
        api_key=_env("AI_ASSISTANT_API_KEY", backend_raw.get("api_key", "")),
        base_url=_env("AI_ASSISTANT_BASE_URL", backend_raw.get("base_url", "")),
        temperature=float(_env("AI_ASSISTANT_TEMPERATURE", backend_raw.get("temperature", 0.2))),
        max_tokens=int(backend_raw.get("max_tokens", 1024)),
        connect_timeout=float(backend_raw.get("connect_timeout", 10.0)),
        timeout=float(backend_raw.get("timeout", 60.0)),
        extra={k: v for k, v in backend_raw.items() if k not in _BACKEND_KEYS},
    )

    store = StoreConfig(
        path=Path(_env("AI_ASSISTANT_KB_PATH", store_raw.get("path", DEFAULT_STORE_PATH))),
        save_attempts=int(store_raw.get("save_attempts", 3)),
    )

    prompt = PromptConfig(
        language=prompt_raw.get("language", "English"),
        default_top_k=int(prompt_raw.get("default_top_k", 5)),
        template=prompt_raw.get("template", ""),
    )

    return AssistantConfig(backend=backend, store=store, prompt=prompt)


def _env(name: str, default: Any) -> Any:
    """Return the stripped env var *name* if set and non-blank, else *default*."""
    value = os.environ.get(name, "").strip()
    return value if value else default


def _load_yaml(path: Path) -> dict[str, Any]:
    """Load YAML file using PyYAML."""
    with open(path, encoding="utf-8") as fh:
        return yaml.safe_load(fh) or {}
