"""Generation backend abstraction and registry."""

from knowledge_assistant.chat.backends.base import Backend, BackendRegistry

# Importing the concrete modules registers them via @BackendRegistry.register.
from knowledge_assistant.chat.backends import anthropic_backend, litellm_backend, openai_backend  # noqa: E402, F401
from knowledge_assistant.config import BackendConfig

__all__ = ["Backend", "BackendRegistry", "create_backend"]


def create_backend(config: BackendConfig) -> Backend:
    """Instantiate the backend named by ``config.type``.

    Parameters
    ----------
    config : BackendConfig
        Validated backend settings. ``config.extra`` is forwarded as-is.

    Returns
    -------
    Backend

    Raises
    ------
    KeyError
        If ``config.type`` is not registered.
    """
    return BackendRegistry.create(
        config.type,
        model=config.model,
        api_key=config.api_key or None,
        base_url=config.base_url or None,
        max_tokens=config.max_tokens,
        connect_timeout=config.connect_timeout,
        timeout=config.timeout,
        **config.extra,
    )
