"""Abstract backend protocol and registry for text-generation providers."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from knowledge_assistant.errors import BackendUnavailable

logger = logging.getLogger(__name__)


class Backend(ABC):
    """Generation backend that can produce chat completions.

    Subclasses must set ``name`` and implement ``complete``. Every failure to
    produce usable text must surface as :class:`BackendUnavailable`.
    """

    name: str = ""

    @abstractmethod
    def complete(
        self,
        messages: list[dict[str, str]],
        *,
        model: str | None = None,
        temperature: float = 0.2,
        max_tokens: int | None = None,
    ) -> str:
        """Return the assistant's text response.

        Parameters
        ----------
        messages : list[dict[str, str]]
            Chat messages (``role`` / ``content`` dicts).
        model : str | None
            Override the default model for this call.
        temperature : float
            Sampling temperature.
        max_tokens : int | None
            Maximum tokens in the response. ``None`` uses the backend default.

        Returns
        -------
        str
            Non-blank completion text.

        Raises
        ------
        BackendUnavailable
            If no usable text could be obtained.
        """


class BackendRegistry:
    """Discover and instantiate registered generation backends."""

    _backends: dict[str, type[Backend]] = {}

    @classmethod
    def register(cls, name: str):
        """Class decorator that registers a backend under *name*.

        Parameters
        ----------
        name : str
            Lookup key used in configuration files.

        Returns
        -------
        Callable
            The original class, unmodified.

        Raises
        ------
        ValueError
            If *name* is already taken by a different class.
        """

        def decorator(klass: type[Backend]) -> type[Backend]:
            existing = cls._backends.get(name)
            if existing is not None and existing is not klass:
                msg = f"Backend {name!r} is already registered to {existing.__qualname__}"
                raise ValueError(msg)
            cls._backends[name] = klass
            return klass

        return decorator

    @classmethod
    def create(cls, name: str, **kwargs: Any) -> Backend:
        """Instantiate a registered backend.

        Parameters
        ----------
        name : str
            Registered backend name.
        **kwargs
            Forwarded to the backend constructor. ``api_key`` is never logged,
            only whether one was given.

        Returns
        -------
        Backend

        Raises
        ------
        KeyError
            If *name* is not registered.
        """
        if name not in cls._backends:
            available = ", ".join(sorted(cls._backends)) or "(none)"
            msg = f"Unknown backend {name!r}. Available: {available}"
            raise KeyError(msg)
        logger.debug(
            "Creating %s backend model=%s credential=%s", name, kwargs.get("model"), bool(kwargs.get("api_key"))
        )
        return cls._backends[name](**kwargs)

    @classmethod
    def available(cls) -> list[str]:
        """Return sorted list of registered backend names."""
        return sorted(cls._backends)


def completion_text(response: Any, backend: str) -> str:
    """Extract ``choices[0].message.content`` from an OpenAI-shaped response.

    Parameters
    ----------
    response : Any
        Chat completion object returned by the provider SDK.
    backend : str
        Backend name used in error messages.

    Returns
    -------
    str

    Raises
    ------
    BackendUnavailable
        If there are no choices, no message content, or the content is blank.
    """
    choices = getattr(response, "choices", None)
    if not choices:
        msg = f"{backend} response has no choices"
        raise BackendUnavailable(msg)
    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None)
    return require_text(content, backend)


def require_text(content: Any, backend: str) -> str:
    """Return *content* if it is a non-blank string, else raise BackendUnavailable."""
    if not isinstance(content, str) or not content.strip():
        msg = f"{backend} returned no generated text"
        raise BackendUnavailable(msg)
    return content
