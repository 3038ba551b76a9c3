"""OpenAI-compatible chat completions backend."""

from __future__ import annotations

import logging
from typing import Any

import httpx
import openai

from knowledge_assistant.chat.backends.base import Backend, BackendRegistry, completion_text
from knowledge_assistant.errors import BackendUnavailable

logger = logging.getLogger(__name__)


def api_base(base_url: str | None) -> str | None:
    """Normalize a service root to the ``/v1`` API base the SDK expects.

    ``None`` or empty keeps the SDK default (``https://api.openai.com/v1``).
    """
    if not base_url:
        return None
    base_url = base_url.rstrip("/")
    if base_url.endswith("/v1"):
        return base_url
    return f"{base_url}/v1"


@BackendRegistry.register("openai")
class OpenAIBackend(Backend):
    """Backend powered by the OpenAI Chat Completions API or a compatible service.

    Parameters
    ----------
    model : str
        Default model identifier (e.g. ``"gpt-4.1-mini"``).
    api_key : str | None
        API key. Without one, every call raises :class:`BackendUnavailable`.
    base_url : str | None
        Service root such as ``https://api.openai.com``; ``/v1`` is appended
        when missing.
    max_tokens : int
        Default max tokens for completions.
    connect_timeout : float
        Seconds allowed to establish the connection.
    timeout : float
        Seconds allowed for the whole request.
    """

    name = "openai"

    def __init__(
        self,
        model: str = "gpt-4.1-mini",
        api_key: str | None = None,
        base_url: str | None = None,
        max_tokens: int = 1024,
        connect_timeout: float = 10.0,
        timeout: float = 60.0,
    ) -> None:
        self._model = model
        self._max_tokens = max_tokens
        self._client: openai.OpenAI | None = None
        if api_key:
            self._client = openai.OpenAI(
                api_key=api_key,
                base_url=api_base(base_url),
                timeout=httpx.Timeout(timeout, connect=connect_timeout),
                max_retries=0,
            )

    def complete(
        self,
        messages: list[dict[str, str]],
        *,
        model: str | None = None,
        temperature: float = 0.2,
        max_tokens: int | None = None,
    ) -> str:
        """Call the Chat Completions endpoint.

        Parameters
        ----------
        messages : list[dict[str, str]]
            Chat messages with ``role`` and ``content`` keys.
        model : str | None
            Override the default model.
        temperature : float
            Sampling temperature.
        max_tokens : int | None
            Maximum tokens in the response.

        Returns
        -------
        str

        Raises
        ------
        BackendUnavailable
            On a missing API key, any SDK error, or an empty completion.
        """
        if self._client is None:
            msg = "openai backend has no API key configured"
            raise BackendUnavailable(msg)

        kwargs: dict[str, Any] = {
            "model": model or self._model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens or self._max_tokens,
        }

        logger.debug("OpenAI request model=%s messages=%d", kwargs["model"], len(messages))
        try:
            response = self._client.chat.completions.create(**kwargs)
        except openai.OpenAIError as exc:
            msg = f"openai request failed: {exc}"
            raise BackendUnavailable(msg) from exc
        return completion_text(response, self.name)
