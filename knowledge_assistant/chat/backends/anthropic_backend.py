"""Anthropic (Claude) generation backend."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from knowledge_assistant.chat.backends.base import Backend, BackendRegistry, require_text
from knowledge_assistant.errors import BackendUnavailable

logger = logging.getLogger(__name__)

try:
    import anthropic

    _HAS_ANTHROPIC = True
except ImportError:  # pragma: no cover
    _HAS_ANTHROPIC = False


@BackendRegistry.register("anthropic")
class AnthropicBackend(Backend):
    """Backend powered by the Anthropic Messages API.

    Parameters
    ----------
    model : str
        Default model identifier (e.g. ``"claude-sonnet-4-5-20250929"``).
    api_key : str | None
        Anthropic API key. Without one, every call raises :class:`BackendUnavailable`.
    base_url : str | None
        Optional service root; ``None`` uses the SDK default.
    max_tokens : int
        Default max tokens for completions.
    connect_timeout : float
        Seconds allowed to establish the connection.
    timeout : float
        Seconds allowed for the whole request.
    """

    name = "anthropic"

    def __init__(
        self,
        model: str = "claude-sonnet-4-5-20250929",
        api_key: str | None = None,
        base_url: str | None = None,
        max_tokens: int = 1024,
        connect_timeout: float = 10.0,
        timeout: float = 60.0,
    ) -> None:
        if not _HAS_ANTHROPIC:
            msg = "The 'anthropic' package is required: pip install anthropic"
            raise ImportError(msg)
        self._model = model
        self._max_tokens = max_tokens
        self._client = None
        if api_key:
            self._client = anthropic.Anthropic(
                api_key=api_key,
                base_url=base_url or None,
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
        """Call the Anthropic Messages API.

        System messages are joined into the ``system`` parameter.

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
            msg = "anthropic backend has no API key configured"
            raise BackendUnavailable(msg)

        system_parts = [m["content"] for m in messages if m["role"] == "system"]
        chat_messages = [m for m in messages if m["role"] != "system"]

        kwargs: dict[str, Any] = {
            "model": model or self._model,
            "max_tokens": max_tokens or self._max_tokens,
            "temperature": temperature,
            "messages": chat_messages,
        }
        if system_parts:
            kwargs["system"] = "\n\n".join(system_parts)

        logger.debug("Anthropic request model=%s messages=%d", kwargs["model"], len(chat_messages))
        try:
            response = self._client.messages.create(**kwargs)
        except anthropic.AnthropicError as exc:
            msg = f"anthropic request failed: {exc}"
            raise BackendUnavailable(msg) from exc

        text = "".join(getattr(block, "text", "") or "" for block in getattr(response, "content", None) or [])
        return require_text(text, self.name)
