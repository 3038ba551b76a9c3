"""LiteLLM catch-all backend supporting 100+ LLM providers."""

from __future__ import annotations

import logging
from typing import Any

from knowledge_assistant.chat.backends.base import Backend, BackendRegistry, completion_text
from knowledge_assistant.errors import BackendUnavailable

logger = logging.getLogger(__name__)

try:
    import litellm

    _HAS_LITELLM = True
except ImportError:  # pragma: no cover
    _HAS_LITELLM = False


@BackendRegistry.register("litellm")
class LiteLLMBackend(Backend):
    """Backend powered by LiteLLM's unified completion interface.

    Parameters
    ----------
    model : str
        Model identifier in LiteLLM format
        (e.g. ``"bedrock/anthropic.claude-3-5-sonnet-20241022-v2:0"``).
    api_key : str | None
        Provider credential. Without one, every call raises :class:`BackendUnavailable`.
    base_url : str | None
        Forwarded as ``api_base`` when set.
    max_tokens : int
        Default max tokens for completions.
    connect_timeout : float
        Unused by LiteLLM; accepted for a uniform constructor.
    timeout : float
        Seconds allowed for the whole request.
    """

    name = "litellm"

    def __init__(
        self,
        model: str = "gpt-4.1-mini",
        api_key: str | None = None,
        base_url: str | None = None,
        max_tokens: int = 1024,
        connect_timeout: float = 10.0,
        timeout: float = 60.0,
    ) -> None:
        if not _HAS_LITELLM:
            msg = "The 'litellm' package is required: pip install litellm"
            raise ImportError(msg)
        self._model = model
        self._api_key = api_key or ""
        self._base_url = base_url or ""
        self._max_tokens = max_tokens
        self._timeout = timeout

    def complete(
        self,
        messages: list[dict[str, str]],
        *,
        model: str | None = None,
        temperature: float = 0.2,
        max_tokens: int | None = None,
    ) -> str:
        """Call LiteLLM's unified completion endpoint.

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
            On a missing API key, any provider error, or an empty completion.
        """
        if not self._api_key:
            msg = "litellm backend has no API key configured"
            raise BackendUnavailable(msg)

        kwargs: dict[str, Any] = {
            "model": model or self._model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens or self._max_tokens,
            "api_key": self._api_key,
            "timeout": self._timeout,
        }
        if self._base_url:
            kwargs["api_base"] = self._base_url

        logger.debug("LiteLLM request model=%s messages=%d", kwargs["model"], len(messages))
        try:
            response = litellm.completion(**kwargs)
        except Exception as exc:
            # LiteLLM maps every provider failure onto its own exception tree.
            msg = f"litellm request failed: {exc}"
            raise BackendUnavailable(msg) from exc
        return completion_text(response, self.name)
