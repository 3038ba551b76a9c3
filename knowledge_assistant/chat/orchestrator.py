"""ChatOrchestrator: retrieval-augmented answers with a deterministic fallback."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from knowledge_assistant.chat.backends import create_backend
from knowledge_assistant.chat.backends.base import Backend
from knowledge_assistant.chat.prompts import PromptSpec, build_messages, load_prompt_spec
from knowledge_assistant.config import AssistantConfig, load_config
from knowledge_assistant.errors import BackendUnavailable
from knowledge_assistant.models import (
    DEFAULT_TOP_K,
    ChatMessage,
    ChatRequest,
    ChatResponse,
    KnowledgeEntry,
    Source,
    resolve_top_k,
)
from knowledge_assistant.retrieval import search

logger = logging.getLogger(__name__)

EMPTY_QUESTION_ANSWER = "The question must not be empty."

FALLBACK_NO_SOURCES = (
    "The language model service is currently unavailable. No related knowledge entries were found. "
    "Please check that AI_ASSISTANT_API_KEY, AI_ASSISTANT_BASE_URL and AI_ASSISTANT_MODEL are configured correctly."
)
FALLBACK_HEADER = (
    "The language model service is currently unavailable, "
    "but the following related knowledge entries were found:"
)
FALLBACK_FOOTER = "Please refer to these entries for the answer."

EntrySnapshot = Callable[[], Sequence[KnowledgeEntry]]


def build_fallback_answer(sources: Sequence[Source]) -> str:
    """Return the retrieval-only answer used whenever generation fails.

    The text depends only on *sources*, never on the kind of failure.
    """
    if not sources:
        return FALLBACK_NO_SOURCES
    lines = [FALLBACK_HEADER]
    lines.extend(f"- {s.title}: {s.snippet}" for s in sources)
    lines.append("")
    lines.append(FALLBACK_FOOTER)
    return "\n".join(lines)


class ChatOrchestrator:
    """Answer questions from the knowledge store through a generation backend.

    Retrieval reads an immutable snapshot of the entries, so the backend call
    never holds a store lock.

    Parameters
    ----------
    entries : Callable[[], Sequence[KnowledgeEntry]]
        Returns the current entry snapshot, e.g. ``KnowledgeStore.snapshot``.
    backend : Backend
        Generation backend.
    prompt : PromptSpec | None
        Prompt templates. ``None`` loads the built-in template.
    model : str | None
        Model override passed on every backend call.
    temperature : float
        Sampling temperature.
    max_tokens : int | None
        Max tokens passed on every backend call.
    language : str
        Language the answer should be written in.
    default_top_k : int
        Number of sources retrieved when the request does not specify one.
    """

    def __init__(
        self,
        entries: EntrySnapshot,
        backend: Backend,
        *,
        prompt: PromptSpec | None = None,
        model: str | None = None,
        temperature: float = 0.2,
        max_tokens: int | None = None,
        language: str = "English",
        default_top_k: int = DEFAULT_TOP_K,
    ) -> None:
        self._entries = entries
        self._backend = backend
        self._prompt = prompt or load_prompt_spec()
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._language = language
        self._default_top_k = default_top_k

    @classmethod
    def from_config(
        cls,
        entries: EntrySnapshot,
        config: AssistantConfig | dict | str | None = None,
    ) -> ChatOrchestrator:
        """Construct an orchestrator from a config object or raw source.

        Parameters
        ----------
        entries : Callable[[], Sequence[KnowledgeEntry]]
            Snapshot provider, usually ``KnowledgeStore.snapshot``.
        config : AssistantConfig | dict | str | None
            An ``AssistantConfig``, a dict, a YAML file path, or ``None``
            for defaults.

        Returns
        -------
        ChatOrchestrator
        """
        config = load_config(config)
        return cls(
            entries,
            create_backend(config.backend),
            prompt=load_prompt_spec(config.prompt.template or None),
            model=config.backend.model,
            temperature=config.backend.temperature,
            max_tokens=config.backend.max_tokens,
            language=config.prompt.language,
            default_top_k=config.prompt.default_top_k,
        )

    @property
    def backend(self) -> Backend:
        return self._backend

    def chat(
        self,
        question: str | None,
        history: Sequence[ChatMessage] | None = None,
        top_k: int | None = None,
    ) -> ChatResponse:
        """Answer *question* using the top ranked knowledge entries.

        Never raises for backend problems: any failure to generate text yields
        the fallback answer built from the retrieved sources.

        Parameters
        ----------
        question : str | None
            The question. Blank questions get a canned answer without
            retrieval or a backend call.
        history : Sequence[ChatMessage] | None
            Earlier turns, oldest first. Blank turns are dropped and unknown
            roles become ``"user"``.
        top_k : int | None
            Maximum number of sources; non-positive or ``None`` uses the default.

        Returns
        -------
        ChatResponse
        """
        if not question or not question.strip():
            return ChatResponse(answer=EMPTY_QUESTION_ANSWER, sources=[])

        k = resolve_top_k(top_k, self._default_top_k)
        sources = search(question, k, self._entries())

        messages = build_messages(self._prompt, question, sources, history or (), language=self._language)
        answer = self._generate(messages)
        if answer is None:
            logger.info("Answered with fallback sources=%d", len(sources))
            return ChatResponse(answer=build_fallback_answer(sources), sources=sources, generated=False)

        logger.info("Answered with backend=%s sources=%d", self._backend.name, len(sources))
        return ChatResponse(answer=answer, sources=sources, generated=True)

    def handle(self, request: ChatRequest) -> ChatResponse:
        """Answer a :class:`ChatRequest`."""
        return self.chat(request.question, request.history, request.top_k)

    def _generate(self, messages: list[dict[str, str]]) -> str | None:
        """Call the backend, returning ``None`` on any failure."""
        try:
            text = self._backend.complete(
                messages,
                model=self._model,
                temperature=self._temperature,
                max_tokens=self._max_tokens,
            )
        except BackendUnavailable as exc:
            logger.warning("Generation backend unavailable, using fallback answer: %s", exc)
        except Exception:
            logger.exception("Generation backend %s failed unexpectedly, using fallback answer", self._backend.name)
        else:
            if isinstance(text, str) and text.strip():
                return text
            logger.warning("Generation backend %s returned blank text, using fallback answer", self._backend.name)
        return None
