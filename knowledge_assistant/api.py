"""Public API: knowledge CRUD and RAG chat behind one object."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from knowledge_assistant.chat.orchestrator import ChatOrchestrator
from knowledge_assistant.config import AssistantConfig, load_config
from knowledge_assistant.models import ChatMessage, ChatRequest, ChatResponse, KnowledgeEntry
from knowledge_assistant.store import KnowledgeStore

logger = logging.getLogger(__name__)


class KnowledgeAssistant:
    """Operations an HTTP layer exposes: list, create, update, delete and chat.

    Parameters
    ----------
    store : KnowledgeStore
        The knowledge entry store.
    orchestrator : ChatOrchestrator
        Chat orchestrator reading from *store*.
    """

    def __init__(self, store: KnowledgeStore, orchestrator: ChatOrchestrator) -> None:
        self.store = store
        self.orchestrator = orchestrator

    @classmethod
    def from_config(cls, config: AssistantConfig | dict | str | Path | None = None) -> KnowledgeAssistant:
        """Open the store and build the orchestrator from configuration.

        Parameters
        ----------
        config : AssistantConfig | dict | str | Path | None
            An ``AssistantConfig``, a dict, a YAML file path, or ``None``
            for defaults plus environment overrides.

        Returns
        -------
        KnowledgeAssistant
        """
        config = load_config(config)
        store = KnowledgeStore.open(config.store.path, save_attempts=config.store.save_attempts)
        orchestrator = ChatOrchestrator.from_config(store.snapshot, config)
        if not config.backend.has_credential:
            logger.warning("AI_ASSISTANT_API_KEY is not configured, chat will only return retrieved entries")
        logger.info("Knowledge assistant ready: %d entries at %s", len(store), store.path)
        return cls(store, orchestrator)

    def list_knowledge(self) -> list[KnowledgeEntry]:
        return self.store.list()

    def create_knowledge(self, title: str | None = None, content: str | None = None) -> KnowledgeEntry:
        return self.store.create(title, content)

    def update_knowledge(
        self, entry_id: str, title: str | None = None, content: str | None = None
    ) -> KnowledgeEntry:
        """Update an entry; raises :class:`~knowledge_assistant.errors.NotFound` for unknown ids."""
        return self.store.update(entry_id, title, content)

    def delete_knowledge(self, entry_id: str) -> None:
        self.store.delete(entry_id)

    def chat(
        self,
        question: str | None,
        history: Sequence[ChatMessage] | None = None,
        top_k: int | None = None,
    ) -> ChatResponse:
        return self.orchestrator.chat(question, history, top_k)

    def handle_chat(self, payload: dict) -> dict:
        """Answer a decoded JSON chat body and return the JSON response shape.

        Parameters
        ----------
        payload : dict
            Keys ``question``, ``history`` and ``topK``.

        Returns
        -------
        dict
            Keys ``answer`` and ``sources``.
        """
        return self.orchestrator.handle(ChatRequest.from_dict(payload)).to_dict()
