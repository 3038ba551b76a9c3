"""Knowledge entry store with keyword retrieval and retrieval-augmented chat."""

from knowledge_assistant.api import KnowledgeAssistant
from knowledge_assistant.chat import Backend, BackendRegistry, ChatOrchestrator
from knowledge_assistant.config import AssistantConfig, BackendConfig, PromptConfig, StoreConfig, load_config
from knowledge_assistant.errors import AssistantError, BackendUnavailable, NotFound, PersistenceFailure
from knowledge_assistant.models import ChatMessage, ChatRequest, ChatResponse, KnowledgeEntry, Source
from knowledge_assistant.retrieval import search
from knowledge_assistant.store import JsonSnapshot, KnowledgeStore

__all__ = [
    "AssistantConfig",
    "AssistantError",
    "Backend",
    "BackendConfig",
    "BackendRegistry",
    "BackendUnavailable",
    "ChatMessage",
    "ChatOrchestrator",
    "ChatRequest",
    "ChatResponse",
    "JsonSnapshot",
    "KnowledgeAssistant",
    "KnowledgeEntry",
    "KnowledgeStore",
    "NotFound",
    "PersistenceFailure",
    "PromptConfig",
    "Source",
    "StoreConfig",
    "load_config",
    "search",
]
