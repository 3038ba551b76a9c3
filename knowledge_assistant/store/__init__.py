"""Knowledge entry storage and persistence."""

from knowledge_assistant.store.knowledge_store import KnowledgeStore, generate_id
from knowledge_assistant.store.snapshot import JsonSnapshot

__all__ = ["JsonSnapshot", "KnowledgeStore", "generate_id"]
