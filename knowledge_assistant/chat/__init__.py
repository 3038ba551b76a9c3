"""Retrieval-augmented chat with pluggable generation backends."""

from knowledge_assistant.chat.backends import Backend, BackendRegistry, create_backend
from knowledge_assistant.chat.orchestrator import ChatOrchestrator, build_fallback_answer
from knowledge_assistant.chat.prompts import PromptSpec, build_messages, load_prompt_spec

__all__ = [
    "Backend",
    "BackendRegistry",
    "ChatOrchestrator",
    "PromptSpec",
    "build_fallback_answer",
    "build_messages",
    "create_backend",
    "load_prompt_spec",
]
