"""Shared fixtures for knowledge assistant tests."""

import pytest

from knowledge_assistant.chat.backends.base import Backend
from knowledge_assistant.errors import BackendUnavailable
from knowledge_assistant.store import JsonSnapshot, KnowledgeStore

_ENV_VARS = (
    "AI_ASSISTANT_BACKEND",
    "AI_ASSISTANT_API_KEY",
    "AI_ASSISTANT_BASE_URL",
    "AI_ASSISTANT_MODEL",
    "AI_ASSISTANT_TEMPERATURE",
    "AI_ASSISTANT_KB_PATH",
)


class RecordingBackend(Backend):
    """In-memory backend that records every call."""

    name = "recording"

    def __init__(self, response="generated answer", error=None, **kwargs):
        self._response = response
        self._error = error
        self.calls = []

    def complete(self, messages, *, model=None, temperature=0.2, max_tokens=None):
        self.calls.append({"messages": messages, "model": model, "temperature": temperature, "max_tokens": max_tokens})
        if self._error is not None:
            raise self._error
        return self._response


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep host configuration out of the tests."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def store_path(tmp_path):
    return tmp_path / "kb" / "knowledge.json"


@pytest.fixture()
def store(store_path):
    return KnowledgeStore(JsonSnapshot(store_path, backoff=0.0))


@pytest.fixture()
def backend():
    return RecordingBackend()


@pytest.fixture()
def failing_backend():
    return RecordingBackend(error=BackendUnavailable("connection refused"))
