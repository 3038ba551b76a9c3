"""Tests for the KnowledgeAssistant facade."""

import json

import pytest

from conftest import RecordingBackend
from knowledge_assistant import KnowledgeAssistant, NotFound
from knowledge_assistant.chat.orchestrator import EMPTY_QUESTION_ANSWER, ChatOrchestrator


@pytest.fixture()
def assistant(store, backend):
    return KnowledgeAssistant(store, ChatOrchestrator(store.snapshot, backend))


def test_crud_round(assistant):
    created = assistant.create_knowledge("Title", "Body")
    assert assistant.list_knowledge() == [created]

    updated = assistant.update_knowledge(created.id, "New title", "New body")
    assert updated.id == created.id
    assert assistant.list_knowledge() == [updated]

    assistant.delete_knowledge(created.id)
    assert assistant.list_knowledge() == []


def test_update_missing_raises_not_found_and_keeps_state(assistant):
    assistant.create_knowledge("a", "b")
    before = assistant.list_knowledge()
    with pytest.raises(NotFound):
        assistant.update_knowledge("missing-id", "x", "y")
    assert assistant.list_knowledge() == before


def test_delete_missing_is_noop(assistant):
    entry = assistant.create_knowledge("a", "b")
    assistant.delete_knowledge("missing-id")
    assert assistant.list_knowledge() == [entry]


def test_chat_uses_store(assistant, backend):
    entry = assistant.create_knowledge("Sharding", "sharding splits tables")
    response = assistant.chat("sharding")
    assert response.answer == "generated answer"
    assert [s.id for s in response.sources] == [entry.id]
    assert len(backend.calls) == 1


def test_handle_chat_payload(assistant, backend):
    assistant.create_knowledge("Sharding", "sharding splits tables")
    body = assistant.handle_chat(
        {"question": "sharding", "history": [{"role": "user", "content": "hi"}], "topK": 3}
    )
    assert body["answer"] == "generated answer"
    assert body["sources"][0]["title"] == "Sharding"
    assert set(body["sources"][0]) == {"id", "title", "snippet"}


def test_handle_chat_empty_question(assistant, backend):
    body = assistant.handle_chat({})
    assert body == {"answer": EMPTY_QUESTION_ANSWER, "sources": []}
    assert backend.calls == []


def test_from_config_end_to_end(tmp_path):
    kb_path = tmp_path / "knowledge.json"
    kb_path.write_text(json.dumps([{"id": "kb-0000000000000001", "title": "Backups", "content": "nightly backups"}]))

    assistant = KnowledgeAssistant.from_config({"store": {"path": str(kb_path)}})

    assert [e.title for e in assistant.list_knowledge()] == ["Backups"]
    response = assistant.chat("backups")
    assert response.generated is False
    assert "Backups" in response.answer
    assert [s.id for s in response.sources] == ["kb-0000000000000001"]


def test_from_config_env_path(tmp_path, monkeypatch):
    kb_path = tmp_path / "env" / "knowledge.json"
    monkeypatch.setenv("AI_ASSISTANT_KB_PATH", str(kb_path))

    assistant = KnowledgeAssistant.from_config()
    assistant.create_knowledge("x", "y")

    assert kb_path.exists()


def test_from_config_with_custom_backend(tmp_path):
    from knowledge_assistant.chat.backends.base import BackendRegistry

    BackendRegistry.register("_test_recording")(RecordingBackend)
    try:
        assistant = KnowledgeAssistant.from_config(
            {
                "backend": {"type": "_test_recording", "api_key": "k", "response": "from registry"},
                "store": {"path": str(tmp_path / "kb.json")},
            }
        )
        assistant.create_knowledge("Topic", "topic body")
        assert assistant.chat("topic").answer == "from registry"
    finally:
        del BackendRegistry._backends["_test_recording"]
