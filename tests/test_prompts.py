"""Tests for prompt loading and message assembly."""

import pytest

from knowledge_assistant.chat.prompts import BUILTIN_PROMPT, PromptSpec, build_messages, load_prompt_spec, render_template
from knowledge_assistant.models import ChatMessage, Source

SOURCES = [
    Source(id="kb-1", title="Indexes", snippet="B-tree indexes speed up lookups."),
    Source(id="kb-2", title="Joins", snippet="Hash joins need memory."),
]


def test_builtin_prompt_loads():
    spec = load_prompt_spec()
    assert spec.name == "rag_chat"
    assert spec.version == "1.0"
    assert "{{ language }}" in spec.system_template
    assert BUILTIN_PROMPT.exists()


def test_missing_prompt_raises(tmp_path):
    with pytest.raises(FileNotFoundError, match="Prompt template not found"):
        load_prompt_spec(tmp_path / "missing.yaml")


def test_custom_prompt_file(tmp_path):
    path = tmp_path / "custom.yaml"
    path.write_text('name: custom\nversion: 2\nsystem: "Be brief."\nuser: "Q: {{ question }}"\n')
    spec = load_prompt_spec(path)
    assert spec.version == "2"
    messages = build_messages(spec, "why?", [])
    assert messages == [{"role": "system", "content": "Be brief."}, {"role": "user", "content": "Q: why?"}]


def test_render_template_empty():
    assert render_template("", {"x": 1}) == ""


def test_messages_with_sources():
    messages = build_messages(load_prompt_spec(), "How do indexes work?", SOURCES, language="German")

    assert [m["role"] for m in messages] == ["system", "user"]
    assert "German" in messages[0]["content"]
    user = messages[1]["content"]
    assert "- Title: Indexes\n  Snippet: B-tree indexes speed up lookups." in user
    assert "- Title: Joins\n  Snippet: Hash joins need memory." in user
    assert user.index("Indexes") < user.index("Joins")
    assert "based on the content above" in user
    assert user.endswith("Question: How do indexes work?")


def test_messages_without_sources():
    messages = build_messages(load_prompt_spec(), "hello", [])
    user = messages[-1]["content"]
    assert user.startswith("No related knowledge entries were found.")
    assert "general knowledge" in user
    assert user.endswith("Question: hello")


def test_history_filtered_and_normalized():
    history = [
        ChatMessage(role="user", content="first"),
        ChatMessage(role="assistant", content="   "),
        ChatMessage(role="tool", content="odd role"),
        ChatMessage(role="system", content="be nice"),
        ChatMessage(role="assistant", content=""),
    ]
    messages = build_messages(load_prompt_spec(), "q", [], history)

    assert messages[1:-1] == [
        {"role": "user", "content": "first"},
        {"role": "user", "content": "odd role"},
        {"role": "system", "content": "be nice"},
    ]
    assert messages[0]["role"] == "system"
    assert messages[-1]["role"] == "user"


def test_question_is_not_template_expanded():
    spec = PromptSpec(name="t", version="1", description="", user_template="{{ question }}")
    messages = build_messages(spec, "what does {{ x }} mean?", [])
    assert messages == [{"role": "user", "content": "what does {{ x }} mean?"}]


def test_question_whitespace_kept_verbatim():
    question = "  what is sql?\n\n"
    messages = build_messages(load_prompt_spec(), question, SOURCES)
    assert messages[-1]["content"].endswith("Question: " + question)
    assert messages[-1]["content"].startswith("The following knowledge entries")


def test_template_body_whitespace_dropped():
    assert render_template("\n  Hello {{ name }}\n\n", {"name": "Ada "}) == "Hello Ada "
