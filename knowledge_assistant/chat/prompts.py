"""Prompt template loading and rendering for RAG chat."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import jinja2
import yaml

from knowledge_assistant.models import ChatMessage, Source, normalize_role

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"
BUILTIN_PROMPT = TEMPLATES_DIR / "rag_chat.yaml"

_env = jinja2.Environment(undefined=jinja2.Undefined, trim_blocks=True, lstrip_blocks=True, autoescape=False)


@dataclass
class PromptSpec:
    """Metadata and template content for the chat prompt.

    Parameters
    ----------
    name : str
        Unique prompt identifier.
    version : str
        Semver-style version string.
    description : str
        Human-readable description.
    system_template : str
        Jinja2 template for the system instruction.
    user_template : str
        Jinja2 template for the final user message. Receives ``sources``,
        ``question`` and ``language``.
    """

    name: str
    version: str
    description: str
    system_template: str = ""
    user_template: str = ""


def load_prompt_spec(path: str | Path | None = None) -> PromptSpec:
    """Load a PromptSpec from a YAML file.

    Parameters
    ----------
    path : str | Path | None
        Path to a YAML prompt template file. ``None`` loads the built-in
        ``rag_chat.yaml``.

    Returns
    -------
    PromptSpec

    Raises
    ------
    FileNotFoundError
        If *path* does not exist.
    """
    path = Path(path) if path else BUILTIN_PROMPT
    if not path.exists():
        msg = f"Prompt template not found: {path}"
        raise FileNotFoundError(msg)

    with open(path, encoding="utf-8") as fh:
        data: dict[str, Any] = yaml.safe_load(fh) or {}

    logger.debug("Loaded prompt template %s", path)
    return PromptSpec(
        name=data.get("name", "unknown"),
        version=str(data.get("version", "0.0")),
        description=data.get("description", ""),
        system_template=data.get("system", ""),
        user_template=data.get("user", ""),
    )


def render_template(template: str, variables: dict[str, Any]) -> str:
    """Render a single Jinja2 template string.

    Surrounding whitespace of the template body is dropped; substituted values
    such as the question are emitted verbatim.
    """
    template = template.strip() if template else ""
    if not template:
        return ""
    return _env.from_string(template).render(**variables)


def build_messages(
    spec: PromptSpec,
    question: str,
    sources: Sequence[Source],
    history: Sequence[ChatMessage] = (),
    *,
    language: str = "English",
) -> list[dict[str, str]]:
    """Assemble the backend message sequence.

    The order is: the system instruction, every history turn with non-blank
    content (role normalized), then one user message carrying the retrieved
    sources and the question.

    Parameters
    ----------
    spec : PromptSpec
        Prompt templates.
    question : str
        The current question, included verbatim.
    sources : Sequence[Source]
        Retrieved sources, possibly empty.
    history : Sequence[ChatMessage]
        Earlier conversation turns, oldest first.
    language : str
        Language the answer should be written in.

    Returns
    -------
    list[dict[str, str]]
        Chat messages suitable for ``Backend.complete``.
    """
    variables = {"question": question, "sources": list(sources), "language": language}

    messages: list[dict[str, str]] = []
    system_text = render_template(spec.system_template, variables)
    if system_text:
        messages.append({"role": "system", "content": system_text})

    for turn in history:
        if turn is None or not turn.content or not turn.content.strip():
            continue
        messages.append({"role": normalize_role(turn.role), "content": turn.content})

    messages.append({"role": "user", "content": render_template(spec.user_template, variables)})
    return messages
