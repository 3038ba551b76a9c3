"""Data models for knowledge entries and chat exchanges."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

SNIPPET_LENGTH = 220
SNIPPET_ELLIPSIS = "..."
DEFAULT_TOP_K = 5

VALID_ROLES = frozenset({"system", "user", "assistant"})


@dataclass(frozen=True)
class KnowledgeEntry:
    """A stored title and content record forming the retrieval corpus.

    Instances are immutable; the store replaces an entry instead of mutating it,
    so a reference handed to a caller never changes underneath them.

    Parameters
    ----------
    id : str
        Opaque identifier generated by the store.
    title : str
        Entry title.
    content : str
        Entry body text.
    """

    id: str
    title: str = ""
    content: str = ""

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "title": self.title, "content": self.content}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> KnowledgeEntry:
        """Build an entry from a snapshot record.

        Parameters
        ----------
        data : dict
            Must contain ``id``. Missing or null ``title`` / ``content``
            become empty strings.

        Returns
        -------
        KnowledgeEntry
        """
        return cls(
            id=str(data["id"]),
            title=_text(data.get("title")),
            content=_text(data.get("content")),
        )


@dataclass(frozen=True)
class Source:
    """Read-only projection of a knowledge entry returned with an answer.

    Parameters
    ----------
    id : str
        Id of the originating entry.
    title : str
        Entry title.
    snippet : str
        Entry content, truncated to :data:`SNIPPET_LENGTH` characters.
    """

    id: str
    title: str
    snippet: str

    @classmethod
    def from_entry(cls, entry: KnowledgeEntry) -> Source:
        return cls(id=entry.id, title=entry.title, snippet=make_snippet(entry.content))

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "title": self.title, "snippet": self.snippet}


@dataclass(frozen=True)
class ChatMessage:
    """A single conversation turn (OpenAI role semantics).

    Parameters
    ----------
    role : str
        ``"system"``, ``"user"`` or ``"assistant"``.
    content : str
        Message text.
    """

    role: str
    content: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChatMessage:
        return cls(role=normalize_role(data.get("role")), content=_text(data.get("content")))

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass
class ChatRequest:
    """Typed input envelope for a chat call.

    Parameters
    ----------
    question : str
        The current question. Blank questions get a canned answer.
    history : list[ChatMessage]
        Earlier conversation turns, oldest first.
    top_k : int | None
        Maximum number of sources to retrieve. ``None`` uses the default.
    """

    question: str
    history: list[ChatMessage] = field(default_factory=list)
    top_k: int | None = None

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> ChatRequest:
        """Construct a request from a decoded JSON body.

        Parameters
        ----------
        payload : dict
            Keys ``question``, ``history`` (list of ``role`` / ``content``
            dicts) and ``topK``. All keys are optional.

        Returns
        -------
        ChatRequest
        """
        history = [
            ChatMessage.from_dict(item) for item in payload.get("history") or [] if isinstance(item, dict)
        ]
        top_k = payload.get("topK")
        return cls(
            question=_text(payload.get("question")),
            history=history,
            top_k=top_k if isinstance(top_k, int) and not isinstance(top_k, bool) else None,
        )


@dataclass
class ChatResponse:
    """Answer text plus the sources retrieved for the question.

    Parameters
    ----------
    answer : str
        Generated answer, or the deterministic fallback text.
    sources : list[Source]
        Ranked retrieval result, independent of which path produced the answer.
    generated : bool
        ``True`` when ``answer`` came from the generation backend.
    """

    answer: str
    sources: list[Source] = field(default_factory=list)
    generated: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"answer": self.answer, "sources": [s.to_dict() for s in self.sources]}


def make_snippet(content: str) -> str:
    """Truncate *content* to :data:`SNIPPET_LENGTH` characters plus an ellipsis."""
    if len(content) <= SNIPPET_LENGTH:
        return content
    return content[:SNIPPET_LENGTH] + SNIPPET_ELLIPSIS


def normalize_role(role: Any) -> str:
    """Map unknown or missing roles to ``"user"``."""
    return role if role in VALID_ROLES else "user"


def resolve_top_k(top_k: int | None, default: int = DEFAULT_TOP_K) -> int:
    """Return *top_k* when it is a positive integer, else *default*."""
    if isinstance(top_k, int) and not isinstance(top_k, bool) and top_k > 0:
        return top_k
    return default


def _text(value: Any) -> str:
    return "" if value is None else str(value)
