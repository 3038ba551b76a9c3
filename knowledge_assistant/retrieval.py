"""Lexical keyword-overlap retrieval over knowledge entries."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from knowledge_assistant.models import KnowledgeEntry, Source

logger = logging.getLogger(__name__)

MIN_TOKEN_LENGTH = 2

# ASCII whitespace only: U+3000 and U+00A0 stay inside a token.
_SEPARATOR = re.compile(r"[ \t\n\x0b\f\r]+")


def tokenize(query: str) -> list[str]:
    """Lowercase *query* and split on ASCII whitespace, dropping one-character tokens.

    Repeated tokens are kept; each occurrence contributes to the score.
    """
    return [t for t in _SEPARATOR.split(query.lower()) if len(t) >= MIN_TOKEN_LENGTH]


def score_entry(entry: KnowledgeEntry, tokens: Sequence[str]) -> int:
    """Count non-overlapping occurrences of every token in the entry text.

    The searched text is ``title + "\\n" + content``, lowercased.

    Parameters
    ----------
    entry : KnowledgeEntry
        The entry to score.
    tokens : Sequence[str]
        Lowercased query tokens from :func:`tokenize`.

    Returns
    -------
    int
    """
    haystack = f"{entry.title}\n{entry.content}".lower()
    return sum(haystack.count(token) for token in tokens)


def search(query: str, top_k: int, entries: Sequence[KnowledgeEntry]) -> list[Source]:
    """Rank *entries* against *query* and return at most *top_k* sources.

    Entries scoring zero are dropped. Higher scores come first and entries with
    equal scores keep their order from *entries*.

    Parameters
    ----------
    query : str
        Free-text query.
    top_k : int
        Maximum number of sources to return.
    entries : Sequence[KnowledgeEntry]
        Snapshot of the collection to search.

    Returns
    -------
    list[Source]
    """
    if not query or not query.strip() or not entries or top_k <= 0:
        return []

    tokens = tokenize(query)
    if not tokens:
        return []

    scored: list[tuple[KnowledgeEntry, int]] = []
    for entry in entries:
        score = score_entry(entry, tokens)
        if score > 0:
            scored.append((entry, score))

    # list.sort is stable, also with reverse=True.
    scored.sort(key=lambda pair: pair[1], reverse=True)
    sources = [Source.from_entry(entry) for entry, _ in scored[:top_k]]

    logger.debug("Retrieved %d of %d entries for %d tokens", len(sources), len(entries), len(tokens))
    return sources
