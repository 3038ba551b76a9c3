"""KnowledgeStore: the authoritative, thread-safe collection of knowledge entries."""

from __future__ import annotations

import logging
import secrets
import threading
from dataclasses import replace
from pathlib import Path

from knowledge_assistant.errors import NotFound
from knowledge_assistant.models import KnowledgeEntry
from knowledge_assistant.store.snapshot import JsonSnapshot

logger = logging.getLogger(__name__)

ID_PREFIX = "kb-"


def generate_id() -> str:
    """Return a new ``kb-`` prefixed id with 16 random hex characters."""
    return ID_PREFIX + secrets.token_hex(8)


class KnowledgeStore:
    """Owns the knowledge entries and their durable snapshot.

    Mutations run under a single lock and follow load, modify, persist, publish:
    the new collection is written to the snapshot first and only becomes visible
    once the write succeeds. The published collection is an immutable tuple that
    is swapped wholesale, so readers never take the lock and never observe a
    partial mutation.

    Parameters
    ----------
    snapshot : JsonSnapshot
        Durable storage for the collection.
    """

    def __init__(self, snapshot: JsonSnapshot) -> None:
        self._snapshot = snapshot
        self._lock = threading.Lock()
        self._entries: tuple[KnowledgeEntry, ...] = self._load_initial()

    @classmethod
    def open(cls, path: str | Path, *, save_attempts: int = 3) -> KnowledgeStore:
        """Open (or lazily create) a store backed by a JSON file at *path*."""
        return cls(JsonSnapshot(path, attempts=save_attempts))

    @property
    def path(self) -> Path:
        return self._snapshot.path

    def _load_initial(self) -> tuple[KnowledgeEntry, ...]:
        try:
            loaded = self._snapshot.load()
        except (OSError, ValueError, RecursionError) as exc:
            logger.warning("Failed to load knowledge snapshot %s, starting empty: %s", self._snapshot.path, exc)
            return ()
        return tuple(loaded or ())

    # -- Reads ----------------------------------------------------------------

    def snapshot(self) -> tuple[KnowledgeEntry, ...]:
        """Return the current immutable collection."""
        return self._entries

    def list(self) -> list[KnowledgeEntry]:
        """Return the entries in insertion order."""
        return list(self._entries)

    def get(self, entry_id: str) -> KnowledgeEntry:
        """Return the entry with *entry_id*.

        Raises
        ------
        NotFound
            If no entry has that id.
        """
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        raise NotFound(entry_id)

    def __len__(self) -> int:
        return len(self._entries)

    # -- Mutations ------------------------------------------------------------

    def create(self, title: str | None = None, content: str | None = None) -> KnowledgeEntry:
        """Append a new entry with a generated id and persist.

        Parameters
        ----------
        title : str | None
            Entry title; ``None`` is stored as ``""``.
        content : str | None
            Entry body; ``None`` is stored as ``""``.

        Returns
        -------
        KnowledgeEntry

        Raises
        ------
        PersistenceFailure
            If the snapshot cannot be written. The collection is left unchanged.
        """
        with self._lock:
            current = self._entries
            taken = {e.id for e in current}
            entry_id = generate_id()
            while entry_id in taken:
                entry_id = generate_id()
            entry = KnowledgeEntry(id=entry_id, title=title or "", content=content or "")
            self._publish(current + (entry,))

        logger.info("Created knowledge entry %s", entry.id)
        return entry

    def update(self, entry_id: str, title: str | None = None, content: str | None = None) -> KnowledgeEntry:
        """Overwrite the title and content of an existing entry and persist.

        Returns
        -------
        KnowledgeEntry
            The updated entry.

        Raises
        ------
        NotFound
            If *entry_id* does not exist. Nothing is written.
        PersistenceFailure
            If the snapshot cannot be written. The collection is left unchanged.
        """
        with self._lock:
            current = self._entries
            for index, existing in enumerate(current):
                if existing.id == entry_id:
                    break
            else:
                raise NotFound(entry_id)

            updated = replace(existing, title=title or "", content=content or "")
            self._publish(current[:index] + (updated,) + current[index + 1 :])

        logger.info("Updated knowledge entry %s", entry_id)
        return updated

    def delete(self, entry_id: str) -> None:
        """Remove every entry with *entry_id* and persist.

        Unknown ids are not an error. A blank id returns without writing.

        Raises
        ------
        PersistenceFailure
            If the snapshot cannot be written. The collection is left unchanged.
        """
        if not entry_id or not entry_id.strip():
            return

        with self._lock:
            current = self._entries
            remaining = tuple(e for e in current if e.id != entry_id)
            self._publish(remaining)

        if len(remaining) != len(current):
            logger.info("Deleted knowledge entry %s", entry_id)

    def _publish(self, entries: tuple[KnowledgeEntry, ...]) -> None:
        # Caller holds the lock. Persist first so a failed save changes nothing.
        self._snapshot.save(entries)
        self._entries = entries
