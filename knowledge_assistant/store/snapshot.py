"""Durable JSON snapshot of the knowledge entry collection."""

from __future__ import annotations

import json
import logging
import os
import tempfile
import time
from pathlib import Path

from knowledge_assistant.errors import PersistenceFailure
from knowledge_assistant.models import KnowledgeEntry

logger = logging.getLogger(__name__)


class JsonSnapshot:
    """Load and save the full entry list as a pretty-printed JSON array.

    Parameters
    ----------
    path : str | Path
        Snapshot file location. Parent directories are created on save.
    attempts : int
        Number of write attempts before giving up.
    backoff : float
        Seconds to wait before retry ``n`` is ``backoff * n``.
    """

    def __init__(self, path: str | Path, *, attempts: int = 3, backoff: float = 0.2) -> None:
        self._path = Path(path)
        self._attempts = max(1, attempts)
        self._backoff = max(0.0, backoff)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> list[KnowledgeEntry] | None:
        """Return the persisted entries, or ``None`` when no snapshot exists.

        Returns
        -------
        list[KnowledgeEntry] | None

        Raises
        ------
        ValueError
            If the file is not valid JSON or is not a JSON array.
        OSError
            If the file exists but cannot be read.
        """
        if not self._path.is_file():
            logger.debug("No knowledge snapshot at %s", self._path)
            return None

        with open(self._path, encoding="utf-8") as fh:
            data = json.load(fh)

        if not isinstance(data, list):
            msg = f"Snapshot root must be a JSON array, got {type(data).__name__}"
            raise ValueError(msg)

        entries: list[KnowledgeEntry] = []
        for record in data:
            if not isinstance(record, dict) or not record.get("id"):
                logger.debug("Skipping snapshot record without id: %r", record)
                continue
            entries.append(KnowledgeEntry.from_dict(record))

        logger.debug("Loaded %d knowledge entries from %s", len(entries), self._path)
        return entries

    def save(self, entries: tuple[KnowledgeEntry, ...] | list[KnowledgeEntry]) -> None:
        """Atomically replace the snapshot with *entries*.

        Parameters
        ----------
        entries : sequence of KnowledgeEntry
            The complete collection, in order.

        Raises
        ------
        PersistenceFailure
            If every write attempt fails.
        """
        payload = json.dumps([e.to_dict() for e in entries], indent=2, ensure_ascii=False) + "\n"

        last_err: OSError | None = None
        for attempt in range(1, self._attempts + 1):
            try:
                self._write(payload)
                logger.debug("Saved %d knowledge entries to %s", len(entries), self._path)
                return
            except OSError as exc:
                last_err = exc
                if attempt < self._attempts:
                    logger.warning(
                        "Snapshot save attempt %d/%d failed for %s: %s", attempt, self._attempts, self._path, exc
                    )
                    time.sleep(self._backoff * attempt)

        logger.error("Giving up saving knowledge snapshot %s: %s", self._path, last_err)
        raise PersistenceFailure(self._path, str(last_err)) from last_err

    def _write(self, payload: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self._path.name}.", suffix=".tmp", dir=self._path.parent)
        try:
            fh = os.fdopen(fd, "w", encoding="utf-8")
        except OSError:
            os.close(fd)
            Path(tmp_name).unlink(missing_ok=True)
            raise
        try:
            with fh:
                fh.write(payload)
            os.replace(tmp_name, self._path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise
