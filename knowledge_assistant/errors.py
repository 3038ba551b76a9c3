"""Exception taxonomy for the knowledge assistant."""

from __future__ import annotations

from pathlib import Path


class AssistantError(Exception):
    """Base class for all knowledge assistant errors."""


class NotFound(AssistantError, KeyError):
    """Raised when a knowledge entry id does not exist in the store.

    Parameters
    ----------
    entry_id : str
        The id that was looked up.
    """

    def __init__(self, entry_id: str) -> None:
        self.entry_id = entry_id
        super().__init__(f"Knowledge entry not found: {entry_id}")

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message.
        return self.args[0]


class PersistenceFailure(AssistantError, OSError):
    """Raised when the knowledge snapshot cannot be written.

    Parameters
    ----------
    path : Path
        Snapshot location that failed.
    reason : str
        Description of the underlying failure.
    """

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to save knowledge snapshot {path}: {reason}")

    def __str__(self) -> str:
        return self.args[0]


class BackendUnavailable(AssistantError):
    """Raised by a generation backend that cannot produce a usable answer.

    Covers a missing credential, transport errors, non-success statuses and
    responses without usable generated text.
    """
