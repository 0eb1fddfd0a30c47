"""
Session persistence for the fixed-flow conversation.

Snapshots are always whole-state replacements. The JSON file repository
writes to a temporary file in the target directory and renames it over
the previous snapshot, so an interrupted write never leaves a partially
updated session behind.
"""

import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Protocol, Union

from pydantic import ValidationError

from timelog.exceptions import SessionStoreError
from timelog.models.conversation import ConversationState

logger = logging.getLogger(__name__)


class SessionRepository(Protocol):
    """Stores the latest ConversationState of one session."""

    def save(self, state: ConversationState) -> None: ...

    def load(self) -> Optional[ConversationState]: ...

    def clear(self) -> None: ...


class InMemorySessionRepository:
    """Repository keeping a private copy of the last saved state."""

    def __init__(self):
        self._state: Optional[ConversationState] = None

    def save(self, state: ConversationState) -> None:
        self._state = state.model_copy(deep=True)

    def load(self) -> Optional[ConversationState]:
        return self._state.model_copy(deep=True) if self._state else None

    def clear(self) -> None:
        self._state = None


class JsonFileSessionRepository:
    """
    Repository storing the session snapshot as a versioned JSON file.

    Example:
        >>> repo = JsonFileSessionRepository("/tmp/timelog/session.json")
        >>> repo.save(ConversationState.initial())
        >>> repo.load().step
        <Step.GREETING: 'greeting'>
    """

    SNAPSHOT_VERSION = "1.0"

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def save(self, state: ConversationState) -> None:
        """
        Atomically replace the stored snapshot.

        Raises:
            SessionStoreError: If the snapshot cannot be written
        """
        snapshot = {
            "version": self.SNAPSHOT_VERSION,
            "saved_at": datetime.now(timezone.utc).isoformat(),
            "state": state.model_dump(mode="json"),
        }

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            temp_fd, temp_path = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        except OSError as e:
            raise SessionStoreError(f"Cannot write session to {self.path}: {e}") from e

        try:
            with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
                json.dump(snapshot, f, indent=2)
            # Atomic rename (overwrites existing file)
            os.replace(temp_path, self.path)
        except OSError as e:
            try:
                os.unlink(temp_path)
            except OSError:
                # Temp file may already be gone
                pass
            raise SessionStoreError(f"Cannot write session to {self.path}: {e}") from e

        logger.debug(f"Saved session snapshot at step '{state.step.value}'")

    def load(self) -> Optional[ConversationState]:
        """
        Load the stored snapshot.

        Returns:
            The stored state, or None if missing, unreadable or incompatible
        """
        if not self.path.exists():
            logger.debug(f"Session file not found: {self.path}")
            return None

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                snapshot = json.load(f)
        except (OSError, ValueError) as e:  # ValueError covers JSON and UTF-8 decoding
            logger.error(f"Failed to read session file (ignored): {e}")
            return None

        version = snapshot.get("version") if isinstance(snapshot, dict) else None
        if version != self.SNAPSHOT_VERSION:
            logger.warning(
                f"Session version mismatch (expected {self.SNAPSHOT_VERSION}, "
                f"got {version}), ignoring stored session"
            )
            return None

        try:
            return ConversationState.model_validate(snapshot.get("state"))
        except ValidationError as e:
            logger.error(f"Stored session is invalid (ignored): {e}")
            return None

    def clear(self) -> None:
        """Delete the stored snapshot if present."""
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
