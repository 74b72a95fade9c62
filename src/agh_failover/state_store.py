"""Persisted last-applied failover state."""

import os
from pathlib import Path

import structlog

from .config import Settings
from .exceptions import StateStoreError
from .models import HealthState

logger = structlog.get_logger()


class StateStore:
    """Reads and writes the state marker file."""

    def __init__(self, settings: Settings) -> None:
        """Initialize state store."""
        self.path: Path = settings.state_file_path

    def load(self) -> HealthState | None:
        """Load the last applied state, None on first run or unreadable marker."""
        try:
            text = self.path.read_text()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.error("Failed to read state marker", path=str(self.path), error=str(e))
            return None

        state = HealthState.from_marker(text)
        if state is None and text.strip():
            logger.warning("Ignoring unrecognised state marker", path=str(self.path), value=text.strip())
        return state

    def save(self, state: HealthState) -> None:
        """Persist ``state``.

        Raises:
            StateStoreError: If the marker cannot be written
        """
        tmp = self.path.with_name(f".{self.path.name}.tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(f"{state.value}\n")
            os.replace(tmp, self.path)
        except OSError as e:
            tmp.unlink(missing_ok=True)
            raise StateStoreError(f"Failed to write {self.path}: {e}") from e
        logger.info("Saved state", path=str(self.path), state=state.value)
