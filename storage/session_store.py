"""File-backed persistence for the current interview session and its backup."""
from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from typing import Optional

from pydantic import ValidationError

from config.settings import settings
from graph.state import Session

logger = logging.getLogger(__name__)


class SessionStore:
    """One current snapshot plus one backup of the snapshot it replaced.

    Writes go through a temporary file and ``os.replace`` so a crash never
    leaves a half-written snapshot behind. Failures are logged and reported as
    absence rather than raised.
    """

    def __init__(
        self,
        base_dir: Optional[str] = None,
        key: Optional[str] = None,
        backup_key: Optional[str] = None,
    ):
        self.base_dir = base_dir or settings.STORAGE_DIR
        self.key = key or settings.STORAGE_KEY
        self.backup_key = backup_key or settings.BACKUP_KEY

    def _path(self, key: str) -> str:
        return os.path.join(self.base_dir, f"{key}.json")

    @property
    def path(self) -> str:
        return self._path(self.key)

    @property
    def backup_path(self) -> str:
        return self._path(self.backup_key)

    def _write(self, path: str, text: str) -> None:
        tmp_path = path + ".tmp"
        with open(tmp_path, "w", encoding="utf-8") as handle:
            handle.write(text)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)

    def save(self, session: Session) -> bool:
        """Persist ``session``; returns False (after logging) when the write fails."""

        try:
            os.makedirs(self.base_dir, exist_ok=True)
            if os.path.exists(self.path):
                with open(self.path, "r", encoding="utf-8") as handle:
                    self._write(self.backup_path, handle.read())
            payload = session.model_dump(mode="json", by_alias=True)
            payload["savedAt"] = datetime.now(timezone.utc).isoformat()
            self._write(self.path, json.dumps(payload, ensure_ascii=False))
        except (OSError, TypeError, ValueError) as exc:
            logger.error("Failed to save interview session to %s: %s", self.path, exc)
            return False
        return True

    def _read(self, path: str) -> Optional[Session]:
        if not os.path.exists(path):
            return None
        try:
            with open(path, "r", encoding="utf-8") as handle:
                data = json.load(handle)
            if not isinstance(data, dict):
                raise ValueError("snapshot is not a JSON object")
            data.pop("savedAt", None)
            return Session.model_validate(data)
        except (OSError, ValueError, ValidationError) as exc:
            logger.error("Failed to load interview session from %s: %s", path, exc)
            return None

    def load(self) -> Optional[Session]:
        return self._read(self.path)

    def load_backup(self) -> Optional[Session]:
        return self._read(self.backup_path)

    def has_stored(self) -> bool:
        return os.path.exists(self.path)

    def clear(self) -> None:
        """Remove the current snapshot; the backup is kept."""

        self._remove(self.path)

    def clear_all(self) -> None:
        self._remove(self.path)
        self._remove(self.backup_path)

    def _remove(self, path: str) -> None:
        try:
            os.remove(path)
        except FileNotFoundError:
            return
        except OSError as exc:
            logger.error("Failed to clear interview session at %s: %s", path, exc)


__all__ = ["SessionStore"]
