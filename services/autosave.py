"""Debounced and periodic autosave of the live session."""
from __future__ import annotations

import asyncio
import logging
from typing import Optional

from config.settings import settings
from graph.state import Session
from storage.session_store import SessionStore

logger = logging.getLogger(__name__)


class Autosaver:
    """Coalesces bursts of saves into one write and re-saves on a fixed interval.

    A request waits at most ``debounce_s`` before it is written, however many
    requests follow it. Outside a running event loop ``request`` writes
    straight through.
    """

    def __init__(
        self,
        store: SessionStore,
        *,
        debounce_s: Optional[float] = None,
        interval_s: Optional[float] = None,
    ):
        self.store = store
        self.debounce_s = settings.AUTOSAVE_DEBOUNCE_S if debounce_s is None else debounce_s
        self.interval_s = settings.AUTOSAVE_INTERVAL_S if interval_s is None else interval_s
        self.saves = 0
        self._latest: Optional[Session] = None
        self._pending: Optional[asyncio.Task] = None
        self._periodic: Optional[asyncio.Task] = None

    def request(self, session: Session) -> None:
        self._latest = session
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._save(session)
            return
        # A pending write picks up the latest snapshot; later requests never postpone it.
        if self._pending is not None and not self._pending.done():
            return
        self._pending = loop.create_task(self._debounced())

    async def _debounced(self) -> None:
        await asyncio.sleep(self.debounce_s)
        if self._latest is not None:
            self._save(self._latest)

    def flush(self) -> None:
        """Write the latest requested snapshot now and drop any pending debounce."""

        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None
        if self._latest is not None:
            self._save(self._latest)

    def forget(self) -> None:
        """Drop pending work without writing (used on discard/restart)."""

        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None
        self._latest = None

    @property
    def running(self) -> bool:
        return self._periodic is not None and not self._periodic.done()

    def start(self) -> None:
        if not self.running:
            self._periodic = asyncio.get_running_loop().create_task(self._run_periodic())

    async def stop(self) -> None:
        for task in (self._pending, self._periodic):
            if task is not None and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self._pending = None
        self._periodic = None

    async def _run_periodic(self) -> None:
        while True:
            await asyncio.sleep(self.interval_s)
            latest = self._latest
            if latest is not None and latest.current_state != "landing":
                self._save(latest)

    def _save(self, session: Session) -> None:
        if self.store.save(session):
            self.saves += 1
        else:
            logger.warning("Autosave failed for session %s", session.session_id)


__all__ = ["Autosaver"]
