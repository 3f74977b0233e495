"""Replay protection for client assertion JTIs."""

import asyncio
from datetime import datetime, timezone

from authstore.config import settings
from authstore.core.db import DatabaseSessionManager
from authstore.core.logging import get_logger
from authstore.core.types import utcnow
from authstore.errors import ReplayDetectedError, translate_db_errors
from authstore.repositories.jti_repository import JtiRepository

logger = get_logger(__name__)


class ReplayGuard:
    """Records client assertion JTIs and rejects replays until they expire."""

    def __init__(self, db_manager: DatabaseSessionManager):
        """Constructor."""
        self.db_manager = db_manager

    async def check_jti(self, jti: str) -> None:
        """Raise `ReplayDetectedError` if `jti` is known and not expired."""
        async with translate_db_errors("check_jti"):
            async with self.db_manager.session() as db:
                known = await JtiRepository(db).get_live(jti, utcnow())
        if known is not None:
            raise ReplayDetectedError(jti)

    async def check_and_record_jti(self, jti: str, expires_at: datetime) -> None:
        """Record `jti` until `expires_at`; raise if it is already recorded."""
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        async with translate_db_errors("record_jti"):
            async with self.db_manager.session() as db:
                async with db.begin():
                    recorded = await JtiRepository(db).record(
                        jti, expires_at, utcnow()
                    )
        if not recorded:
            logger.warning("jti_replay_detected")
            raise ReplayDetectedError(jti)

    async def prune_expired(self, now: datetime | None = None) -> int:
        """Delete expired JTI records; returns how many were removed."""
        async with translate_db_errors("prune_jti"):
            async with self.db_manager.session() as db:
                async with db.begin():
                    removed = await JtiRepository(db).delete_expired(now or utcnow())
        if removed:
            logger.info("jti_pruned", removed=removed)
        return removed


class JtiPruner:
    """Background task that periodically prunes expired JTIs."""

    def __init__(self, guard: ReplayGuard, interval: float | None = None):
        """Constructor."""
        self.guard = guard
        self.interval = interval or settings.JTI_PRUNE_INTERVAL
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        """Whether the loop task is alive."""
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the loop; calling it twice keeps the first task."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="jti-pruner")

    async def stop(self) -> None:
        """Cancel the loop and wait for it to finish."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        except Exception:
            logger.exception("jti_pruner_stop_failed")

    async def _run(self) -> None:
        """Prune, then sleep, until cancelled."""
        while True:
            try:
                await self.guard.prune_expired()
            except Exception:
                logger.exception("jti_prune_failed")
            await asyncio.sleep(self.interval)
