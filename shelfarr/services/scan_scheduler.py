"""
Shelfarr v1.0.0 - Reverse Indexing Scheduler
Fire library scans on the cron expression stored in organization settings
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Optional, Tuple

from sqlalchemy.orm import Session

from ..database import SessionLocal
from ..exceptions import InvalidCronExpressionError
from ..utils.cron import parse_cron
from .organization_rules_service import OrganizationRulesService
from .reverse_indexing_service import ReverseIndexingService

logger = logging.getLogger(__name__)


class ReverseIndexScheduler:
    """
    In-process scheduler running on the application's event loop

    The cron expression and the enable flag are re-read from the database
    on every tick, so settings changes apply without a restart.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        poll_interval: float = 60.0,
    ):
        self.session_factory = session_factory
        self.poll_interval = poll_interval
        self.last_run_at = datetime.now(timezone.utc)
        self._task: Optional[asyncio.Task] = None

    @property
    def is_started(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.is_started:
            return
        self.last_run_at = datetime.now(timezone.utc)
        self._task = asyncio.create_task(self._loop())
        logger.info("Reverse indexing scheduler started")

    async def stop(self) -> None:
        if not self._task:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Reverse indexing scheduler stopped")

    def check_due(self) -> Tuple[bool, float]:
        """
        Whether a scan is due now, and seconds until the next check

        Returns (False, poll_interval) when scans are disabled or the
        stored expression is invalid.
        """
        db = self.session_factory()
        try:
            org_settings = OrganizationRulesService(db).get_settings()
            enabled = org_settings.enable_reverse_indexing
            expression = org_settings.reverse_indexing_cron
        finally:
            db.close()

        if not enabled:
            return False, self.poll_interval

        try:
            schedule = parse_cron(expression)
        except InvalidCronExpressionError as e:
            logger.error(f"Reverse indexing schedule ignored: {e}")
            return False, self.poll_interval

        is_due, next_check = schedule.is_due(self.last_run_at)
        return is_due, min(float(next_check), self.poll_interval)

    async def run_once(self) -> None:
        db = self.session_factory()
        try:
            await ReverseIndexingService(db).run_reverse_indexing()
        finally:
            db.close()

    async def _loop(self) -> None:
        while True:
            delay = self.poll_interval
            try:
                is_due, delay = self.check_due()
                if is_due:
                    self.last_run_at = datetime.now(timezone.utc)
                    await self.run_once()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Scheduled reverse indexing failed: {e}")

            await asyncio.sleep(max(delay, 1.0))
