import unittest
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch

from celery.schedules import crontab
from helpers import make_session_factory

from shelfarr.exceptions import InvalidCronExpressionError
from shelfarr.services.organization_rules_service import OrganizationRulesService
from shelfarr.services.scan_scheduler import ReverseIndexScheduler
from shelfarr.utils.cron import parse_cron


class ParseCronTestCase(unittest.TestCase):
    def test_valid_expressions(self) -> None:
        for expression in ("0 * * * *", "*/15 2-4 * * 1-5", "30 3 1 1 *"):
            self.assertIsInstance(parse_cron(expression), crontab)

    def test_wrong_field_count(self) -> None:
        for expression in ("", "0 * * *", "0 0 * * * *", None):
            with self.assertRaises(InvalidCronExpressionError):
                parse_cron(expression)

    def test_out_of_range_values(self) -> None:
        with self.assertRaises(InvalidCronExpressionError):
            parse_cron("61 * * * *")


class SchedulerTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.session_factory = make_session_factory()
        self.scheduler = ReverseIndexScheduler(session_factory=self.session_factory, poll_interval=30.0)

    def update_settings(self, **updates) -> None:
        db = self.session_factory()
        try:
            OrganizationRulesService(db).update_settings(updates)
        finally:
            db.close()

    def test_due_after_the_schedule_elapsed(self) -> None:
        self.update_settings(reverse_indexing_cron="* * * * *")
        self.scheduler.last_run_at = datetime.now(timezone.utc) - timedelta(minutes=5)

        is_due, next_check = self.scheduler.check_due()

        self.assertTrue(is_due)
        self.assertLessEqual(next_check, 30.0)

    def test_disabled_scans_are_never_due(self) -> None:
        self.update_settings(enable_reverse_indexing=False)
        self.scheduler.last_run_at = datetime.now(timezone.utc) - timedelta(days=1)

        self.assertEqual(self.scheduler.check_due(), (False, 30.0))

    async def test_start_and_stop(self) -> None:
        with patch.object(self.scheduler, "check_due", return_value=(False, 30.0)):
            self.scheduler.start()
            self.assertTrue(self.scheduler.is_started)
            await self.scheduler.stop()
        self.assertFalse(self.scheduler.is_started)

    async def test_run_once_uses_scheduled_entry_point(self) -> None:
        with patch(
            "shelfarr.services.scan_scheduler.ReverseIndexingService.run_reverse_indexing",
            new_callable=AsyncMock,
        ) as run:
            await self.scheduler.run_once()
        run.assert_awaited_once()


if __name__ == "__main__":
    unittest.main()
