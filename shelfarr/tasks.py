"""
Shelfarr v1.0.0 - Celery Tasks
Background tasks for library scanning
"""

import asyncio
import logging
from typing import Optional

from celery import Celery
from celery.signals import worker_process_init

from .config import settings

logger = logging.getLogger(__name__)

# Initialize Celery
celery_app = Celery(
    "shelfarr",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
)


BEAT_ENTRY_NAME = "reverse-index-library"
DEFAULT_CRON = "0 * * * *"


@celery_app.on_after_configure.connect
def setup_periodic_tasks(sender, **kwargs):
    """Register the library scan on the cron stored in organization settings"""
    if settings.SCAN_SCHEDULER != "celery":
        return

    from sqlalchemy.exc import SQLAlchemyError

    from .database import SessionLocal
    from .exceptions import InvalidCronExpressionError
    from .services.organization_rules_service import OrganizationRulesService
    from .utils.cron import parse_cron

    expression = DEFAULT_CRON
    db = SessionLocal()
    try:
        expression = OrganizationRulesService(db).get_settings().reverse_indexing_cron
    except SQLAlchemyError as e:
        logger.error(f"Could not read reverse indexing schedule, using {DEFAULT_CRON}: {e}")
    finally:
        db.close()

    try:
        schedule = parse_cron(expression, app=sender)
    except InvalidCronExpressionError as e:
        logger.error(f"{e}; using {DEFAULT_CRON}")
        schedule = parse_cron(DEFAULT_CRON, app=sender)

    sender.add_periodic_task(schedule, reverse_index_task.s(), name=BEAT_ENTRY_NAME)


@worker_process_init.connect
def configure_worker_logging(**kwargs):
    from .utils.logging_setup import setup_logging

    setup_logging(settings.LOG_LEVEL)


@celery_app.task(name="shelfarr.tasks.reverse_index_task")
def reverse_index_task() -> dict:
    """
    Scheduled library scan

    Honours enable_reverse_indexing; a scan already running in this
    worker process makes the call a no-op.

    Returns:
        dict: Scan summary (empty when nothing ran)
    """
    from .database import SessionLocal
    from .services.reverse_indexing_service import ReverseIndexingService

    db = SessionLocal()
    try:
        service = ReverseIndexingService(db)

        # Create event loop and run async function
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        try:
            results = loop.run_until_complete(service.run_reverse_indexing())
            return results.model_dump() if results else {}
        finally:
            loop.close()
    finally:
        db.close()


@celery_app.task(name="shelfarr.tasks.season_scan_task")
def season_scan_task(request_id: Optional[str] = None) -> dict:
    """Episode coverage scan for one TV request, or all of them"""
    from .database import SessionLocal
    from .services.season_scanning_service import SeasonScanningService

    db = SessionLocal()
    try:
        service = SeasonScanningService(db)
        if request_id:
            return service.scan_tv_show_request(request_id).model_dump()
        return service.scan_all_seasons().model_dump()
    finally:
        db.close()
