"""Periodic reminder dispatch task."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from app.celery_app import celery_app
from app.services import reminder_pipeline
from app.types.reminder_contract import RunSummary
from app.utils.run_lock import run_guard
from config import settings

_LOGGER = logging.getLogger(__name__)

LOCK_NAME = "reminders:dispatch-due"


def run_guarded(now: datetime | None = None) -> RunSummary | None:
    """Run one pipeline tick unless another tick is still in flight.

    Returns None when the tick was skipped. Pipeline errors propagate.
    """
    with run_guard(LOCK_NAME, ttl=settings.REMINDER_LOCK_TTL) as acquired:
        if not acquired:
            _LOGGER.warning("Previous reminder run still in progress; skipping this tick")
            return None
        return asyncio.run(reminder_pipeline.run_tick(now))


# ---------------------------------------------------------------------------
# Celery Tasks
# ---------------------------------------------------------------------------

@celery_app.task(name="app.workers.reminder.dispatch_due", bind=True)
def dispatch_due(self):  # noqa: D401
    """Send every reminder due on this tick.

    Failures are logged and not retried here: unsent rows are picked up again
    by the next scheduled tick.
    """
    try:
        summary = run_guarded()
    except Exception:  # noqa: BLE001
        _LOGGER.exception("Error sending notifications")
        return None

    if summary is None:
        return None
    _LOGGER.info(
        "Notifications sent and marked as sent (%d sent, %d skipped)",
        len(summary.sent),
        len(summary.skipped),
    )
    return summary.model_dump(mode="json")
