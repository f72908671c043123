"""Run one reminder dispatch tick and exit.

For platforms that schedule a command instead of Celery beat, e.g. every
5 minutes (America/New_York):
    python -m app.scripts.scan_due_reminders
"""

from __future__ import annotations

import logging
import sys

from app.workers.reminder import run_guarded

_LOGGER = logging.getLogger(__name__)


def main() -> int:
    summary = run_guarded()
    if summary is None:
        print("[CRON] scan_due_reminders: previous run still active, skipped")
        return 0
    print(f"[CRON] scan_due_reminders: {len(summary.sent)} sent, {len(summary.skipped)} skipped")
    return 0


def run() -> int:
    """Process exit code: 0 on success or skipped tick, 1 on failure."""
    print("[CRON] scan_due_reminders: job started")
    try:
        code = main()
    except Exception as e:  # noqa: BLE001
        _LOGGER.exception("Error sending notifications")
        print(f"[CRON] scan_due_reminders: job failed: {e}")
        return 1
    print("[CRON] scan_due_reminders: job completed successfully")
    return code


if __name__ == "__main__":  # pragma: no cover
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    sys.exit(run())
