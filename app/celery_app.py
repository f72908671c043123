"""Celery application instance for the reminder dispatcher.

Start the scheduler and a worker with:
    celery -A app.celery_app beat -l info
    celery -A app.celery_app worker -Q reminder -l info --concurrency=1
"""

from celery import Celery
from celery.schedules import crontab
from celery.signals import worker_init

from config import settings

celery_app = Celery("reminder_bot", broker=settings.BROKER_URL, backend=settings.BROKER_URL)

# Cron expressions are evaluated in the reference zone
celery_app.conf.timezone = settings.REMINDER_TIMEZONE
celery_app.conf.enable_utc = False

celery_app.conf.task_routes = {
    "app.workers.reminder.dispatch_due": {"queue": "reminder"},
}

# Beat schedule: dispatch due reminders every 5 minutes
celery_app.conf.beat_schedule = {
    "dispatch-due-reminders": {
        "task": "app.workers.reminder.dispatch_due",
        "schedule": crontab(minute="*/5"),
    }
}


@worker_init.connect
def _check_config(**_):
    settings.require()


# --- Ensure tasks are registered ---
import app.workers.reminder  # noqa: E402,F401
