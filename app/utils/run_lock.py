"""Single-flight guard for the periodic dispatch run.

The guard is a Redis lock on the Celery broker's Redis, so it is shared by
every worker, beat and one-shot script process.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

import redis
from redis.exceptions import LockError

from config import settings

_LOGGER = logging.getLogger(__name__)

_client: redis.Redis | None = None


def _redis_client() -> redis.Redis:
    global _client
    if _client is None:
        _client = redis.Redis.from_url(settings.BROKER_URL)
    return _client


@contextmanager
def run_guard(name: str, ttl: int) -> Iterator[bool]:
    """Yield True if this caller owns the run, False if another run holds it.

    Never blocks. *ttl* (seconds) bounds how long a crashed run can hold the
    lock.
    """
    lock = _redis_client().lock(name, timeout=ttl, blocking=False)
    acquired = lock.acquire(blocking=False)
    try:
        yield acquired
    finally:
        if acquired:
            try:
                lock.release()
            except LockError:
                _LOGGER.warning("Run lock %s expired before release (ttl=%ss)", name, ttl)
