"""
Reminder pipeline: Notion rows → due filter → recipient → LLM text → SMS → Sent.

Flow (one run):
1. Compute ``now`` and ``today`` in the reference time zone.
2. Query unsent candidates for ``today``.
3. Keep rows that are due this tick (see ``app.utils.time_window.is_due``).
4. For each, in query order: resolve the recipient, compose, send, mark sent.

Rows without a recipient link or without a phone number are skipped and stay
unsent, so they are looked at again on the next tick. Any collaborator error
stops the run; ``sent`` is only flipped after a successful send, so a failure
in ``mark_sent`` can lead to the same reminder going out twice.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import AsyncExitStack
from datetime import datetime, tzinfo
from typing import Protocol

from openai import AsyncOpenAI

from app.services.message_composer import MessageComposer
from app.types.reminder_contract import EventRecord, Recipient, RunSummary
from app.utils.sms import SmsSender, TelnyxSmsSender
from app.utils.time_window import get_zone, is_due
from config import Settings, settings
from db import NotionEventStore

_LOGGER = logging.getLogger(__name__)

UNKNOWN_RECIPIENT = "Unknown"
UNNAMED_EVENT = "No Event Name"


class EventStore(Protocol):
    async def query_candidates(self, day) -> list[EventRecord]: ...
    async def get_recipient(self, recipient_id: str) -> Recipient: ...
    async def mark_sent(self, event_id: str) -> None: ...


class Composer(Protocol):
    async def compose(
        self, recipient_name: str, event_name: str, event_datetime: str, voice: str, note: str
    ) -> str: ...


class ReminderPipeline:
    def __init__(
        self,
        store: EventStore,
        composer: Composer,
        sender: SmsSender,
        timezone: str | tzinfo = "America/New_York",
    ):
        self.store = store
        self.composer = composer
        self.sender = sender
        self.tz = get_zone(timezone)

    async def run(self, now: datetime | None = None) -> RunSummary:
        if now is not None and now.tzinfo is None:
            raise ValueError("now must be timezone-aware")
        now = (now or datetime.now(self.tz)).astimezone(self.tz)
        summary = RunSummary(now=now)

        candidates = await self.store.query_candidates(now.date())
        summary.candidates = len(candidates)
        due = [event for event in candidates if is_due(event, now, self.tz)]
        summary.eligible = len(due)
        _LOGGER.info("%d candidate(s), %d due at %s", len(candidates), len(due), now.isoformat())

        for event in due:
            if await self._notify(event):
                summary.sent.append(event.id)
            else:
                summary.skipped.append(event.id)
        return summary

    async def _notify(self, event: EventRecord) -> bool:
        recipient_id = event.recipient_ref
        if not recipient_id:
            _LOGGER.error("No recipient found for event: %s", event.id)
            return False

        recipient = await self.store.get_recipient(recipient_id)
        if not recipient.phone_number:
            _LOGGER.info("Recipient %s has no phone number; leaving event %s unsent", recipient.id, event.id)
            return False

        message = await self.composer.compose(
            recipient.name or UNKNOWN_RECIPIENT,
            event.name or UNNAMED_EVENT,
            event.scheduled_date or "",
            event.voice or "",
            event.note or "",
        )
        await asyncio.to_thread(self.sender.send, recipient.phone_number, message)
        await self.store.mark_sent(event.id)
        _LOGGER.info("Reminder sent for event %s", event.id)
        return True

    async def aclose(self) -> None:
        """Close every collaborator that owns a client, even if one close fails."""
        async with AsyncExitStack() as stack:
            for part in (self.store, self.composer, self.sender):
                if hasattr(part, "aclose"):
                    stack.push_async_callback(part.aclose)
                elif hasattr(part, "close"):
                    stack.callback(part.close)


# ─────────────────────────── wiring ─────────────────────────── #

def build_pipeline(cfg: Settings = settings) -> ReminderPipeline:
    """Construct the production pipeline; fails fast on missing credentials."""
    cfg.require()
    store = NotionEventStore(cfg.NOTION_DATABASE_ID, auth=cfg.NOTION_API_KEY)
    composer = MessageComposer(
        AsyncOpenAI(
            api_key=cfg.OPENAI_API_KEY,
            organization=cfg.OPENAI_ORGANIZATION_ID,
            project=cfg.OPENAI_PROJECT_ID,
        ),
        model=cfg.OPENAI_MODEL,
        timeout=cfg.OPENAI_TIMEOUT,
    )
    sender = TelnyxSmsSender(cfg.TELNYX_FROM_NUMBER, api_key=cfg.TELNYX_API_KEY)
    return ReminderPipeline(store, composer, sender, timezone=cfg.REMINDER_TIMEZONE)


async def run_tick(now: datetime | None = None) -> RunSummary:
    """Build a pipeline, run it once and release its HTTP clients.

    Clients are created per tick because every tick runs in its own event loop.
    """
    pipeline = build_pipeline()
    try:
        return await pipeline.run(now)
    finally:
        await pipeline.aclose()
