"""
Async Notion helpers for the reminders database.
Uses the official notion-client SDK; every call is a single request, no paging.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from notion_client import AsyncClient

from app.types.reminder_contract import (
    EVENT_DATE,
    EVENT_REMIND_AT,
    EVENT_SENT,
    EventRecord,
    Recipient,
)

_LOGGER = logging.getLogger(__name__)


# ──────────────────────────────────────────────────────────────────────
# 1. Query filter
# ──────────────────────────────────────────────────────────────────────
def candidate_filter(day: date) -> dict[str, Any]:
    """Unsent rows scheduled for *day*, or with a "Remind at" on/after *day*."""
    today = day.strftime("%Y-%m-%d")
    unsent = {"property": EVENT_SENT, "checkbox": {"equals": False}}
    return {
        "or": [
            {"and": [{"property": EVENT_DATE, "date": {"equals": today}}, unsent]},
            {"and": [{"property": EVENT_REMIND_AT, "date": {"on_or_after": today}}, unsent]},
        ]
    }


# ──────────────────────────────────────────────────────────────────────
# 2. Store
# ──────────────────────────────────────────────────────────────────────
class NotionEventStore:
    def __init__(self, database_id: str, *, auth: str | None = None, client: AsyncClient | None = None):
        if client is None:
            client = AsyncClient(auth=auth)
        self._client = client
        self._database_id = database_id

    # 2.1 Candidates ---------------------------------------------------
    async def query_candidates(self, day: date) -> list[EventRecord]:
        response = await self._client.databases.query(
            database_id=self._database_id,
            filter=candidate_filter(day),
        )
        pages = response.get("results", [])
        _LOGGER.debug("Notion returned %d candidate(s) for %s", len(pages), day)
        return [EventRecord.from_page(page) for page in pages]

    # 2.2 Recipient lookup ---------------------------------------------
    async def get_recipient(self, recipient_id: str) -> Recipient:
        page = await self._client.pages.retrieve(page_id=recipient_id)
        return Recipient.from_page(page)

    # 2.3 Mark sent ----------------------------------------------------
    async def mark_sent(self, event_id: str) -> None:
        await self._client.pages.update(
            page_id=event_id,
            properties={EVENT_SENT: {"checkbox": True}},
        )

    async def aclose(self) -> None:
        await self._client.aclose()
