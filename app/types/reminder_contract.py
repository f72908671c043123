"""Pydantic models for the records the dispatcher reads from Notion.

The Notion API returns every page as a nested ``properties`` mapping whose
shape depends on the property type (title, rich_text, relation, date, ...).
``from_page`` flattens those shapes into plain fields so the pipeline never
touches raw API payloads.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

# Property names in the reminders database
EVENT_RECIPIENT = "Recipient"
EVENT_NAME = "Name"
EVENT_VOICE = "Voice"
EVENT_NOTE = "Note"
EVENT_DATE = "Date"
EVENT_REMIND_AT = "Remind at"
EVENT_SENT = "Sent"

# Property names in the recipients database
RECIPIENT_NAME = "Name"
RECIPIENT_PHONE = "Phone"


# ──────────────────────────────
# Property helpers
# ──────────────────────────────


def _first_plain_text(prop: Optional[Dict[str, Any]], kind: str) -> Optional[str]:
    """Return the first fragment's ``plain_text`` of a title/rich_text property."""
    fragments = (prop or {}).get(kind) or []
    if not fragments:
        return None
    return fragments[0].get("plain_text") or None


def _date_start(prop: Optional[Dict[str, Any]]) -> Optional[str]:
    date = (prop or {}).get("date")
    if not date:
        return None
    return date.get("start") or None


def _relation_ids(prop: Optional[Dict[str, Any]]) -> List[str]:
    return [link["id"] for link in (prop or {}).get("relation") or [] if link.get("id")]


# ──────────────────────────────
# Records
# ──────────────────────────────


class EventRecord(BaseModel):
    """One scheduled reminder row."""

    id: str
    recipient_ids: List[str] = Field(default_factory=list)
    name: Optional[str] = None
    voice: Optional[str] = None
    note: Optional[str] = None
    scheduled_date: Optional[str] = None  # raw ISO string, embedded in the prompt as-is
    remind_at: Optional[datetime] = None
    sent: bool = False

    @field_validator("remind_at", mode="before")
    def _parse_iso(cls, v):  # noqa: N805
        # Notion sends "2024-05-01", "2024-05-01T09:00:00.000-04:00" or "...Z"
        if isinstance(v, str):
            return datetime.fromisoformat(v)
        return v

    @property
    def recipient_ref(self) -> Optional[str]:
        """First linked recipient; extra links are ignored."""
        return self.recipient_ids[0] if self.recipient_ids else None

    @classmethod
    def from_page(cls, page: Dict[str, Any]) -> "EventRecord":
        props = page.get("properties") or {}
        return cls(
            id=page["id"],
            recipient_ids=_relation_ids(props.get(EVENT_RECIPIENT)),
            name=_first_plain_text(props.get(EVENT_NAME), "title"),
            voice=_first_plain_text(props.get(EVENT_VOICE), "rich_text"),
            note=_first_plain_text(props.get(EVENT_NOTE), "rich_text"),
            scheduled_date=_date_start(props.get(EVENT_DATE)),
            remind_at=_date_start(props.get(EVENT_REMIND_AT)),
            sent=bool((props.get(EVENT_SENT) or {}).get("checkbox", False)),
        )


class Recipient(BaseModel):
    """Contact a reminder is delivered to. Read-only."""

    id: str
    name: Optional[str] = None
    phone_number: Optional[str] = None

    @field_validator("phone_number")
    def _blank_to_none(cls, v):  # noqa: N805
        if v is not None and not v.strip():
            return None
        return v

    @classmethod
    def from_page(cls, page: Dict[str, Any]) -> "Recipient":
        props = page.get("properties") or {}
        return cls(
            id=page["id"],
            name=_first_plain_text(props.get(RECIPIENT_NAME), "title"),
            phone_number=(props.get(RECIPIENT_PHONE) or {}).get("phone_number"),
        )


class RunSummary(BaseModel):
    """What a single pipeline run did."""

    now: datetime
    candidates: int = 0
    eligible: int = 0
    sent: List[str] = Field(default_factory=list)
    skipped: List[str] = Field(default_factory=list)
