from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from app.types.reminder_contract import EventRecord, Recipient

NY = ZoneInfo("America/New_York")


class FakeStore:
    """In-memory stand-in for NotionEventStore.

    ``query_candidates`` mimics the database filter's ``Sent == false`` clause,
    so rows flipped by ``mark_sent`` disappear from later runs.
    """

    def __init__(self, events, recipients):
        self.events = list(events)
        self.recipients = {r.id: r for r in recipients}
        self.queried = []
        self.lookups = []
        self.marked = []
        self.mark_sent_error = None

    async def query_candidates(self, day):
        self.queried.append(day)
        return [e for e in self.events if not e.sent]

    async def get_recipient(self, recipient_id):
        self.lookups.append(recipient_id)
        if recipient_id not in self.recipients:
            raise LookupError(f"Could not find page with ID: {recipient_id}")
        return self.recipients[recipient_id]

    async def mark_sent(self, event_id):
        if self.mark_sent_error is not None:
            raise self.mark_sent_error
        for event in self.events:
            if event.id == event_id:
                event.sent = True
        self.marked.append(event_id)


class FakeComposer:
    def __init__(self):
        self.calls = []

    async def compose(self, recipient_name, event_name, event_datetime, voice, note):
        self.calls.append((recipient_name, event_name, event_datetime, voice, note))
        return f"Hey {recipient_name}, don't forget {event_name}!"


class FakeSender:
    def __init__(self):
        self.sent = []

    def send(self, to, body):
        self.sent.append((to, body))


class FakeLock:
    def __init__(self, owner, name):
        self.owner = owner
        self.name = name

    def acquire(self, blocking=True):
        if self.name in self.owner.held:
            return False
        self.owner.held.add(self.name)
        return True

    def release(self):
        self.owner.held.discard(self.name)
        if self.owner.release_error is not None:
            raise self.owner.release_error


class FakeRedis:
    def __init__(self):
        self.held = set()
        self.release_error = None
        self.requests = []

    def lock(self, name, timeout=None, blocking=True):
        self.requests.append((name, timeout, blocking))
        return FakeLock(self, name)


@pytest.fixture
def fake_redis(monkeypatch):
    """Route the run guard to an in-memory Redis."""
    from app.utils import run_lock

    client = FakeRedis()
    monkeypatch.setattr(run_lock, "_redis_client", lambda: client)
    return client


@pytest.fixture
def composer():
    return FakeComposer()


@pytest.fixture
def sender():
    return FakeSender()


@pytest.fixture
def make_store():
    return FakeStore


@pytest.fixture
def at():
    """Build an America/New_York datetime."""

    def _at(*args):
        return datetime(*args, tzinfo=NY)

    return _at


def event(event_id="evt-1", recipient="rcp-1", **kwargs):
    return EventRecord(
        id=event_id,
        recipient_ids=[recipient] if recipient else [],
        name=kwargs.pop("name", "Dentist"),
        voice=kwargs.pop("voice", "a pirate"),
        note=kwargs.pop("note", "Bring insurance card"),
        scheduled_date=kwargs.pop("scheduled_date", "2025-03-04T14:30:00.000-05:00"),
        **kwargs,
    )


def recipient(recipient_id="rcp-1", name="Alice", phone="+15551234567"):
    return Recipient(id=recipient_id, name=name, phone_number=phone)


@pytest.fixture
def make_event():
    return event


@pytest.fixture
def make_recipient():
    return recipient
