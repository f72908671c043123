"""
LLM-backed reminder writer.

Turns the structured fields of a reminder row into one friendly SMS body.
"""

from __future__ import annotations

import logging
from typing import List

from openai import AsyncOpenAI
from openai.types.chat import ChatCompletionMessageParam

_LOGGER = logging.getLogger(__name__)

# ──────────────────────────────────────────────────────────────────────────
# Prompts
# ──────────────────────────────────────────────────────────────────────────

SYSTEM_PROMPT = "You are a friendly reminder bot."

_USER_TEMPLATE = (
    "Write a friendly reminder message for {recipient_name} about their event "
    "'{event_name}' scheduled at {event_datetime}. "
    "Here's some more context about the event: '{note}'. "
    "Use the voice of {voice}."
)

FALLBACK_MESSAGE = "Just a friendly reminder :)"


def build_messages(
    recipient_name: str,
    event_name: str,
    event_datetime: str,
    voice: str,
    note: str,
) -> List[ChatCompletionMessageParam]:
    prompt = _USER_TEMPLATE.format(
        recipient_name=recipient_name,
        event_name=event_name,
        event_datetime=event_datetime,
        note=note,
        voice=voice,
    )
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": prompt},
    ]


class MessageComposer:
    """Single chat completion per reminder. OpenAI errors propagate."""

    def __init__(
        self,
        client: AsyncOpenAI,
        model: str = "gpt-4",
        timeout: float = 30,
    ):
        self._client = client
        self._model = model
        self._timeout = timeout

    async def compose(
        self,
        recipient_name: str,
        event_name: str,
        event_datetime: str,
        voice: str,
        note: str,
    ) -> str:
        response = await self._client.chat.completions.create(
            model=self._model,
            messages=build_messages(recipient_name, event_name, event_datetime, voice, note),
            timeout=self._timeout,
        )
        content = response.choices[0].message.content if response.choices else None
        text = (content or "").strip()
        if not text:
            _LOGGER.warning("Empty completion for event %r; using fallback text", event_name)
            return FALLBACK_MESSAGE
        return text

    async def aclose(self) -> None:
        await self._client.close()
