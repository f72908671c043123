from types import SimpleNamespace

import openai
import pytest

from app.services.message_composer import FALLBACK_MESSAGE, SYSTEM_PROMPT, MessageComposer, build_messages


class FakeCompletions:
    def __init__(self, content=None, error=None, choices=True):
        self.content = content
        self.error = error
        self.choices = choices
        self.requests = []

    async def create(self, **kwargs):
        self.requests.append(kwargs)
        if self.error is not None:
            raise self.error
        if not self.choices:
            return SimpleNamespace(choices=[])
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=self.content))])


def _client(completions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


def test_build_messages_embeds_every_field():
    messages = build_messages("Alice", "Dentist", "2025-03-04T14:30", "a pirate", "Bring card")
    assert messages[0] == {"role": "system", "content": SYSTEM_PROMPT}
    assert messages[1]["role"] == "user"
    assert messages[1]["content"] == (
        "Write a friendly reminder message for Alice about their event 'Dentist' "
        "scheduled at 2025-03-04T14:30. Here's some more context about the event: "
        "'Bring card'. Use the voice of a pirate."
    )


@pytest.mark.asyncio
async def test_compose_returns_trimmed_completion():
    completions = FakeCompletions(content="  Ahoy Alice, dentist at 2:30!\n")
    composer = MessageComposer(_client(completions), model="gpt-4", timeout=12)

    text = await composer.compose("Alice", "Dentist", "2025-03-04T14:30", "a pirate", "Bring card")

    assert text == "Ahoy Alice, dentist at 2:30!"
    (request,) = completions.requests
    assert request["model"] == "gpt-4"
    assert request["timeout"] == 12
    assert len(request["messages"]) == 2


@pytest.mark.asyncio
@pytest.mark.parametrize("completions", [FakeCompletions(content=None), FakeCompletions(content="   "), FakeCompletions(choices=False)])
async def test_compose_falls_back_on_empty_response(completions):
    composer = MessageComposer(_client(completions))
    assert await composer.compose("Alice", "Dentist", "", "", "") == FALLBACK_MESSAGE


@pytest.mark.asyncio
async def test_compose_errors_propagate_without_retry():
    completions = FakeCompletions(error=openai.OpenAIError("quota exceeded"))
    composer = MessageComposer(_client(completions))

    with pytest.raises(openai.OpenAIError):
        await composer.compose("Alice", "Dentist", "", "", "")
    assert len(completions.requests) == 1
