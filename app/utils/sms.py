from typing import Protocol

import telnyx


class SmsSender(Protocol):
    def send(self, to: str, body: str) -> None: ...


class TelnyxSmsSender:
    """Blocking Telnyx send; transport and API errors propagate."""

    def __init__(self, from_number: str, api_key: str | None = None, client=None):
        if client is None:
            client = telnyx.Telnyx(api_key=api_key)
        self._client = client
        self.from_number = from_number

    def send(self, to: str, body: str) -> None:
        self._client.messages.send(from_=self.from_number, to=to, text=body)

    def close(self) -> None:
        self._client.close()
