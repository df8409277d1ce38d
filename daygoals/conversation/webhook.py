"""JSON webhook transport.

Inbound turns arrive as JSON bodies on the API; outbound messages are
POSTed to a configured URL.
"""
import logging
from typing import Any, Optional

import httpx
from pydantic import BaseModel, Field

from daygoals.conversation.commands import Command, parse_command
from daygoals.conversation.transport import Choice, Sender

logger = logging.getLogger(__name__)


class WebhookEventBody(BaseModel):
    """Wire shape of an inbound turn."""

    peer_id: int
    text: str = ""
    command: Optional[str] = None
    params: dict[str, Any] = Field(default_factory=dict)
    sender: Sender = Field(default_factory=Sender)


class WebhookEvent:
    """InboundEvent decoded from a webhook body.

    Raises MalformedCommandError on construction if the command is bad.
    """

    def __init__(self, body: WebhookEventBody):
        self._body = body
        self._command: Optional[Command] = None
        if body.command:
            self._command = parse_command(body.command, body.params)

    def peer(self) -> int:
        return self._body.peer_id

    def text(self) -> str:
        return self._body.text

    def command(self) -> Optional[Command]:
        return self._command

    def sender(self) -> Sender:
        return self._body.sender


class HttpTransport:
    """Deliver outbound messages to a webhook URL."""

    def __init__(self, url: str, client: httpx.AsyncClient | None = None):
        self.url = url
        self._client = client or httpx.AsyncClient(timeout=10)

    async def send(
        self,
        peer_id: int,
        text: str,
        choices: Optional[list[Choice]] = None,
    ) -> None:
        payload = {
            "peer_id": peer_id,
            "text": text,
            "choices": [choice.model_dump(mode="json") for choice in choices or []],
        }
        response = await self._client.post(self.url, json=payload)
        response.raise_for_status()

    async def close(self) -> None:
        await self._client.aclose()
