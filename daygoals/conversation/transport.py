"""Transport-facing protocols of the conversation layer."""
from typing import Optional, Protocol

from pydantic import BaseModel

from daygoals.conversation.commands import Command


class Sender(BaseModel):
    """Profile the transport knows about the sender of a turn."""

    first_name: str = ""
    last_name: str = ""
    city: str = ""


class Choice(BaseModel):
    """One menu option rendered by the transport."""

    label: str
    command: Command
    highlighted: bool = False


class InboundEvent(Protocol):
    """One inbound conversation turn."""

    def peer(self) -> int:
        ...

    def text(self) -> str:
        ...

    def command(self) -> Optional[Command]:
        ...

    def sender(self) -> Sender:
        ...


class Transport(Protocol):
    """Outbound side of a chat platform."""

    async def send(
        self,
        peer_id: int,
        text: str,
        choices: Optional[list[Choice]] = None,
    ) -> None:
        ...
