"""Main menu flow."""
from typing import Optional

from daygoals.conversation.commands import ToRate, ToTasks
from daygoals.conversation.transport import Choice, InboundEvent, Transport
from daygoals.models.user import FlowState, User
from daygoals.services.user_service import UserService


class MenuHandler:
    """Routes the user to the tasks or rating flow."""

    def __init__(self, transport: Transport, users: UserService):
        self.transport = transport
        self.users = users

    async def handle(self, event: InboundEvent, user: Optional[User]) -> Optional[FlowState]:
        command = event.command()

        if isinstance(command, ToTasks):
            await self.users.update_state(event.peer(), FlowState.TASKS)
            return FlowState.TASKS
        if isinstance(command, ToRate):
            await self.users.update_state(event.peer(), FlowState.RATE)
            return FlowState.RATE

        await self.send_main(event.peer())
        return None

    async def send_main(self, peer_id: int) -> None:
        await self.transport.send(
            peer_id,
            "Main menu",
            [
                Choice(label="Goals", command=ToTasks()),
                Choice(label="Rate others", command=ToRate()),
            ],
        )
