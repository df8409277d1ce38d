"""Registration flow - first contact of an unknown peer."""
import logging
from typing import Optional

import httpx

from daygoals.conversation.commands import Register
from daygoals.conversation.transport import Choice, InboundEvent, Transport
from daygoals.models.user import FlowState, User, UserCreate
from daygoals.services.geo_service import TimezoneResolver
from daygoals.services.user_service import UserService

logger = logging.getLogger(__name__)


class RegistrationHandler:
    """Offers registration and creates the user when accepted."""

    def __init__(
        self,
        transport: Transport,
        users: UserService,
        resolver: TimezoneResolver,
        default_timezone: str,
    ):
        self.transport = transport
        self.users = users
        self.resolver = resolver
        self.default_timezone = default_timezone

    async def handle(self, event: InboundEvent, user: Optional[User]) -> Optional[FlowState]:
        if isinstance(event.command(), Register):
            await self.register(event)
            return FlowState.MENU

        await self.send_main(event.peer())
        return None

    async def send_main(self, peer_id: int) -> None:
        await self.transport.send(
            peer_id,
            "Are you ready?",
            [Choice(label="Start", command=Register())],
        )

    async def register(self, event: InboundEvent) -> User:
        """Create the user, resolving the timezone from the sender's city."""
        sender = event.sender()
        timezone = self.default_timezone
        if sender.city:
            try:
                timezone = await self.resolver.resolve(sender.city)
            except (ValueError, httpx.HTTPError) as e:
                logger.warning(f"Falling back to {timezone} for peer {event.peer()}: {e}")

        return await self.users.register_user(
            UserCreate(
                id=event.peer(),
                first_name=sender.first_name,
                last_name=sender.last_name,
                city=sender.city,
                timezone=timezone,
            )
        )
