"""Turn routing - runs flow handlers until one ends the turn."""
import logging
from typing import Optional, Protocol

from daygoals.conversation.registration import RegistrationHandler
from daygoals.conversation.transport import InboundEvent
from daygoals.models.user import FlowState, User
from daygoals.services.user_service import UserService

logger = logging.getLogger(__name__)

# A turn passes through at most this many handlers
MAX_HOPS = 8


class FlowHandler(Protocol):
    async def handle(self, event: InboundEvent, user: Optional[User]) -> Optional[FlowState]:
        ...


class ConversationRouter:
    """
    Entry point for inbound turns.

    Unknown peers go to registration. Known peers start in their stored
    flow; a handler returning another flow hands the same event on to it,
    and returning None ends the turn.
    """

    def __init__(
        self,
        users: UserService,
        registration: RegistrationHandler,
        handlers: dict[FlowState, FlowHandler],
    ):
        self.users = users
        self.registration = registration
        self.handlers = handlers

    async def handle(self, event: InboundEvent) -> None:
        """Handle one turn. Failures are logged and end the turn without a reply."""
        try:
            await self._handle(event)
        except Exception:
            logger.exception(f"Turn of peer {event.peer()} failed")

    async def _handle(self, event: InboundEvent) -> None:
        user = await self.users.get_user(event.peer())

        if user is None:
            state = await self.registration.handle(event, None)
            if state is None:
                return
            user = await self.users.get_user(event.peer())
        else:
            state = user.state

        for _ in range(MAX_HOPS):
            handler = self.handlers.get(state)
            if handler is None:
                return
            state = await handler.handle(event, user)
            if state is None:
                return

        logger.warning(f"Turn of peer {event.peer()} stopped after {MAX_HOPS} hops")
