"""Rating flow - peers approve or disapprove each other's goals."""
import logging
from typing import Optional

from daygoals.conversation.commands import Approve, Disapprove, ToMenu
from daygoals.conversation.transport import Choice, InboundEvent, Transport
from daygoals.models.user import FlowState, User
from daygoals.services.rating_service import RatingService
from daygoals.services.user_service import UserService

logger = logging.getLogger(__name__)


class RatingHandler:
    """Shows the pending binding and records votes on it."""

    def __init__(self, transport: Transport, users: UserService, ratings: RatingService):
        self.transport = transport
        self.users = users
        self.ratings = ratings

    async def handle(self, event: InboundEvent, user: Optional[User]) -> Optional[FlowState]:
        command = event.command()

        if isinstance(command, ToMenu):
            await self.users.update_state(event.peer(), FlowState.MENU)
            return FlowState.MENU
        if isinstance(command, (Approve, Disapprove)):
            try:
                await self.ratings.rate(
                    event.peer(),
                    command.user_goal_id,
                    isinstance(command, Approve),
                )
            except ValueError as e:
                logger.warning(f"Vote of peer {event.peer()} on {command.user_goal_id} dropped: {e}")

        await self.send_main(user)
        return None

    async def send_main(self, user: User) -> None:
        menu = Choice(label="Menu", command=ToMenu())
        review = await self.ratings.get_to_rate(user)

        if review is None:
            await self.transport.send(user.id, "You have rated everything for now", [menu])
            return

        await self.transport.send(
            user.id,
            review.text,
            [
                Choice(label="👍", command=Approve(user_goal_id=review.user_goal_id)),
                Choice(label="👎", command=Disapprove(user_goal_id=review.user_goal_id)),
                menu,
            ],
        )
