"""Outbound notification delivery."""
import logging

from daygoals.conversation.tasks import TasksHandler
from daygoals.conversation.transport import Transport
from daygoals.models.message import Message
from daygoals.models.user import FlowState
from daygoals.services.notification_service import DISAPPROVE, MARK_TASKS, NEXT_DAY, TASK_LIST
from daygoals.services.user_service import UserService

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Renders queued notifications and sends them through the transport."""

    def __init__(self, transport: Transport, users: UserService, tasks: TasksHandler):
        self.transport = transport
        self.users = users
        self.tasks = tasks

    async def deliver(self, message: Message) -> None:
        user = message.user

        if message.code == DISAPPROVE:
            await self.transport.send(user.id, message.text)
        elif message.code == NEXT_DAY:
            await self.transport.send(user.id, "Don't forget to plan your goals for tomorrow")
        elif message.code == TASK_LIST:
            await self.tasks.send_goal_list(user, self.tasks.today(user))
            await self.transport.send(user.id, "Good morning! Here are your goals for today")
        elif message.code == MARK_TASKS:
            if not await self.tasks.mark_goal_list(user, self.tasks.today(user)):
                logger.debug(f"Nothing to mark for user {user.id}")
                return
            await self.users.update_state(user.id, FlowState.TASKS)
            await self.transport.send(user.id, "Good evening! Update the status of your goals")
            await self.tasks.send_main(user.id)
        else:
            logger.warning(f"Unknown notification code {message.code!r} for user {user.id}")
