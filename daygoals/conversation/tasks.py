"""Tasks flow - planning goals and marking them done."""
import logging
from datetime import date, timedelta
from typing import Optional

from daygoals.conversation.commands import (
    ChangeDate,
    ChangeTask,
    ChangeType,
    ChooseGoal,
    CurrentTasks,
    ObserveDate,
    ObserveTasks,
    RemoveGoal,
    ToMenu,
    ToTasks,
    UpdateTask,
    UpdateType,
)
from daygoals.conversation.transport import Choice, InboundEvent, Transport
from daygoals.models.dialog import DialogState, TaskDraft
from daygoals.models.goal import Goal
from daygoals.models.user import FlowState, User
from daygoals.models.user_goal import Status, UserGoal
from daygoals.services.assignment_service import AssignmentService
from daygoals.services.catalog_service import CatalogService
from daygoals.services.dialog_service import DialogService
from daygoals.services.user_service import UserService
from daygoals.utils.timewindow import Clock, local_day, utc_now

logger = logging.getLogger(__name__)

FLOW = "tasks"
# How many days ahead the date picker offers
PLANNING_HORIZON = 6

STATUS_MARKS = {
    Status.SOON: "📝 Planned",
    Status.IN_PROGRESS: "🎯 In progress",
    Status.COMPLETE: "🍏 Done",
    Status.FAILED: "🍎 Failed",
}


class TasksHandler:
    """
    Planning and status flow.

    Choosing a goal takes several turns: pick a day, pick a category, then
    pick a catalog item or type free text. The day and category chosen so
    far are kept as a TaskDraft dialog state.
    """

    def __init__(
        self,
        transport: Transport,
        users: UserService,
        catalog: CatalogService,
        assignments: AssignmentService,
        dialogs: DialogService,
        clock: Clock = utc_now,
    ):
        self.transport = transport
        self.users = users
        self.catalog = catalog
        self.assignments = assignments
        self.dialogs = dialogs
        self._clock = clock

    def today(self, user: User) -> date:
        return local_day(self._clock(), user.timezone)

    async def handle(self, event: InboundEvent, user: Optional[User]) -> Optional[FlowState]:
        command = event.command()
        state = await self.dialogs.load(event.peer(), FLOW, TaskDraft)
        draft = state.params or TaskDraft()

        if isinstance(command, ToMenu):
            await self.users.update_state(event.peer(), FlowState.MENU)
            return FlowState.MENU

        if isinstance(command, CurrentTasks):
            if not await self.mark_goal_list(user, self.today(user)):
                await self.send_no_goals(user.id)
        elif isinstance(command, UpdateTask):
            today = self.today(user)
            if not await self.mark_goal_list(user, today):
                await self.send_no_goals(user.id)
                await self.send_main(user.id)
                return None
            await self.choose_mark_type(user, today)
        elif isinstance(command, UpdateType):
            today = self.today(user)
            await self.assignments.set_status(user, today, command.goal_type)
            await self.mark_goal_list(user, today)
            await self.choose_mark_type(user, today)
        elif isinstance(command, ObserveTasks):
            await self.choose_date(user, observe=True)
        elif isinstance(command, ObserveDate):
            await self.send_goal_list(user, command.day)
        elif isinstance(command, ChangeTask):
            await self.choose_date(user, observe=False)
        elif isinstance(command, ChangeDate):
            await self.send_goal_list(user, command.day)
            await self.choose_type(user, command.day)
        elif isinstance(command, ChangeType):
            await self.change_type(user, state, command)
        elif isinstance(command, ChooseGoal):
            await self.choose_goal(user, state, draft, command)
        elif isinstance(command, RemoveGoal):
            await self.remove_goal(user, state, draft, command)
        elif command is None and draft.awaiting_text:
            await self.input_goal(user, state, draft, event.text())
        else:
            await self.send_main(event.peer())

        return None

    async def change_type(self, user: User, state: DialogState, command: ChangeType) -> None:
        """Start choosing a goal for one category and day."""
        goal_type = await self.catalog.get_type(command.goal_type)
        if goal_type is None:
            raise ValueError("Goal type not found")

        draft = TaskDraft(day=command.day, goal_type=command.goal_type)
        await self.dialogs.set_params(state, draft)

        current = await self.assignments.get_by_type(user, command.day, command.goal_type)
        if current:
            await self.send_goal(user.id, current)

        if goal_type.from_list:
            await self.send_goal_choices(user.id, goal_type.id)
            return

        draft.awaiting_text = True
        await self.dialogs.set_params(state, draft)
        await self.transport.send(user.id, "Type your goal")

    async def choose_goal(self, user: User, state: DialogState, draft: TaskDraft, command: ChooseGoal) -> None:
        if draft.day is None or draft.goal_type is None:
            raise ValueError("No day or goal type chosen")

        goal = await self.catalog.get_goal(command.goal_id)
        if goal is None:
            raise ValueError("Goal not found")

        await self.assign(user, state, draft.day, goal)

    async def input_goal(self, user: User, state: DialogState, draft: TaskDraft, text: str) -> None:
        description = text.strip()
        if not description:
            await self.transport.send(user.id, "Type your goal")
            return

        goal = Goal(type=draft.goal_type, description=description)
        await self.assign(user, state, draft.day, goal)

    async def assign(self, user: User, state: DialogState, day: date, goal: Goal) -> None:
        await self.assignments.assign_goal(user, goal, day)
        await self.send_goal_list(user, day)
        await self.dialogs.clear(state)
        await self.choose_type(user, day)

    async def remove_goal(self, user: User, state: DialogState, draft: TaskDraft, command: RemoveGoal) -> None:
        await self.assignments.reject_goal(command.user_goal_id)
        await self.dialogs.clear(state)

        if draft.day is None:
            await self.send_main(user.id)
            return

        await self.send_goal_list(user, draft.day)
        await self.choose_type(user, draft.day)

    async def send_main(self, peer_id: int) -> None:
        await self.transport.send(
            peer_id,
            "Goals",
            [
                Choice(label="Today", command=CurrentTasks()),
                Choice(label="Mark done", command=UpdateTask()),
                Choice(label="Plan", command=ChangeTask()),
                Choice(label="Browse", command=ObserveTasks()),
                Choice(label="Menu", command=ToMenu()),
            ],
        )

    async def send_no_goals(self, peer_id: int) -> None:
        await self.transport.send(peer_id, "You haven't planned anything for this day")

    async def send_goal(self, peer_id: int, user_goal: UserGoal) -> None:
        goal = await self.catalog.get_goal(user_goal.goal_id)
        description = goal.description if goal else "?"
        await self.transport.send(
            peer_id,
            f"Current goal\n - {description}",
            [Choice(label="Remove", command=RemoveGoal(user_goal_id=user_goal.id))],
        )

    async def send_goal_list(self, user: User, day: date) -> None:
        """Send the plan of a day, one line per category."""
        by_type = {ug.type: ug for ug in await self.assignments.user_goals_for_day(user, day)}

        lines = []
        for goal_type in await self.catalog.list_types():
            user_goal = by_type.get(goal_type.id)
            if user_goal is None:
                lines.append(f"{goal_type.name}\n 📍 Not planned\n")
                continue
            goal = await self.catalog.get_goal(user_goal.goal_id)
            description = goal.description if goal else "?"
            lines.append(f"{goal_type.name}\n 💡 {description}\n")

        await self.transport.send(user.id, "\n".join(lines))

    async def mark_goal_list(self, user: User, day: date) -> bool:
        """
        Send the statuses of a day's goals.

        Returns:
            False if nothing is planned for the day, nothing is sent then
        """
        by_type = {ug.type: ug for ug in await self.assignments.user_goals_for_day(user, day)}

        lines = []
        for goal_type in await self.catalog.list_types():
            user_goal = by_type.get(goal_type.id)
            if user_goal is None:
                continue
            goal = await self.catalog.get_goal(user_goal.goal_id)
            description = goal.description if goal else "?"
            lines.append(
                f"{goal_type.name}\n 💡 {description}\n"
                f"Status - {STATUS_MARKS[user_goal.status]}\n"
            )

        if not lines:
            return False

        await self.transport.send(user.id, "\n".join(lines))
        return True

    async def choose_date(self, user: User, observe: bool) -> None:
        """Offer the next days; fully planned ones are highlighted."""
        today = self.today(user)
        choices = []
        for offset in range(1, PLANNING_HORIZON + 1):
            day = today + timedelta(days=offset)
            command = ObserveDate(day=day) if observe else ChangeDate(day=day)
            choices.append(Choice(
                label=day.strftime("%d %B"),
                command=command,
                highlighted=await self.assignments.check_date(user, day),
            ))
        choices.append(Choice(label="Back", command=ToTasks()))

        await self.transport.send(user.id, "Pick a day", choices)

    async def choose_mark_type(self, user: User, day: date) -> None:
        """Offer categories to toggle; completed ones are highlighted."""
        by_type = {ug.type: ug for ug in await self.assignments.user_goals_for_day(user, day)}

        choices = []
        for goal_type in await self.catalog.list_types():
            user_goal = by_type.get(goal_type.id)
            choices.append(Choice(
                label=goal_type.name,
                command=UpdateType(goal_type=goal_type.id),
                highlighted=user_goal is not None and user_goal.status == Status.COMPLETE,
            ))
        choices.append(Choice(label="Back", command=ToTasks()))

        await self.transport.send(user.id, "Mark what you have done", choices)

    async def choose_type(self, user: User, day: date) -> None:
        """Offer categories to plan; already planned ones are highlighted."""
        planned = {ug.type for ug in await self.assignments.user_goals_for_day(user, day)}

        choices = [
            Choice(
                label=goal_type.name,
                command=ChangeType(day=day, goal_type=goal_type.id),
                highlighted=goal_type.id in planned,
            )
            for goal_type in await self.catalog.list_types()
        ]
        choices.append(Choice(label="Back", command=ToTasks()))

        await self.transport.send(user.id, "Pick a category", choices)

    async def send_goal_choices(self, peer_id: int, type_id: int) -> None:
        goals = await self.catalog.list_goals(type_id)
        choices = [
            Choice(label=goal.description, command=ChooseGoal(goal_id=goal.id))
            for goal in goals
        ]
        choices.append(Choice(label="Back", command=ToTasks()))

        await self.transport.send(peer_id, "Pick a goal", choices)
