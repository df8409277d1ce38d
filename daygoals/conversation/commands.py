"""Inbound command kinds.

Every command a menu button can carry is one model here, tagged by kind.
Payloads are decoded once, at the transport boundary, with parse_command.
"""
from datetime import date
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from daygoals.exceptions import MalformedCommandError


class Register(BaseModel):
    kind: Literal["register"] = "register"


class ToMenu(BaseModel):
    kind: Literal["menu"] = "menu"


class ToTasks(BaseModel):
    kind: Literal["to_tasks"] = "to_tasks"


class ToRate(BaseModel):
    kind: Literal["to_rate"] = "to_rate"


class CurrentTasks(BaseModel):
    kind: Literal["current_tasks"] = "current_tasks"


class UpdateTask(BaseModel):
    kind: Literal["update_task"] = "update_task"


class UpdateType(BaseModel):
    kind: Literal["update_type"] = "update_type"
    goal_type: int


class ObserveTasks(BaseModel):
    kind: Literal["observe_tasks"] = "observe_tasks"


class ObserveDate(BaseModel):
    kind: Literal["observe_date"] = "observe_date"
    day: date


class ChangeTask(BaseModel):
    kind: Literal["change_task"] = "change_task"


class ChangeDate(BaseModel):
    kind: Literal["change_date"] = "change_date"
    day: date


class ChangeType(BaseModel):
    kind: Literal["change_type"] = "change_type"
    day: date
    goal_type: int


class ChooseGoal(BaseModel):
    kind: Literal["choose_goal"] = "choose_goal"
    goal_id: str


class RemoveGoal(BaseModel):
    kind: Literal["remove_goal"] = "remove_goal"
    user_goal_id: str


class Approve(BaseModel):
    kind: Literal["approve"] = "approve"
    user_goal_id: str


class Disapprove(BaseModel):
    kind: Literal["disapprove"] = "disapprove"
    user_goal_id: str


Command = Annotated[
    Union[
        Register,
        ToMenu,
        ToTasks,
        ToRate,
        CurrentTasks,
        UpdateTask,
        UpdateType,
        ObserveTasks,
        ObserveDate,
        ChangeTask,
        ChangeDate,
        ChangeType,
        ChooseGoal,
        RemoveGoal,
        Approve,
        Disapprove,
    ],
    Field(discriminator="kind"),
]

_command_adapter: TypeAdapter[Command] = TypeAdapter(Command)


def parse_command(name: str, params: Optional[dict[str, Any]] = None) -> Command:
    """
    Decode a command name and its parameters.

    Raises:
        MalformedCommandError: If the name is unknown or a parameter is
            missing or has the wrong type

    Examples:
        >>> parse_command("update_type", {"goal_type": 2})
        UpdateType(kind='update_type', goal_type=2)
    """
    try:
        return _command_adapter.validate_python({**(params or {}), "kind": name})
    except ValidationError as e:
        raise MalformedCommandError(f"Malformed command {name!r}: {e}") from e
