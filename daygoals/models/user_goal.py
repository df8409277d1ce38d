"""User goal (binding) model definitions."""
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class Phase(str, Enum):
    """Coarse lifecycle stage of a binding."""

    PLANNING = "planning"
    ACTIVE = "active"
    FINISHED = "finished"


class Status(str, Enum):
    """Progress of a binding."""

    SOON = "soon"
    IN_PROGRESS = "inProgress"
    COMPLETE = "complete"
    FAILED = "failed"


class UserGoal(BaseModel):
    """Assignment of a goal to a user for one category on one local day."""

    id: str = Field(alias="_id", serialization_alias="id")
    user_id: int
    goal_id: str
    type: int
    phase: Phase = Phase.PLANNING
    status: Status = Status.SOON
    starts_at: datetime
    ends_at: datetime

    model_config = {"populate_by_name": True}


class GoalChoice(BaseModel):
    """Request body for assigning a goal: a catalog id or free text."""

    goal_id: str | None = None
    description: str | None = None
