"""Dialog state model definitions."""
from datetime import date
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

ParamsT = TypeVar("ParamsT", bound=BaseModel)


class DialogState(BaseModel, Generic[ParamsT]):
    """Resumable multi-turn conversation state of one peer in one flow."""

    key: str
    peer_id: int
    params: Optional[ParamsT] = None


class TaskDraft(BaseModel):
    """Tasks flow: the day and category a goal is being chosen for."""

    day: Optional[date] = None
    goal_type: Optional[int] = None
    awaiting_text: bool = False
