"""Goal model definitions."""
from typing import Optional

from pydantic import BaseModel, Field

# Fixed ids of the wake-up catalog items
WAKE_AT_6 = "wake_6"
WAKE_AT_8 = "wake_8"
WAKE_AT_10 = "wake_10"


class GoalCreate(BaseModel):
    """Free-text goal input for a category."""

    type: int
    description: str


class Goal(GoalCreate):
    """A concrete item within a category.

    id is None until the goal has been persisted.
    """

    id: Optional[str] = Field(default=None, alias="_id", serialization_alias="id")

    model_config = {"populate_by_name": True}
