"""Goal type (category) model definitions."""
from pydantic import BaseModel, Field

# Category whose chosen item sets the user's wake-up hour
WAKE_TYPE_ID = 1


class GoalType(BaseModel):
    """Catalog category of daily goals."""

    id: int = Field(alias="_id", serialization_alias="id")
    name: str
    points: int = 0
    evaluated: bool = False
    from_list: bool = False

    model_config = {"populate_by_name": True}
