"""User model definitions."""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class FlowState(str, Enum):
    """Conversation flow a user is currently in."""

    MENU = "menu"
    TASKS = "tasks"
    RATE = "rate"


class UserBase(BaseModel):
    """Base user fields."""

    first_name: str = ""
    last_name: str = ""
    city: str = ""


class UserCreate(UserBase):
    """User registration data."""

    id: int
    timezone: str


class User(UserBase):
    """Registered user."""

    id: int = Field(alias="_id", serialization_alias="id")
    timezone: str
    active: bool = True
    state: FlowState = FlowState.MENU
    created_at: Optional[datetime] = None

    model_config = {"populate_by_name": True}
