"""Outbound notification model."""
from pydantic import BaseModel

from daygoals.models.user import User


class Message(BaseModel):
    """Notification queued for delivery by the transport."""

    user: User
    code: str
    text: str = ""
