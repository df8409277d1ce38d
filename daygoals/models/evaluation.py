"""Evaluation model definitions."""
from typing import Iterable

from pydantic import BaseModel, Field


class EvaluationCreate(BaseModel):
    """Peer vote on a binding."""

    user_goal_id: str
    approved: bool


class Evaluation(EvaluationCreate):
    """Stored vote."""

    id: str = Field(alias="_id", serialization_alias="id")
    rater_id: int

    model_config = {"populate_by_name": True}


class PendingRating(BaseModel):
    """Single-slot pointer to the binding a user should rate next."""

    user_id: int
    user_goal_id: str


class RatingReview(BaseModel):
    """What a rater is shown for the pending binding."""

    user_goal_id: str
    text: str


class Disapproval(BaseModel):
    """Emitted when a rater disapproves of a binding."""

    user_goal_id: str
    rater_id: int


def aggregate_verdict(evaluations: Iterable[Evaluation]) -> bool:
    """
    Pass iff approvals are at least as many as disapprovals.

    Examples:
        >>> aggregate_verdict([])
        True
    """
    score = sum(1 if ev.approved else -1 for ev in evaluations)
    return score >= 0
