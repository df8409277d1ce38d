"""Rating service - peer evaluation of bindings."""
import asyncio
import logging
from typing import Optional

from daygoals.models.evaluation import (
    Disapproval,
    Evaluation,
    PendingRating,
    RatingReview,
    aggregate_verdict,
)
from daygoals.models.user import User
from daygoals.services.assignment_service import AssignmentService
from daygoals.services.catalog_service import CatalogService
from daygoals.services.notification_service import DISAPPROVE, EngagementScheduler
from daygoals.services.user_service import UserService
from daygoals.utils.timewindow import localize

logger = logging.getLogger(__name__)


class RatingService:
    """
    Service for the rating queue.

    Each user has at most one pending binding to rate. Votes are appended
    as evaluations; the pending pointer is managed by whoever fills the
    queue, not by rating.
    """

    def __init__(
        self,
        db,
        assignments: AssignmentService,
        catalog: CatalogService,
        users: UserService,
        notifier: EngagementScheduler,
        disapprovals: Optional["asyncio.Queue[Disapproval]"] = None,
    ):
        """Initialize service with database connection and collaborators."""
        self.db = db
        self.evaluations = db["evaluations"]
        self.pending = db["pending_ratings"]
        self.assignments = assignments
        self.catalog = catalog
        self.users = users
        self.notifier = notifier
        self.disapprovals: "asyncio.Queue[Disapproval]" = (
            disapprovals if disapprovals is not None else asyncio.Queue()
        )

    def _doc_to_evaluation(self, doc: dict) -> Evaluation:
        return Evaluation(
            _id=str(doc["_id"]),
            rater_id=doc["rater_id"],
            user_goal_id=doc["user_goal_id"],
            approved=doc["approved"],
        )

    async def enqueue(self, user_id: int, user_goal_id: str) -> PendingRating:
        """Point a user at the binding they should rate next."""
        await self.pending.update_one(
            {"user_id": user_id},
            {"$set": {"user_goal_id": user_goal_id}},
            upsert=True,
        )
        return PendingRating(user_id=user_id, user_goal_id=user_goal_id)

    async def clear_pending(self, user_id: int) -> None:
        await self.pending.delete_one({"user_id": user_id})

    async def get_pending(self, user_id: int) -> Optional[PendingRating]:
        doc = await self.pending.find_one({"user_id": user_id})
        if not doc:
            return None
        return PendingRating(user_id=doc["user_id"], user_goal_id=doc["user_goal_id"])

    async def get_to_rate(self, user: User) -> Optional[RatingReview]:
        """
        Render the binding the user should rate next.

        Returns:
            Review payload, or None if there is nothing to rate
        """
        pending = await self.get_pending(user.id)
        if pending is None:
            return None

        user_goal = await self.assignments.get(pending.user_goal_id)
        if user_goal is None:
            logger.warning(
                f"Pending rating of user {user.id} points at missing binding "
                f"{pending.user_goal_id}"
            )
            return None

        goal = await self.catalog.get_goal(user_goal.goal_id)
        description = goal.description if goal else "?"
        day = localize(user_goal.starts_at, user.timezone)

        text = (
            f"Participant\n 🙍 - {user_goal.user_id}\n"
            f"Date\n ⏱ - {day.strftime('%B %d')}\n"
            f"Goal\n 💡 - {description}"
        )
        return RatingReview(user_goal_id=user_goal.id, text=text)

    async def rate(self, rater_id: int, user_goal_id: str, approved: bool) -> Evaluation:
        """
        Record one vote.

        A disapproval also emits an event for the binding's owner to be
        told; delivery happens elsewhere and never fails the vote.

        Raises:
            ValueError: If the binding does not exist
        """
        if await self.assignments.get(user_goal_id) is None:
            raise ValueError("User goal not found")

        evaluation_doc = {
            "rater_id": rater_id,
            "user_goal_id": user_goal_id,
            "approved": approved,
        }
        result = await self.evaluations.insert_one(evaluation_doc)
        evaluation_doc["_id"] = result.inserted_id

        if not approved:
            self.disapprovals.put_nowait(
                Disapproval(user_goal_id=user_goal_id, rater_id=rater_id)
            )

        return self._doc_to_evaluation(evaluation_doc)

    async def list_evaluations(self, user_goal_id: str) -> list[Evaluation]:
        cursor = self.evaluations.find({"user_goal_id": user_goal_id})
        docs = await cursor.to_list(length=None)
        return [self._doc_to_evaluation(doc) for doc in docs]

    async def verdict(self, user_goal_id: str) -> bool:
        """Pass iff approvals are at least as many as disapprovals."""
        return aggregate_verdict(await self.list_evaluations(user_goal_id))

    async def notify_disapproval(self, event: Disapproval) -> None:
        """
        Tell the owner of a binding it was marked invalid.

        Raises:
            ValueError: If the binding or its owner no longer exists
        """
        user_goal = await self.assignments.get(event.user_goal_id)
        if user_goal is None:
            raise ValueError("User goal not found")

        owner = await self.users.get_user(user_goal.user_id)
        if owner is None:
            raise ValueError("User not found")

        goal = await self.catalog.get_goal(user_goal.goal_id)
        description = goal.description if goal else "?"
        day = localize(user_goal.starts_at, owner.timezone)

        await self.notifier.send(
            owner,
            DISAPPROVE,
            f"Your goal was marked as invalid\n"
            f"Date\n ⏱ - {day.strftime('%B %d')}\n"
            f"Goal\n 💡 - {description}",
        )
