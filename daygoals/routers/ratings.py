"""Rating router - API endpoints for peer evaluation."""
from fastapi import APIRouter, Depends, HTTPException, status

from daygoals.context import AppContext, get_context
from daygoals.models.evaluation import Evaluation, EvaluationCreate, RatingReview
from daygoals.models.user import User
from daygoals.routers.user_goals import get_user_or_404


router = APIRouter(tags=["ratings"])


@router.get("/users/{user_id}/rating", response_model=RatingReview)
async def get_to_rate(
    user: User = Depends(get_user_or_404),
    ctx: AppContext = Depends(get_context),
):
    """
    Get the binding the user should rate next.

    - Returns 404 if there is nothing to rate
    """
    review = await ctx.ratings.get_to_rate(user)
    if review is None:
        raise HTTPException(status_code=404, detail="Nothing to rate")
    return review


@router.post(
    "/users/{user_id}/ratings",
    response_model=Evaluation,
    status_code=status.HTTP_201_CREATED,
)
async def rate(
    evaluation: EvaluationCreate,
    user: User = Depends(get_user_or_404),
    ctx: AppContext = Depends(get_context),
):
    """
    Record the user's vote on a binding.

    - Disapprovals notify the owner of the binding asynchronously
    - Returns 404 if the binding does not exist
    """
    try:
        return await ctx.ratings.rate(user.id, evaluation.user_goal_id, evaluation.approved)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/user-goals/{user_goal_id}/verdict")
async def verdict(user_goal_id: str, ctx: AppContext = Depends(get_context)):
    """Aggregate verdict of a binding: passed iff approvals >= disapprovals."""
    if await ctx.assignments.get(user_goal_id) is None:
        raise HTTPException(status_code=404, detail="User goal not found")
    evaluations = await ctx.ratings.list_evaluations(user_goal_id)
    return {
        "user_goal_id": user_goal_id,
        "evaluations": len(evaluations),
        "passed": await ctx.ratings.verdict(user_goal_id),
    }
