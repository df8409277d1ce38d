"""User goal router - API endpoints for per-day goal bindings."""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from daygoals.context import AppContext, get_context
from daygoals.models.goal import Goal
from daygoals.models.user import User
from daygoals.models.user_goal import GoalChoice, UserGoal
from daygoals.utils.timewindow import local_day


router = APIRouter(tags=["user goals"])


async def get_user_or_404(user_id: int, ctx: AppContext = Depends(get_context)) -> User:
    """Dependency resolving the user in the path."""
    user = await ctx.users.get_user(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def resolve_day(user: User, ctx: AppContext, day: Optional[date]) -> date:
    """The requested day, or the user's current local day."""
    if day is not None:
        return day
    return local_day(ctx.clock(), user.timezone)


@router.get("/users/{user_id}/goals", response_model=list[UserGoal])
async def list_user_goals(
    day: Optional[date] = Query(None, description="Local day, defaults to today"),
    user: User = Depends(get_user_or_404),
    ctx: AppContext = Depends(get_context),
):
    """List the user's bindings on a local day."""
    return await ctx.assignments.user_goals_for_day(user, resolve_day(user, ctx, day))


@router.put("/users/{user_id}/goals/{type_id}", response_model=UserGoal)
async def assign_goal(
    type_id: int,
    choice: GoalChoice,
    day: Optional[date] = Query(None, description="Local day, defaults to today"),
    user: User = Depends(get_user_or_404),
    ctx: AppContext = Depends(get_context),
):
    """
    Assign a goal to the user for a category on a day.

    - Body carries either a catalog goal_id or a free-text description
    - Replaces the goal of an existing binding for the same category and day
    - Returns 404 if the goal type or catalog goal does not exist
    """
    goal_type = await ctx.catalog.get_type(type_id)
    if goal_type is None:
        raise HTTPException(status_code=404, detail="Goal type not found")

    if choice.goal_id is not None:
        goal = await ctx.catalog.get_goal(choice.goal_id)
        if goal is None or goal.type != type_id:
            raise HTTPException(status_code=404, detail="Goal not found")
    elif choice.description and choice.description.strip():
        if goal_type.from_list:
            raise HTTPException(
                status_code=400,
                detail="Goals of this type must be chosen from the catalog",
            )
        goal = Goal(type=type_id, description=choice.description.strip())
    else:
        raise HTTPException(status_code=400, detail="Either goal_id or description is required")

    return await ctx.assignments.assign_goal(user, goal, resolve_day(user, ctx, day))


@router.post("/users/{user_id}/goals/{type_id}/toggle", response_model=list[UserGoal])
async def toggle_status(
    type_id: int,
    day: Optional[date] = Query(None, description="Local day, defaults to today"),
    user: User = Depends(get_user_or_404),
    ctx: AppContext = Depends(get_context),
):
    """
    Toggle completion of the binding for a category on a day.

    - Returns the day's bindings after the change
    """
    target = resolve_day(user, ctx, day)
    await ctx.assignments.set_status(user, target, type_id)
    return await ctx.assignments.user_goals_for_day(user, target)


@router.get("/users/{user_id}/days/{day}/complete")
async def check_date(
    day: date,
    user: User = Depends(get_user_or_404),
    ctx: AppContext = Depends(get_context),
):
    """Whether every goal type has a binding on the day."""
    return {"day": day, "complete": await ctx.assignments.check_date(user, day)}


@router.delete("/user-goals/{user_goal_id}", status_code=status.HTTP_200_OK)
async def reject_goal(user_goal_id: str, ctx: AppContext = Depends(get_context)):
    """
    Hard delete a binding.

    - Returns 400 if the id is malformed
    """
    try:
        return await ctx.assignments.reject_goal(user_goal_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
