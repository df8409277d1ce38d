"""Catalog router - API endpoints for goal types and goals."""
from fastapi import APIRouter, Depends, HTTPException

from daygoals.context import AppContext, get_context
from daygoals.models.goal import Goal
from daygoals.models.goal_type import GoalType


router = APIRouter(prefix="/catalog", tags=["catalog"])


@router.get("/types", response_model=list[GoalType])
async def list_types(ctx: AppContext = Depends(get_context)):
    """List all goal types ordered by id."""
    return await ctx.catalog.list_types()


@router.get("/types/{type_id}/goals", response_model=list[Goal])
async def list_goals(type_id: int, ctx: AppContext = Depends(get_context)):
    """
    List the catalog goals of one category.

    - Returns 404 if the goal type does not exist
    """
    if await ctx.catalog.get_type(type_id) is None:
        raise HTTPException(status_code=404, detail="Goal type not found")
    return await ctx.catalog.list_goals(type_id)
