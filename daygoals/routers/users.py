"""User router - API endpoints for registered users."""
from fastapi import APIRouter, Depends, HTTPException

from daygoals.context import AppContext, get_context
from daygoals.models.user import User


router = APIRouter(prefix="/users", tags=["users"])


@router.get("/{user_id}", response_model=User)
async def get_user(user_id: int, ctx: AppContext = Depends(get_context)):
    """Get a registered user by peer id."""
    user = await ctx.users.get_user(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user
