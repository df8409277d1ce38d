"""Conversation router - inbound webhook for chat turns."""
import logging

from fastapi import APIRouter, Depends, status

from daygoals.context import AppContext, get_context
from daygoals.conversation.webhook import WebhookEvent, WebhookEventBody
from daygoals.exceptions import MalformedCommandError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/conversation", tags=["conversation"])


@router.post("/events", status_code=status.HTTP_202_ACCEPTED)
async def receive_event(body: WebhookEventBody, ctx: AppContext = Depends(get_context)):
    """
    Handle one inbound turn.

    - Replies go out through the outbound transport, not in the response
    - A malformed command is logged and dropped without a reply
    """
    try:
        event = WebhookEvent(body)
    except MalformedCommandError as e:
        logger.warning(f"Dropped turn of peer {body.peer_id}: {e}")
        return {"status": "dropped"}

    await ctx.router.handle(event)
    return {"status": "accepted"}
