"""Dialog service - persisted conversation state per peer and flow."""
import logging
from datetime import timedelta
from typing import Optional

from pydantic import BaseModel

from daygoals.cache import Cache
from daygoals.models.dialog import DialogState, ParamsT

logger = logging.getLogger(__name__)


class DialogService:
    """
    Store of resumable conversation states.

    States live in the cache under "<flow>_<peer id>". Without a ttl a state
    stays until it is cleared.
    """

    def __init__(self, cache: Cache, ttl: Optional[timedelta] = None):
        self.cache = cache
        self.ttl = ttl

    def _key(self, flow: str, peer_id: int) -> str:
        return f"{flow}_{peer_id}"

    async def load(
        self,
        peer_id: int,
        flow: str,
        params_model: type[ParamsT],
    ) -> DialogState[ParamsT]:
        """
        Load the peer's state in a flow, creating an empty one if absent.

        Args:
            peer_id: Conversation peer
            flow: Flow prefix, e.g. "tasks"
            params_model: Pydantic model of the flow's parameters

        Returns:
            Existing or freshly persisted state
        """
        state_type = DialogState[params_model]
        key = self._key(flow, peer_id)

        raw = await self.cache.get(key)
        if raw is not None:
            return state_type.model_validate_json(raw)

        state = state_type(key=key, peer_id=peer_id)
        await self._save(state)
        return state

    async def set_params(self, state: DialogState[ParamsT], params: BaseModel) -> DialogState[ParamsT]:
        """Replace the parameters and persist the whole state in one write."""
        state.params = params
        await self._save(state)
        return state

    async def clear(self, state: DialogState) -> None:
        """Delete the persisted state."""
        await self.cache.delete(state.key)

    async def _save(self, state: DialogState) -> None:
        await self.cache.set(state.key, state.model_dump_json(), ttl=self.ttl)
