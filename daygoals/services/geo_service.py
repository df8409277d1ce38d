"""Geo service - resolves a city name to an IANA timezone."""
import logging
import time
from typing import Protocol

import httpx

logger = logging.getLogger(__name__)

GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
TIMEZONE_URL = "https://maps.googleapis.com/maps/api/timezone/json"


class TimezoneResolver(Protocol):
    """Anything that maps free-text places to timezone identifiers."""

    async def resolve(self, place: str) -> str:
        ...


class GoogleTimezoneResolver:
    """Resolve timezones with the Google Maps geocoding and timezone APIs."""

    def __init__(self, api_key: str, client: httpx.AsyncClient | None = None):
        self.api_key = api_key
        self._client = client or httpx.AsyncClient(timeout=10)

    async def resolve(self, place: str) -> str:
        """
        Resolve a place to a timezone identifier.

        Args:
            place: Free text, typically a city name

        Returns:
            IANA timezone, e.g. "Asia/Yekaterinburg"

        Raises:
            ValueError: If the place or its timezone cannot be found
            httpx.HTTPError: If the API is unreachable
        """
        response = await self._client.get(
            GEOCODE_URL,
            params={"address": place, "key": self.api_key},
        )
        response.raise_for_status()
        results = response.json().get("results") or []
        if not results:
            raise ValueError(f"Place not found: {place}")

        location = results[0]["geometry"]["location"]
        response = await self._client.get(
            TIMEZONE_URL,
            params={
                "location": f"{location['lat']},{location['lng']}",
                "timestamp": int(time.time()),
                "key": self.api_key,
            },
        )
        response.raise_for_status()
        payload = response.json()
        if payload.get("status") != "OK":
            raise ValueError(f"Timezone not found for {place}: {payload.get('status')}")

        logger.info(f"Resolved {place} to {payload['timeZoneId']}")
        return payload["timeZoneId"]

    async def close(self) -> None:
        await self._client.aclose()
