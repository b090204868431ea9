import asyncio
from typing import Any, Dict, List, Sequence

import httpx

from nttfy.core.logging import get_logger
from nttfy.models import Track
from nttfy.utils.formatters import shuffle_tracks

logger = get_logger("CatalogService")


class CatalogServiceError(Exception):
    """The remote catalog could not be reached or answered with an error"""


class CatalogService:
    """Deezer catalog: track search and the home discovery feed"""

    def __init__(
        self,
        base_url: str = "https://api.deezer.com",
        home_artists: Sequence[str] = (),
        tracks_per_artist: int = 4,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.home_artists = list(home_artists)
        self.tracks_per_artist = tracks_per_artist
        self._transport = transport

    # ==================== SEARCH ====================

    async def search(self, query: str, limit: int = 15) -> List[Track]:
        """Search tracks. Records without a preview URL are not playable and are dropped."""
        if not query.strip():
            return []
        async with httpx.AsyncClient(transport=self._transport) as client:
            records = await self._search_records(client, query, limit)
        return self._normalize(records)

    async def home_feed(self) -> List[Track]:
        """
        Tracks for the home screen: a few per configured artist, shuffled.
        One failing artist fails the whole feed.
        """
        async with httpx.AsyncClient(transport=self._transport) as client:
            results = await asyncio.gather(
                *(self._search_records(client, artist, self.tracks_per_artist) for artist in self.home_artists)
            )
        records = [record for batch in results for record in batch]
        return shuffle_tracks(self._normalize(records))

    # ==================== PRIVATE METHODS ====================

    async def _search_records(self, client: httpx.AsyncClient, query: str, limit: int) -> List[Dict[str, Any]]:
        try:
            response = await client.get(f"{self.base_url}/search", params={"q": query, "limit": limit})
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Catalog search for '{query}' failed: HTTP {e.response.status_code}")
            raise CatalogServiceError(f"Search for '{query}' failed") from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Catalog search for '{query}' failed: {e}")
            raise CatalogServiceError(f"Search for '{query}' failed") from e

        if not isinstance(payload, dict) or "error" in payload:
            logger.error(f"Catalog search for '{query}' returned an error payload")
            raise CatalogServiceError(f"Search for '{query}' failed")
        return payload.get("data") or []

    @staticmethod
    def _normalize(records: List[Dict[str, Any]]) -> List[Track]:
        tracks = []
        for record in records:
            if not record.get("preview"):
                continue
            try:
                tracks.append(Track.from_catalog(record))
            except (KeyError, TypeError, ValueError) as e:
                logger.debug(f"Skipping malformed catalog record {record.get('id')}: {e}")
        return tracks
