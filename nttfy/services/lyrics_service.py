from typing import Optional
from urllib.parse import quote

import httpx

from nttfy.core.logging import get_logger
from nttfy.models import Track

logger = get_logger("LyricsService")

LYRICS_NOT_FOUND = "Lyrics not found."
LYRICS_FAILED = "Lyrics not found or failed to load."


class LyricsOvhClient:
    """Client for the lyrics.ovh text API"""

    def __init__(self, base_url: str = "https://api.lyrics.ovh/v1", transport: httpx.AsyncBaseTransport | None = None):
        self.base_url = base_url.rstrip("/")
        self._transport = transport

    async def lookup(self, artist: str, title: str) -> Optional[str]:
        """
        Fetch lyrics for (artist, title).
        Returns None when the API has no lyrics for the song.
        """
        url = f"{self.base_url}/{quote(artist, safe='')}/{quote(title, safe='')}"
        async with httpx.AsyncClient(transport=self._transport) as client:
            response = await client.get(url)
            if response.status_code == 404:
                return None
            response.raise_for_status()
            data = response.json()

        lyrics = (data.get("lyrics") or "").strip() if isinstance(data, dict) else ""
        return lyrics or None


class LyricsFetcher:
    """
    Lyrics panel state for one track at a time.

    Each lookup takes a generation number; a result is applied only if no
    newer lookup (or a close) happened while it was in flight.
    """

    def __init__(self, client: LyricsOvhClient):
        self._client = client
        self._generation = 0
        self.is_open = False
        self.is_loading = False
        self.lyrics = ""
        self.track: Optional[Track] = None

    async def open_lyrics_modal(self, track: Optional[Track]) -> None:
        if track is None:
            return

        self._generation += 1
        generation = self._generation
        self.is_open = True
        self.track = track
        self.is_loading = True
        self.lyrics = ""

        try:
            text = await self._client.lookup(track.artist, track.title)
            result = text if text else LYRICS_NOT_FOUND
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Lyrics lookup failed for '{track.artist} - {track.title}': {e}")
            result = LYRICS_FAILED

        if generation != self._generation:
            logger.debug(f"Discarding stale lyrics for track {track.id}")
            return
        self.lyrics = result
        self.is_loading = False

    def close_lyrics_modal(self) -> None:
        self._generation += 1
        self.is_open = False
        self.is_loading = False
        self.lyrics = ""
        self.track = None
