import json
from typing import Dict, List, Optional

from pydantic import ValidationError

from nttfy.core.logging import get_logger
from nttfy.models import Track
from nttfy.services.storage import KeyValueStorage, StorageError

logger = get_logger("PlaylistStore")

DEFAULT_PLAYLISTS: Dict[str, List[Track]] = {"Mis Favoritas": [], "Para Entrenar": []}


class PlaylistStore:
    """
    User playlists: playlist name -> ordered tracks, unique by track id.

    The whole mapping is written through to storage after each mutation.
    Until load() has run the store refuses mutations, so an empty default
    can never overwrite what is already on disk.
    """

    def __init__(self, storage: KeyValueStorage, storage_key: str = "nttfy-playlists"):
        self._storage = storage
        self._storage_key = storage_key
        self._playlists: Optional[Dict[str, List[Track]]] = None

    @property
    def is_loaded(self) -> bool:
        return self._playlists is not None

    @property
    def playlists(self) -> Dict[str, List[Track]]:
        if self._playlists is None:
            return {}
        return {name: list(tracks) for name, tracks in self._playlists.items()}

    def get(self, name: str) -> Optional[List[Track]]:
        if self._playlists is None or name not in self._playlists:
            return None
        return list(self._playlists[name])

    async def load(self) -> None:
        saved = None
        try:
            raw = await self._storage.get(self._storage_key)
            if raw is not None:
                saved = self._parse(raw)
        except (StorageError, ValueError) as e:
            logger.error(f"Could not read saved playlists, using defaults: {e}")
            saved = None

        if saved is None:
            saved = {name: list(tracks) for name, tracks in DEFAULT_PLAYLISTS.items()}
        self._playlists = saved
        logger.info(f"Loaded {len(self._playlists)} playlist(s)")

    @staticmethod
    def _parse(raw: str) -> Dict[str, List[Track]]:
        """
        Decode the saved mapping. Only an undecodable document is rejected;
        bad records are dropped one by one so the rest of the data survives.
        """
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError("saved playlists are not a mapping")

        playlists: Dict[str, List[Track]] = {}
        for name, items in data.items():
            if not isinstance(items, list):
                logger.warning(f"Playlist '{name}' is not a list, keeping it empty")
                items = []
            tracks: List[Track] = []
            for item in items:
                try:
                    track = Track.model_validate(item)
                except ValidationError as e:
                    logger.warning(f"Skipping invalid track in playlist '{name}': {e.error_count()} error(s)")
                    continue
                if all(existing.id != track.id for existing in tracks):
                    tracks.append(track)
            playlists[name] = tracks
        return playlists

    # ==================== MUTATIONS ====================

    async def create_playlist(self, name: str) -> bool:
        """Create an empty playlist. Returns False for blank or taken names."""
        if self._playlists is None:
            logger.warning("create_playlist called before playlists were loaded")
            return False
        if not name or not name.strip() or name in self._playlists:
            return False

        self._playlists[name] = []
        logger.info(f"Created playlist '{name}'")
        await self._persist()
        return True

    async def add_song_to_playlist(self, name: str, track: Track) -> bool:
        if self._playlists is None or name not in self._playlists:
            return False
        tracks = self._playlists[name]
        if any(existing.id == track.id for existing in tracks):
            return False

        tracks.append(track)
        logger.debug(f"Added track {track.id} to playlist '{name}'")
        await self._persist()
        return True

    async def remove_song_from_playlist(self, name: str, track_id: int) -> None:
        if self._playlists is None or name not in self._playlists:
            return
        self._playlists[name] = [t for t in self._playlists[name] if t.id != track_id]
        await self._persist()

    async def delete_playlist(self, name: str) -> None:
        if self._playlists is None or name not in self._playlists:
            return
        del self._playlists[name]
        logger.info(f"Deleted playlist '{name}'")
        await self._persist()

    async def _persist(self) -> None:
        if self._playlists is None:
            return
        payload = json.dumps(
            {name: [t.to_storage() for t in tracks] for name, tracks in self._playlists.items()},
            ensure_ascii=False,
        )
        try:
            await self._storage.set(self._storage_key, payload)
        except StorageError as e:
            logger.error(f"Failed to save playlists: {e}")
