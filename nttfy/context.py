"""
Service objects of the client, built once at startup and passed explicitly
to whatever needs them (the API reaches them through nttfy.dependencies).
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional

from nttfy.config import Settings
from nttfy.core.logging import get_logger
from nttfy.models import Theme
from nttfy.services.audio_backend import AudioBackend, MpvAudioBackend
from nttfy.services.catalog_service import CatalogService
from nttfy.services.lyrics_service import LyricsFetcher, LyricsOvhClient
from nttfy.services.playback_engine import PlaybackEngine
from nttfy.services.playlist_store import PlaylistStore
from nttfy.services.storage import JsonFileStorage, KeyValueStorage
from nttfy.services.theme_store import ThemeStore
from nttfy.services.toast_queue import ToastQueue
from nttfy.services.websocket_manager import WebSocketManager
from nttfy.utils.formatters import format_playback_state

logger = get_logger("AppContext")


@dataclass
class AppContext:
    settings: Settings
    storage: KeyValueStorage
    theme: ThemeStore
    playlists: PlaylistStore
    playback: PlaybackEngine
    toast: ToastQueue
    lyrics: LyricsFetcher
    catalog: CatalogService
    websockets: WebSocketManager

    async def startup(self) -> None:
        """Load persisted state. The API must not serve before this completes."""
        await self.theme.load()
        await self.playlists.load()
        logger.info(f"Client state loaded (theme={self.theme.theme.value})")

    async def shutdown(self) -> None:
        await self.toast.shutdown()
        await self.playback.shutdown()
        logger.info("Client state torn down")

    async def push_playback_state(self, snapshot: Dict[str, Any]) -> None:
        await self.websockets.broadcast({"type": "playback_state", "data": format_playback_state(snapshot)})

    async def push_toast(self, message: Optional[str]) -> None:
        await self.websockets.broadcast({"type": "toast", "data": {"message": message}})

    async def push_theme(self) -> None:
        await self.websockets.broadcast({"type": "theme", "data": {"theme": self.theme.theme.value}})


def build_context(
    settings: Settings,
    storage: KeyValueStorage | None = None,
    audio_backend: AudioBackend | None = None,
    catalog: CatalogService | None = None,
    lyrics_client: LyricsOvhClient | None = None,
) -> AppContext:
    """Wire every service together. Collaborators can be swapped for tests."""
    storage = storage or JsonFileStorage(settings.storage_path)
    audio_backend = audio_backend or MpvAudioBackend(settings.mpv_path, settings.mpv_ipc_path)

    context = AppContext(
        settings=settings,
        storage=storage,
        theme=ThemeStore(storage, Theme(settings.system_theme), settings.theme_storage_key),
        playlists=PlaylistStore(storage, settings.playlists_storage_key),
        playback=PlaybackEngine(audio_backend),
        toast=ToastQueue(settings.toast_duration_ms),
        lyrics=LyricsFetcher(lyrics_client or LyricsOvhClient(settings.lyrics_api_url)),
        catalog=catalog or CatalogService(
            settings.deezer_api_url,
            settings.home_artists,
            settings.home_tracks_per_artist,
        ),
        websockets=WebSocketManager(),
    )
    context.playback.add_listener(context.push_playback_state)
    context.toast.add_listener(context.push_toast)
    return context
