# tests/conftest.py
import asyncio
import itertools
import os
import zlib
from typing import Dict, List, Optional

import httpx
import pytest

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ENVIRONMENT", "development")

from nttfy.config import Settings
from nttfy.context import build_context
from nttfy.models import Track
from nttfy.services.audio_backend import AudioBackend, AudioBackendError, AudioHandle, AudioLoadError, AudioStatus
from nttfy.services.catalog_service import CatalogService
from nttfy.services.lyrics_service import LyricsOvhClient
from nttfy.services.storage import KeyValueStorage, StorageError


class FakeAudioBackend(AudioBackend):
    """Records every call; loads can be held open or made to fail."""

    def __init__(self):
        self.calls: List[tuple] = []
        self.fail_urls: set = set()
        self.fail_calls: set = set()
        self.load_gate: Optional[asyncio.Event] = None
        self.subscribers: Dict[int, object] = {}
        self.closed = False
        self._ids = itertools.count(1)

    @property
    def loaded_urls(self) -> List[str]:
        return [args[0] for name, *args in self.calls if name == "load"]

    def count(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)

    async def load(self, url: str, autoplay: bool = True) -> AudioHandle:
        self.calls.append(("load", url))
        if self.load_gate is not None:
            await self.load_gate.wait()
        if url in self.fail_urls:
            raise AudioLoadError(f"cannot decode {url}")
        return AudioHandle(id=next(self._ids), url=url)

    async def play(self, handle):
        self._record("play", handle)

    async def pause(self, handle):
        self._record("pause", handle)

    async def unload(self, handle):
        self._record("unload", handle)

    async def set_position(self, handle, position_ms):
        self._record("set_position", handle, position_ms)

    def subscribe(self, handle, on_status):
        self.subscribers[handle.id] = on_status

    async def close(self):
        self.closed = True

    def emit(self, handle_id: int, status: AudioStatus) -> None:
        self.subscribers[handle_id](status)

    def _record(self, name, handle, *args):
        self.calls.append((name, handle.url, *args))
        if name in self.fail_calls:
            raise AudioBackendError(f"{name} failed")


class MemoryStorage(KeyValueStorage):
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})
        self.writes: List[tuple] = []
        self.fail_reads = False
        self.fail_writes = False

    async def get(self, key):
        if self.fail_reads:
            raise StorageError("read failed")
        return self.data.get(key)

    async def set(self, key, value):
        if self.fail_writes:
            raise StorageError("write failed")
        self.writes.append((key, value))
        self.data[key] = value


def make_track(track_id: int, title: Optional[str] = None, artist: str = "Coldplay") -> Track:
    return Track(
        id=track_id,
        title=title or f"Song {track_id}",
        artist=artist,
        album_art_url=f"https://cdn.example/{track_id}.jpg",
        audio_url=f"https://cdn.example/{track_id}.mp3",
    )


def deezer_record(track_id: int, preview: str = "", title: str = "Yellow", artist: str = "Coldplay") -> dict:
    return {
        "id": track_id,
        "title": f"{title} (Remastered)",
        "title_short": title,
        "preview": preview,
        "artist": {"name": artist},
        "album": {"cover_medium": f"https://cdn.example/{track_id}.jpg"},
    }


@pytest.fixture
def tracks():
    return [make_track(1, "Yellow"), make_track(2, "Fix You"), make_track(3, "Clocks")]


@pytest.fixture
def backend():
    return FakeAudioBackend()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def settings():
    return Settings(secret_key=os.environ["SECRET_KEY"], toast_duration_ms=2500)


@pytest.fixture
def catalog_handler():
    """Default Deezer stub: every search returns one playable and one preview-less record."""
    def handler(request: httpx.Request) -> httpx.Response:
        query = request.url.params["q"]
        base = zlib.crc32(query.encode()) % 100_000 * 10
        return httpx.Response(200, json={"data": [
            deezer_record(base + 1, preview=f"https://cdn.example/{base + 1}.mp3", title=query.title()),
            deezer_record(base + 2, preview=""),
        ]})
    return handler


@pytest.fixture
def lyrics_handler():
    def handler(request: httpx.Request) -> httpx.Response:
        if "Unknown" in request.url.path:
            return httpx.Response(404, json={"error": "No lyrics found"})
        return httpx.Response(200, json={"lyrics": "Look at the stars"})
    return handler


@pytest.fixture
def context(settings, storage, backend, catalog_handler, lyrics_handler):
    return build_context(
        settings,
        storage=storage,
        audio_backend=backend,
        catalog=CatalogService(
            settings.deezer_api_url,
            settings.home_artists,
            settings.home_tracks_per_artist,
            transport=httpx.MockTransport(catalog_handler),
        ),
        lyrics_client=LyricsOvhClient(settings.lyrics_api_url, transport=httpx.MockTransport(lyrics_handler)),
    )
