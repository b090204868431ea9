import asyncio
from functools import partial
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

from nttfy.core.logging import get_logger
from nttfy.models import PlaybackStatus, Track
from nttfy.services.audio_backend import AudioBackend, AudioBackendError, AudioHandle, AudioStatus

logger = get_logger("PlaybackEngine")

PlaybackListener = Callable[[Dict[str, Any]], Awaitable[None]]


class PlaybackEngine:
    """
    Owns the single playback session of the client.

    One track is loaded at a time. The active playlist is the list the
    current track was picked from and drives next/prev; it is never
    persisted. Every transition runs under one lock, so a second play()
    waits until the first one has finished its teardown and load.
    """

    def __init__(self, backend: AudioBackend):
        self._backend = backend
        self._handle: Optional[AudioHandle] = None
        self._generation = 0
        self._finished = False
        self._lock = asyncio.Lock()
        self._tasks: set[asyncio.Task] = set()
        self._listeners: List[PlaybackListener] = []

        self.current_track: Optional[Track] = None
        self.is_playing = False
        self.position_seconds = 0.0
        self.duration_seconds = 0.0
        self.active_playlist: List[Track] = []
        self.status = PlaybackStatus.EMPTY

    def add_listener(self, listener: PlaybackListener) -> None:
        """Register a coroutine called with a snapshot after every state change"""
        self._listeners.append(listener)

    def snapshot(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "is_playing": self.is_playing,
            "current_track": self.current_track,
            "position_seconds": self.position_seconds,
            "duration_seconds": self.duration_seconds,
            "active_playlist": list(self.active_playlist),
        }

    # ==================== TRANSPORT ====================

    async def play(self, track: Track, playlist: Optional[Sequence[Track]] = None) -> None:
        """
        Play a track, optionally replacing the active playlist.

        Asking for the track that is already loaded toggles pause/resume
        instead of reloading it.
        """
        async with self._lock:
            await self._play_locked(track, playlist)

    async def toggle_play(self) -> None:
        async with self._lock:
            await self._toggle_locked()

    async def play_next(self) -> None:
        async with self._lock:
            await self._step(1)

    async def play_prev(self) -> None:
        async with self._lock:
            await self._step(-1)

    async def seek_to(self, seconds: float) -> None:
        async with self._lock:
            if self._handle is None:
                return
            try:
                await self._backend.set_position(self._handle, int(seconds * 1000))
            except AudioBackendError as e:
                logger.error(f"Seek to {seconds:.1f}s failed: {e}")
                return
            self.position_seconds = seconds
            self._notify()

    async def shutdown(self) -> None:
        """Unload the current track and close the audio backend"""
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        async with self._lock:
            await self._release_handle()
            self._generation += 1
            self._reset()
        await self._backend.close()

    # ==================== PRIVATE METHODS ====================

    async def _play_locked(
        self,
        track: Track,
        playlist: Optional[Sequence[Track]] = None,
        reload: bool = False
    ) -> None:
        if playlist is not None:
            self.active_playlist = list(playlist)

        if not reload and self.current_track is not None and self.current_track.id == track.id:
            await self._toggle_locked()
            return

        await self._release_handle()

        self._generation += 1
        generation = self._generation
        self._finished = False

        # Visible as loading before the backend answers
        self.current_track = track
        self.is_playing = True
        self.position_seconds = 0.0
        self.duration_seconds = 0.0
        self.status = PlaybackStatus.LOADING
        self._notify()

        try:
            handle = await self._backend.load(track.audio_url, autoplay=True)
            self._handle = handle
            self._backend.subscribe(handle, partial(self._on_status, generation))
        except AudioBackendError as e:
            logger.error(f"Failed to load '{track.title}' ({track.id}): {e}")
            await self._release_handle()
            self._reset()
            self._notify()
            return

        logger.info(f"Now playing '{track.title}' by {track.artist}")
        self.status = PlaybackStatus.PLAYING
        self._notify()

    async def _toggle_locked(self) -> None:
        if self.current_track is None or self._handle is None:
            return

        if self._finished and not self.is_playing:
            await self._play_locked(self.current_track, reload=True)
            return

        try:
            if self.is_playing:
                await self._backend.pause(self._handle)
                self.is_playing = False
                self.status = PlaybackStatus.PAUSED
            else:
                await self._backend.play(self._handle)
                self.is_playing = True
                self.status = PlaybackStatus.PLAYING
        except AudioBackendError as e:
            logger.error(f"Toggle play failed: {e}")
            return
        self._notify()

    async def _step(self, offset: int, reload: bool = False) -> bool:
        """Move through the active playlist with wraparound. Returns False when nothing to move to."""
        if self.current_track is None or not self.active_playlist:
            return False

        index = self._index_of_current()
        if index is None:
            await self._play_locked(self.active_playlist[0], self.active_playlist)
            return True

        length = len(self.active_playlist)
        target = self.active_playlist[(index + offset + length) % length]
        await self._play_locked(target, reload=reload)
        return True

    def _index_of_current(self) -> Optional[int]:
        for i, track in enumerate(self.active_playlist):
            if track.id == self.current_track.id:
                return i
        return None

    async def _release_handle(self) -> None:
        if self._handle is None:
            return
        handle, self._handle = self._handle, None
        try:
            await self._backend.unload(handle)
        except AudioBackendError as e:
            logger.warning(f"Failed to unload audio handle {handle.id}: {e}")

    def _reset(self) -> None:
        self.current_track = None
        self.is_playing = False
        self.position_seconds = 0.0
        self.duration_seconds = 0.0
        self._finished = False
        self.status = PlaybackStatus.EMPTY

    def _on_status(self, generation: int, status: AudioStatus) -> None:
        # Ticks from a replaced handle
        if generation != self._generation:
            return

        if status.is_loaded:
            self.position_seconds = status.position_ms / 1000
            self.duration_seconds = status.duration_ms / 1000
            self._notify()

        if status.did_just_finish:
            self._spawn(self._advance_after_finish(generation))
        elif not status.is_loaded:
            # The resource failed after it was loaded
            self._spawn(self._drop_failed_track(generation))

    async def _drop_failed_track(self, generation: int) -> None:
        async with self._lock:
            if generation != self._generation:
                return
            logger.error(f"Playback of '{self.current_track.title}' stopped with an error")
            await self._release_handle()
            self._generation += 1
            self._reset()
            self._notify()

    async def _advance_after_finish(self, generation: int) -> None:
        async with self._lock:
            if generation != self._generation:
                return
            self._finished = True
            # A single-track playlist starts the same track over
            if await self._step(1, reload=True):
                return
            self.is_playing = False
            self.status = PlaybackStatus.PAUSED
            self._notify()

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in self._listeners:
            self._spawn(self._deliver(listener, snapshot))

    async def _deliver(self, listener: PlaybackListener, snapshot: Dict[str, Any]) -> None:
        try:
            await listener(snapshot)
        except Exception as e:
            logger.warning(f"Playback listener failed: {e}")

    def _spawn(self, coro: Awaitable[None]) -> None:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
