import asyncio
import itertools
import json
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from nttfy.core.logging import get_logger

logger = get_logger("AudioBackend")


class AudioBackendError(Exception):
    """A transport call (play/pause/seek/unload) failed"""


class AudioLoadError(AudioBackendError):
    """The audio resource could not be loaded or decoded"""


@dataclass(frozen=True)
class AudioHandle:
    """Opaque reference to one loaded audio resource"""
    id: int
    url: str


@dataclass(frozen=True)
class AudioStatus:
    """One status tick delivered to a subscriber"""
    position_ms: int
    duration_ms: int
    is_loaded: bool
    did_just_finish: bool = False


StatusCallback = Callable[[AudioStatus], None]


class AudioBackend(ABC):
    """
    Device audio contract consumed by the playback engine.
    The engine is the only caller; it never holds more than one handle.
    """

    @abstractmethod
    async def load(self, url: str, autoplay: bool = True) -> AudioHandle:
        ...

    @abstractmethod
    async def play(self, handle: AudioHandle) -> None:
        ...

    @abstractmethod
    async def pause(self, handle: AudioHandle) -> None:
        ...

    @abstractmethod
    async def unload(self, handle: AudioHandle) -> None:
        """Stop and release the resource"""

    @abstractmethod
    async def set_position(self, handle: AudioHandle, position_ms: int) -> None:
        ...

    @abstractmethod
    def subscribe(self, handle: AudioHandle, on_status: StatusCallback) -> None:
        ...

    async def close(self) -> None:
        """Release the backend itself"""


class MpvAudioBackend(AudioBackend):
    """
    Audio backend driving an idle mpv process over its JSON IPC socket.

    mpv is started lazily on the first load. Requests carry a request_id
    and are matched with their responses; property-change and end-file
    events are turned into AudioStatus ticks for the active handle.
    """

    REQUEST_TIMEOUT_S = 5.0
    CONNECT_TIMEOUT_S = 3.0

    TIME_POS_OBSERVER = 1
    DURATION_OBSERVER = 2

    def __init__(self, mpv_path: str = "mpv", ipc_path: str = "/tmp/nttfy-mpv.sock"):
        self.mpv_path = mpv_path
        self.ipc_path = ipc_path

        self._proc: Optional[asyncio.subprocess.Process] = None
        self._reader: Optional[asyncio.StreamReader] = None
        self._writer: Optional[asyncio.StreamWriter] = None
        self._reader_task: Optional[asyncio.Task] = None
        self._start_lock = asyncio.Lock()

        self._request_ids = itertools.count(1)
        self._handle_ids = itertools.count(1)
        self._pending: Dict[int, asyncio.Future] = {}

        self._active: Optional[AudioHandle] = None
        self._loaded = False
        self._load_waiter: Optional[asyncio.Future] = None
        self._subscriber: Optional[StatusCallback] = None
        self._position_s = 0.0
        self._duration_s = 0.0

    # ==================== LIFECYCLE ====================

    async def _ensure_started(self) -> None:
        async with self._start_lock:
            if self._proc is not None and self._proc.returncode is None:
                return

            if os.path.exists(self.ipc_path):
                os.remove(self.ipc_path)

            logger.info(f"Starting mpv ({self.mpv_path}) with IPC at {self.ipc_path}")
            try:
                self._proc = await asyncio.create_subprocess_exec(
                    self.mpv_path,
                    "--idle=yes",
                    "--no-video",
                    "--audio-display=no",
                    "--keep-open=no",
                    f"--input-ipc-server={self.ipc_path}",
                    "--terminal=no",
                    "--msg-level=all=warn",
                    stdin=asyncio.subprocess.DEVNULL,
                    stdout=asyncio.subprocess.DEVNULL,
                    stderr=asyncio.subprocess.DEVNULL,
                )
            except OSError as e:
                raise AudioBackendError(f"Could not start mpv: {e}") from e

            await self._connect()
            self._reader_task = asyncio.create_task(self._read_loop())

            await self._request("observe_property", self.TIME_POS_OBSERVER, "time-pos")
            await self._request("observe_property", self.DURATION_OBSERVER, "duration")

    async def _connect(self) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.CONNECT_TIMEOUT_S
        last_error: Optional[Exception] = None
        while loop.time() < deadline:
            try:
                self._reader, self._writer = await asyncio.open_unix_connection(self.ipc_path)
                return
            except OSError as e:
                last_error = e
                await asyncio.sleep(0.05)
        raise AudioBackendError(f"Failed to connect to mpv IPC at {self.ipc_path}: {last_error!r}")

    async def close(self) -> None:
        if self._proc is None:
            return
        logger.info("Shutting down mpv")
        try:
            self._send({"command": ["quit"]})
        except AudioBackendError:
            pass
        if self._reader_task:
            self._reader_task.cancel()
            try:
                await self._reader_task
            except asyncio.CancelledError:
                pass
            self._reader_task = None
        if self._writer:
            self._writer.close()
            self._writer = None
        if self._proc.returncode is None:
            self._proc.terminate()
            await self._proc.wait()
        self._proc = None
        self._fail_pending(AudioBackendError("mpv was shut down"))

    # ==================== AUDIO CONTRACT ====================

    async def load(self, url: str, autoplay: bool = True) -> AudioHandle:
        await self._ensure_started()

        handle = AudioHandle(id=next(self._handle_ids), url=url)
        self._active = handle
        self._loaded = False
        self._position_s = 0.0
        self._duration_s = 0.0
        self._subscriber = None
        self._load_waiter = asyncio.get_running_loop().create_future()

        try:
            await self._request("set_property", "pause", not autoplay)
            await self._request("loadfile", url, "replace")
            await self._load_waiter
        except AudioBackendError:
            self._active = None
            raise
        finally:
            self._load_waiter = None

        self._loaded = True
        logger.debug(f"Loaded audio handle {handle.id}: {url}")
        return handle

    async def play(self, handle: AudioHandle) -> None:
        self._require_active(handle)
        await self._request("set_property", "pause", False)

    async def pause(self, handle: AudioHandle) -> None:
        self._require_active(handle)
        await self._request("set_property", "pause", True)

    async def unload(self, handle: AudioHandle) -> None:
        if self._active != handle:
            return
        self._active = None
        self._loaded = False
        self._subscriber = None
        await self._request("stop")

    async def set_position(self, handle: AudioHandle, position_ms: int) -> None:
        self._require_active(handle)
        await self._request("seek", position_ms / 1000, "absolute")

    def subscribe(self, handle: AudioHandle, on_status: StatusCallback) -> None:
        self._require_active(handle)
        self._subscriber = on_status

    # ==================== PROTOCOL ====================

    def _require_active(self, handle: AudioHandle) -> None:
        if self._active != handle or not self._loaded:
            raise AudioBackendError(f"Audio handle {handle.id} is not loaded")

    def _send(self, payload: dict) -> None:
        if self._writer is None:
            raise AudioBackendError("mpv IPC is not connected")
        self._writer.write((json.dumps(payload) + "\n").encode("utf-8"))

    async def _request(self, *command: Any) -> Any:
        request_id = next(self._request_ids)
        future = asyncio.get_running_loop().create_future()
        self._pending[request_id] = future
        try:
            self._send({"command": list(command), "request_id": request_id})
            await self._writer.drain()
            response = await asyncio.wait_for(future, self.REQUEST_TIMEOUT_S)
        except (asyncio.TimeoutError, ConnectionError) as e:
            raise AudioBackendError(f"mpv did not answer {command[0]}: {e!r}") from e
        finally:
            self._pending.pop(request_id, None)

        if response.get("error") != "success":
            raise AudioBackendError(f"mpv rejected {command[0]}: {response.get('error')}")
        return response.get("data")

    def _fail_pending(self, error: Exception) -> None:
        for future in self._pending.values():
            if not future.done():
                future.set_exception(error)
        self._pending.clear()
        if self._load_waiter and not self._load_waiter.done():
            self._load_waiter.set_exception(AudioLoadError(str(error)))

    async def _read_loop(self) -> None:
        try:
            while True:
                line = await self._reader.readline()
                if not line:
                    break
                try:
                    message = json.loads(line.decode("utf-8", errors="replace"))
                except json.JSONDecodeError:
                    logger.debug(f"Ignoring malformed mpv line: {line!r}")
                    continue
                if isinstance(message, dict):
                    self._dispatch(message)
        finally:
            self._fail_pending(AudioBackendError("mpv IPC connection closed"))

    def _dispatch(self, message: dict) -> None:
        request_id = message.get("request_id")
        if request_id is not None and "event" not in message:
            future = self._pending.get(request_id)
            if future and not future.done():
                future.set_result(message)
            return

        event = message.get("event")
        if event == "file-loaded":
            if self._load_waiter and not self._load_waiter.done():
                self._load_waiter.set_result(None)
        elif event == "end-file":
            self._on_end_file(message)
        elif event == "property-change":
            self._on_property_change(message)

    def _on_end_file(self, message: dict) -> None:
        reason = message.get("reason")
        if self._load_waiter and not self._load_waiter.done():
            if reason == "error":
                self._load_waiter.set_exception(
                    AudioLoadError(message.get("file_error") or "mpv could not open the file")
                )
            return

        if reason == "eof" and self._loaded:
            self._emit(did_just_finish=True)
            self._loaded = False
        elif reason == "error" and self._loaded:
            logger.error(f"Playback of {self._active.url} failed: {message.get('file_error') or 'unknown error'}")
            self._loaded = False
            self._emit()

    def _on_property_change(self, message: dict) -> None:
        value = message.get("data")
        if value is None:
            return
        if message.get("name") == "time-pos":
            self._position_s = float(value)
        elif message.get("name") == "duration":
            self._duration_s = float(value)
        else:
            return
        if self._loaded:
            self._emit()

    def _emit(self, did_just_finish: bool = False) -> None:
        if self._subscriber is None:
            return
        position_s = self._duration_s if did_just_finish else self._position_s
        self._subscriber(
            AudioStatus(
                position_ms=int(position_s * 1000),
                duration_ms=int(self._duration_s * 1000),
                is_loaded=self._loaded,
                did_just_finish=did_just_finish,
            )
        )
