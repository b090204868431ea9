import asyncio
from typing import Awaitable, Callable, List, Optional

from nttfy.core.logging import get_logger

logger = get_logger("ToastQueue")

ToastListener = Callable[[Optional[str]], Awaitable[None]]


class ToastQueue:
    """
    Single-slot toast message that clears itself after a fixed delay.

    Showing a new toast cancels the pending clear of the previous one, and
    every clear checks the generation it was scheduled for, so an old timer
    can never wipe a newer message.
    """

    def __init__(self, duration_ms: int = 2500):
        self.duration_ms = duration_ms
        self.message: Optional[str] = None
        self._generation = 0
        self._expiry_task: Optional[asyncio.Task] = None
        self._listeners: List[ToastListener] = []

    def add_listener(self, listener: ToastListener) -> None:
        self._listeners.append(listener)

    async def show_toast(self, message: str) -> None:
        self._generation += 1
        generation = self._generation

        if self._expiry_task and not self._expiry_task.done():
            self._expiry_task.cancel()

        self.message = message
        self._expiry_task = asyncio.create_task(self._expire(generation))
        await self._notify()

    async def clear(self) -> None:
        self._generation += 1
        if self._expiry_task and not self._expiry_task.done():
            self._expiry_task.cancel()
        self._expiry_task = None
        if self.message is not None:
            self.message = None
            await self._notify()

    async def shutdown(self) -> None:
        if self._expiry_task and not self._expiry_task.done():
            self._expiry_task.cancel()
            try:
                await self._expiry_task
            except asyncio.CancelledError:
                pass
        self._expiry_task = None

    async def _expire(self, generation: int) -> None:
        await asyncio.sleep(self.duration_ms / 1000)
        if generation != self._generation:
            return
        self.message = None
        await self._notify()

    async def _notify(self) -> None:
        for listener in self._listeners:
            try:
                await listener(self.message)
            except Exception as e:
                logger.warning(f"Toast listener failed: {e}")
