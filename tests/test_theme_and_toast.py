import asyncio
from unittest.mock import AsyncMock, call

import pytest

from conftest import MemoryStorage
from nttfy.models import Theme
from nttfy.services.theme_store import ThemeStore
from nttfy.services.toast_queue import ToastQueue

KEY = "nttfy-theme"


# ==================== THEME ====================

@pytest.mark.asyncio
@pytest.mark.parametrize("hint", [Theme.LIGHT, Theme.DARK])
async def test_theme_defaults_to_platform_hint_and_toggle_persists(hint):
    storage = MemoryStorage()
    store = ThemeStore(storage, hint, KEY)

    assert await store.load() == hint

    toggled = await store.toggle_theme()
    assert toggled == hint.toggled()
    assert store.theme == hint.toggled()
    assert storage.data[KEY] == hint.toggled().value


@pytest.mark.asyncio
async def test_theme_loads_saved_value():
    store = ThemeStore(MemoryStorage({KEY: "dark"}), Theme.LIGHT, KEY)

    assert await store.load() == Theme.DARK
    assert store.is_loaded is True


@pytest.mark.asyncio
async def test_theme_read_failure_falls_back_to_hint():
    storage = MemoryStorage({KEY: "light"})
    storage.fail_reads = True
    store = ThemeStore(storage, Theme.DARK, KEY)

    assert await store.load() == Theme.DARK
    assert store.is_loaded is True


@pytest.mark.asyncio
async def test_theme_ignores_unknown_saved_value():
    store = ThemeStore(MemoryStorage({KEY: "sepia"}), Theme.LIGHT, KEY)

    assert await store.load() == Theme.LIGHT


@pytest.mark.asyncio
async def test_theme_toggle_survives_write_failure():
    storage = MemoryStorage()
    storage.fail_writes = True
    store = ThemeStore(storage, Theme.LIGHT, KEY)
    await store.load()

    assert await store.toggle_theme() == Theme.DARK


# ==================== TOAST ====================

@pytest.mark.asyncio
async def test_toast_expires_after_duration():
    toast = ToastQueue(duration_ms=20)

    await toast.show_toast("Added to \"Favs\"")
    assert toast.message == "Added to \"Favs\""

    await asyncio.sleep(0.05)
    assert toast.message is None


@pytest.mark.asyncio
async def test_old_timer_does_not_clear_newer_toast():
    toast = ToastQueue(duration_ms=50)

    await toast.show_toast("first")
    await asyncio.sleep(0.03)
    await toast.show_toast("second")
    await asyncio.sleep(0.03)

    # the first toast's deadline has passed, the second one's has not
    assert toast.message == "second"

    await asyncio.sleep(0.05)
    assert toast.message is None


@pytest.mark.asyncio
async def test_toast_clear_and_listeners():
    listener = AsyncMock()
    toast = ToastQueue(duration_ms=1000)
    toast.add_listener(listener)

    await toast.show_toast("hello")
    await toast.clear()
    await toast.shutdown()

    assert toast.message is None
    assert listener.await_args_list == [call("hello"), call(None)]
