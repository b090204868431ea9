from nttfy.core.logging import get_logger
from nttfy.models import Theme
from nttfy.services.storage import KeyValueStorage, StorageError

logger = get_logger("ThemeStore")


class ThemeStore:
    """Persisted light/dark flag. Falls back to the platform hint."""

    def __init__(self, storage: KeyValueStorage, system_hint: Theme = Theme.LIGHT, storage_key: str = "nttfy-theme"):
        self._storage = storage
        self._storage_key = storage_key
        self.system_hint = system_hint
        self.theme = system_hint
        self.is_loaded = False

    async def load(self) -> Theme:
        try:
            saved = await self._storage.get(self._storage_key)
        except StorageError as e:
            logger.error(f"Could not read saved theme: {e}")
            saved = None

        if saved:
            try:
                self.theme = Theme(saved)
            except ValueError:
                logger.warning(f"Ignoring unknown saved theme '{saved}'")
        self.is_loaded = True
        return self.theme

    async def toggle_theme(self) -> Theme:
        self.theme = self.theme.toggled()
        try:
            await self._storage.set(self._storage_key, self.theme.value)
        except StorageError as e:
            logger.error(f"Failed to save theme: {e}")
        return self.theme
