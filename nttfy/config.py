from functools import lru_cache
from typing import Literal
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration settings"""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # App
    environment: Literal["development", "production"] = "development"
    allowed_cors_origins: list[str] = ["http://localhost:8081", "http://localhost:19006"]

    # API
    api_v1_prefix: str = "/api/v1"

    # Security
    secret_key: str
    access_token_expire_hours: int = 24

    # Demo login (the app has no auth backend)
    demo_email: str = "user@test.com"
    demo_password: str = "123456"

    # Local storage
    storage_path: str = "nttfy-storage.json"
    theme_storage_key: str = "nttfy-theme"
    playlists_storage_key: str = "nttfy-playlists"

    # Theme hint used when nothing has been persisted yet
    system_theme: Literal["light", "dark"] = "light"

    # Toast
    toast_duration_ms: int = 2500

    # Deezer catalog
    deezer_api_url: str = "https://api.deezer.com"
    search_limit: int = 15
    home_artists: list[str] = ["bruno mars", "the weeknd", "travis scott", "coldplay"]
    home_tracks_per_artist: int = 4

    # Lyrics
    lyrics_api_url: str = "https://api.lyrics.ovh/v1"

    # Audio (mpv)
    mpv_path: str = "mpv"
    mpv_ipc_path: str = "/tmp/nttfy-mpv.sock"

    # Logging
    log_level: str = "INFO"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def debug(self) -> bool:
        return self.environment == "development"


@lru_cache()
def get_settings():
    return Settings()
