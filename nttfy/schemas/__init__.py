"""
API request and response schemas (DTOs).
Separate from domain models - these are for API endpoints.
"""

from .auth import (
    LoginRequest,
    LoginResponse,
    UserProfileResponse,
    LogoutResponse,
)
from .catalog import TrackListResponse
from .playback import (
    PlayRequest,
    SeekRequest,
    PlaybackStateResponse,
)
from .playlist import (
    CreatePlaylistRequest,
    AddTrackRequest,
    CreateAndAddRequest,
    PlaylistsResponse,
    PlaylistResponse,
    PlaylistMessageResponse,
)
from .theme import ThemeResponse
from .lyrics import OpenLyricsRequest, LyricsStateResponse
from .toast import ToastResponse
from .websocket import (
    WebSocketMessage,
    ConnectedMessage,
    PlaybackStateMessage,
    ToastMessage,
    ThemeMessage,
    PongMessage,
)

__all__ = [
    # Auth schemas
    "LoginRequest",
    "LoginResponse",
    "UserProfileResponse",
    "LogoutResponse",
    # Catalog schemas
    "TrackListResponse",
    # Playback schemas
    "PlayRequest",
    "SeekRequest",
    "PlaybackStateResponse",
    # Playlist schemas
    "CreatePlaylistRequest",
    "AddTrackRequest",
    "CreateAndAddRequest",
    "PlaylistsResponse",
    "PlaylistResponse",
    "PlaylistMessageResponse",
    # Theme, lyrics and toast schemas
    "ThemeResponse",
    "OpenLyricsRequest",
    "LyricsStateResponse",
    "ToastResponse",
    # WebSocket schemas
    "WebSocketMessage",
    "ConnectedMessage",
    "PlaybackStateMessage",
    "ToastMessage",
    "ThemeMessage",
    "PongMessage",
]
