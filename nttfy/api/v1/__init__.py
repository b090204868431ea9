"""
API v1 routes for the NTTfy client core.
"""
from nttfy.api.v1 import auth, catalog, playback, playlists, theme, lyrics, toast, websocket

__all__ = ["auth", "catalog", "playback", "playlists", "theme", "lyrics", "toast", "websocket"]
