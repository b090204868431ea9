"""
Lyrics-related request and response schemas for API endpoints.
"""
from pydantic import BaseModel

from nttfy.models import Track


class OpenLyricsRequest(BaseModel):
    """Request schema for opening lyrics; defaults to the current track"""
    track: Track | None = None


class LyricsStateResponse(BaseModel):
    """Response schema for the lyrics panel"""
    is_open: bool
    is_loading: bool
    lyrics: str
    track: Track | None = None
