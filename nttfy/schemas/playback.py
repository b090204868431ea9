"""
Playback-related request and response schemas for API endpoints.
"""
from pydantic import BaseModel, Field

from nttfy.models import PlaybackStatus, Track


# ==================== REQUEST SCHEMAS ====================

class PlayRequest(BaseModel):
    """Request schema for playing a track, optionally from a list"""
    track: Track
    playlist: list[Track] | None = Field(None, description="List the track was picked from")


class SeekRequest(BaseModel):
    """Request schema for seeking within the current track"""
    seconds: float = Field(..., ge=0)


# ==================== RESPONSE SCHEMAS ====================

class PlaybackStateResponse(BaseModel):
    """Response schema for playback state"""
    status: PlaybackStatus
    is_playing: bool
    current_track: Track | None = None
    position_seconds: float
    duration_seconds: float
    position_label: str
    duration_label: str
    progress_percent: float
    active_playlist: list[Track]
