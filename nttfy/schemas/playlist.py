"""
Playlist-related request and response schemas for API endpoints.
"""
from pydantic import BaseModel, Field

from nttfy.models import Track


# ==================== REQUEST SCHEMAS ====================

class CreatePlaylistRequest(BaseModel):
    """Request schema for creating a playlist"""
    name: str = Field(..., max_length=255)


class AddTrackRequest(BaseModel):
    """Request schema for adding a track to a playlist"""
    track: Track


class CreateAndAddRequest(BaseModel):
    """Request schema for creating a playlist and adding a track to it"""
    name: str = Field(..., max_length=255)
    track: Track


# ==================== RESPONSE SCHEMAS ====================

class PlaylistsResponse(BaseModel):
    """Response schema for all playlists"""
    playlists: dict[str, list[Track]]


class PlaylistResponse(BaseModel):
    """Response schema for a single playlist"""
    name: str
    tracks: list[Track]


class PlaylistMessageResponse(BaseModel):
    """Response schema for playlist mutations"""
    message: str
    changed: bool = True
