"""
Catalog (home and search) response schemas for API endpoints.
"""
from pydantic import BaseModel

from nttfy.models import Track


class TrackListResponse(BaseModel):
    """Response schema for a list of catalog tracks"""
    tracks: list[Track]
    error: str | None = None
