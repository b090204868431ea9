"""
WebSocket message schemas.
"""
from pydantic import BaseModel
from typing import Literal


# ==================== MESSAGE SCHEMAS ====================

class WebSocketMessage(BaseModel):
    """Base WebSocket message schema"""
    type: str
    data: dict


class ConnectedMessage(BaseModel):
    """WebSocket connected message"""
    type: Literal["connected"]
    data: dict


class PlaybackStateMessage(BaseModel):
    """WebSocket playback state update message"""
    type: Literal["playback_state"]
    data: dict


class ToastMessage(BaseModel):
    """WebSocket toast update message"""
    type: Literal["toast"]
    data: dict


class ThemeMessage(BaseModel):
    """WebSocket theme update message"""
    type: Literal["theme"]
    data: dict


class PongMessage(BaseModel):
    """WebSocket pong response"""
    type: Literal["pong"]
    data: dict
