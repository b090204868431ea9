from enum import Enum


class PlaybackStatus(str, Enum):
    """Where the single playback session is in its lifecycle"""
    EMPTY = "empty"
    LOADING = "loading"
    PLAYING = "playing"
    PAUSED = "paused"
