"""
Domain models for the NTTfy client core.
These are the values the services hold and persist.
"""

from .track import Track
from .theme import Theme
from .playback import PlaybackStatus

__all__ = [
    "Track",
    "Theme",
    "PlaybackStatus",
]
