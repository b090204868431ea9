import math
import random
from typing import Any, Dict, List, Optional, TypeVar

T = TypeVar("T")


def format_time(seconds: float) -> str:
    """
    Format a position in seconds as m:ss for the player bar.

    Args:
        seconds: Position in seconds

    Returns:
        "m:ss", or "0:00" for negative or NaN input
    """
    if seconds is None or math.isnan(seconds) or seconds < 0:
        return "0:00"
    minutes = int(seconds // 60)
    secs = int(seconds % 60)
    return f"{minutes}:{secs:02d}"


def shuffle_tracks(items: List[T], rng: Optional[random.Random] = None) -> List[T]:
    """Return a shuffled copy of the list (Fisher-Yates via random.shuffle)"""
    shuffled = list(items)
    (rng or random).shuffle(shuffled)
    return shuffled


def format_track(track) -> Dict[str, Any]:
    """
    Format a track for WebSocket messages.

    Args:
        track: Track model

    Returns:
        Camel-case track dictionary, as the app stores it
    """
    return track.model_dump(mode="json", by_alias=True)


def format_playback_state(snapshot: Dict[str, Any]) -> Dict[str, Any]:
    """
    Format a playback engine snapshot for API responses and WebSocket messages.

    Args:
        snapshot: Result of PlaybackEngine.snapshot()

    Returns:
        Playback state with player bar labels and progress percentage
    """
    position = snapshot["position_seconds"]
    duration = snapshot["duration_seconds"]
    current_track = snapshot["current_track"]
    status = snapshot["status"]

    return {
        "status": getattr(status, "value", status),
        "is_playing": snapshot["is_playing"],
        "current_track": format_track(current_track) if current_track else None,
        "position_seconds": position,
        "duration_seconds": duration,
        "position_label": format_time(position),
        "duration_label": format_time(duration),
        "progress_percent": (position / duration) * 100 if duration > 0 else 0.0,
        "active_playlist": [format_track(t) for t in snapshot["active_playlist"]],
    }
