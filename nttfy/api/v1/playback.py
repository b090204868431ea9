from fastapi import APIRouter, Depends
from nttfy.context import AppContext
from nttfy.core.logging import get_logger
from nttfy.dependencies import get_context, get_current_user
from nttfy.utils.formatters import format_playback_state
from nttfy.schemas.playback import PlayRequest, SeekRequest, PlaybackStateResponse

logger = get_logger("api.playback")
router = APIRouter(dependencies=[Depends(get_current_user)])


# ==================== STATE ====================

@router.get("/state", response_model=PlaybackStateResponse)
async def get_playback_state(context: AppContext = Depends(get_context)):
    """Current playback session, with labels for the player bar"""
    return format_playback_state(context.playback.snapshot())


# ==================== CONTROLS ====================

@router.post("/play", response_model=PlaybackStateResponse)
async def play(request: PlayRequest, context: AppContext = Depends(get_context)):
    """
    Play a track. Sending the track that is already loaded toggles pause/resume.
    A load failure is not an error: the session simply ends up empty.
    """
    logger.info(f"Play command for track {request.track.id}")
    await context.playback.play(request.track, request.playlist)
    return format_playback_state(context.playback.snapshot())


@router.post("/toggle", response_model=PlaybackStateResponse)
async def toggle_play(context: AppContext = Depends(get_context)):
    await context.playback.toggle_play()
    return format_playback_state(context.playback.snapshot())


@router.post("/next", response_model=PlaybackStateResponse)
async def play_next(context: AppContext = Depends(get_context)):
    await context.playback.play_next()
    return format_playback_state(context.playback.snapshot())


@router.post("/prev", response_model=PlaybackStateResponse)
async def play_prev(context: AppContext = Depends(get_context)):
    await context.playback.play_prev()
    return format_playback_state(context.playback.snapshot())


@router.post("/seek", response_model=PlaybackStateResponse)
async def seek(request: SeekRequest, context: AppContext = Depends(get_context)):
    await context.playback.seek_to(request.seconds)
    return format_playback_state(context.playback.snapshot())
