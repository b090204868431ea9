from fastapi import APIRouter, Depends, HTTPException, status
from nttfy.context import AppContext
from nttfy.dependencies import get_context, get_current_user
from nttfy.schemas.lyrics import LyricsStateResponse, OpenLyricsRequest

router = APIRouter(dependencies=[Depends(get_current_user)])


def _lyrics_state(context: AppContext) -> dict:
    lyrics = context.lyrics
    return {
        "is_open": lyrics.is_open,
        "is_loading": lyrics.is_loading,
        "lyrics": lyrics.lyrics,
        "track": lyrics.track,
    }


@router.get("", response_model=LyricsStateResponse)
async def get_lyrics(context: AppContext = Depends(get_context)):
    return _lyrics_state(context)


@router.post("/open", response_model=LyricsStateResponse)
async def open_lyrics(request: OpenLyricsRequest | None = None, context: AppContext = Depends(get_context)):
    """Look up lyrics for the given track, or for the one currently playing"""
    track = request.track if request and request.track else context.playback.current_track
    if track is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No track to show lyrics for")
    await context.lyrics.open_lyrics_modal(track)
    return _lyrics_state(context)


@router.post("/close", response_model=LyricsStateResponse)
async def close_lyrics(context: AppContext = Depends(get_context)):
    context.lyrics.close_lyrics_modal()
    return _lyrics_state(context)
