from fastapi import APIRouter, Depends, HTTPException, status
from nttfy.context import AppContext
from nttfy.core.logging import get_logger
from nttfy.dependencies import get_context, get_current_user
from nttfy.schemas.playlist import (
    AddTrackRequest,
    CreateAndAddRequest,
    CreatePlaylistRequest,
    PlaylistMessageResponse,
    PlaylistResponse,
    PlaylistsResponse,
)

logger = get_logger("api.playlists")
router = APIRouter(dependencies=[Depends(get_current_user)])


def _require_name(raw_name: str) -> str:
    name = raw_name.strip()
    if not name:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Playlist name is required")
    return name


# ==================== PLAYLISTS ====================

@router.get("", response_model=PlaylistsResponse)
async def list_playlists(context: AppContext = Depends(get_context)):
    return {"playlists": context.playlists.playlists}


@router.post("", response_model=PlaylistResponse, status_code=status.HTTP_201_CREATED)
async def create_playlist(request: CreatePlaylistRequest, context: AppContext = Depends(get_context)):
    """Create an empty playlist. Names are trimmed and must be unique."""
    name = _require_name(request.name)
    if not await context.playlists.create_playlist(name):
        logger.warning(f"Playlist already exists: {name}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Playlist already exists")
    return {"name": name, "tracks": []}


@router.post("/create-and-add", response_model=PlaylistResponse, status_code=status.HTTP_201_CREATED)
async def create_playlist_and_add(request: CreateAndAddRequest, context: AppContext = Depends(get_context)):
    """Create a playlist and put the given track in it (the add-to-playlist dialog)"""
    name = _require_name(request.name)
    if not await context.playlists.create_playlist(name):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Playlist already exists")

    await context.playlists.add_song_to_playlist(name, request.track)
    await context.toast.show_toast(f'Added to "{name}"')
    return {"name": name, "tracks": context.playlists.get(name)}


@router.get("/{name}", response_model=PlaylistResponse)
async def get_playlist(name: str, context: AppContext = Depends(get_context)):
    tracks = context.playlists.get(name)
    if tracks is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Playlist not found")
    return {"name": name, "tracks": tracks}


@router.delete("/{name}", response_model=PlaylistMessageResponse)
async def delete_playlist(name: str, context: AppContext = Depends(get_context)):
    """Delete a playlist. Deleting a missing playlist is not an error."""
    existed = context.playlists.get(name) is not None
    await context.playlists.delete_playlist(name)
    return {"message": f'Playlist "{name}" deleted', "changed": existed}


# ==================== TRACKS ====================

@router.post("/{name}/tracks", response_model=PlaylistMessageResponse)
async def add_track(name: str, request: AddTrackRequest, context: AppContext = Depends(get_context)):
    """Add a track. Adding a track that is already in the playlist changes nothing."""
    if context.playlists.get(name) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Playlist not found")

    added = await context.playlists.add_song_to_playlist(name, request.track)
    message = f'Added to "{name}"'
    await context.toast.show_toast(message)
    return {"message": message, "changed": added}


@router.delete("/{name}/tracks/{track_id}", response_model=PlaylistMessageResponse)
async def remove_track(name: str, track_id: int, context: AppContext = Depends(get_context)):
    tracks = context.playlists.get(name)
    if tracks is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Playlist not found")

    await context.playlists.remove_song_from_playlist(name, track_id)
    changed = any(t.id == track_id for t in tracks)
    return {"message": f'Removed from "{name}"', "changed": changed}
