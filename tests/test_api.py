"""
API tests: the FastAPI app over a context built with in-memory collaborators.
"""
import json

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from conftest import make_track
from nttfy.api.v1.auth import LOGIN_ERROR
from nttfy.main import create_app
from nttfy.schemas.websocket import ConnectedMessage, PlaybackStateMessage, PongMessage, ThemeMessage, ToastMessage
from nttfy.services.catalog_service import CatalogServiceError
from nttfy.services.jwt_service import create_access_token
from nttfy.services.lyrics_service import LYRICS_NOT_FOUND

PREFIX = "/api/v1"


@pytest.fixture
def client(context):
    with TestClient(create_app(context)) as client:
        yield client


@pytest.fixture
def auth_headers(settings):
    return {"Authorization": f"Bearer {create_access_token(settings.demo_email)}"}


def track_body(track_id: int, title: str = None) -> dict:
    return make_track(track_id, title).to_storage()


# ==================== AUTH ====================

def test_login_with_demo_credentials(client):
    response = client.post(f"{PREFIX}/auth/login", json={"email": "user@test.com", "password": "123456"})

    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"

    me = client.get(f"{PREFIX}/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.json() == {"email": "user@test.com", "plan": "free"}


@pytest.mark.parametrize("email,password", [
    ("user@test.com", "wrong"),
    ("other@test.com", "123456"),
])
def test_login_rejects_wrong_credentials(client, email, password):
    response = client.post(f"{PREFIX}/auth/login", json={"email": email, "password": password})

    assert response.status_code == 401
    assert response.json()["detail"] == LOGIN_ERROR


def test_protected_routes_need_a_token(client):
    assert client.get(f"{PREFIX}/playlists").status_code in (401, 403)

    bad = client.get(f"{PREFIX}/playlists", headers={"Authorization": "Bearer not-a-token"})
    assert bad.status_code == 401


def test_token_for_unknown_user_is_rejected(client):
    headers = {"Authorization": f"Bearer {create_access_token('ghost@test.com')}"}

    assert client.get(f"{PREFIX}/auth/me", headers=headers).status_code == 404


def test_logout(client, auth_headers):
    response = client.post(f"{PREFIX}/auth/logout", headers=auth_headers)

    assert response.status_code == 200


def test_health_and_root(client):
    assert client.get("/health").json() == {"status": "healthy"}
    assert client.get("/").json()["status"] == "running"


# ==================== CATALOG ====================

def test_search_returns_only_playable_tracks(client, auth_headers):
    response = client.get(f"{PREFIX}/catalog/search", params={"q": "coldplay"}, headers=auth_headers)

    body = response.json()
    assert response.status_code == 200
    assert body["error"] is None
    assert len(body["tracks"]) == 1
    assert body["tracks"][0]["audioUrl"].endswith(".mp3")


def test_home_feed_has_tracks_from_every_artist(client, auth_headers, settings):
    body = client.get(f"{PREFIX}/catalog/home", headers=auth_headers).json()

    assert len(body["tracks"]) == len(settings.home_artists)


def test_catalog_failure_is_reported_in_body(client, auth_headers, context):
    async def broken_search(query, limit=15):
        raise CatalogServiceError("down")

    context.catalog.search = broken_search

    body = client.get(f"{PREFIX}/catalog/search", params={"q": "x"}, headers=auth_headers).json()

    assert body["tracks"] == []
    assert body["error"]


# ==================== PLAYLISTS ====================

def test_startup_seeds_default_playlists(client, auth_headers):
    body = client.get(f"{PREFIX}/playlists", headers=auth_headers).json()

    assert body["playlists"] == {"Mis Favoritas": [], "Para Entrenar": []}


def test_create_playlist(client, auth_headers, storage):
    response = client.post(f"{PREFIX}/playlists", json={"name": "  Road trip "}, headers=auth_headers)

    assert response.status_code == 201
    assert response.json() == {"name": "Road trip", "tracks": []}
    assert "Road trip" in json.loads(storage.data["nttfy-playlists"])

    again = client.post(f"{PREFIX}/playlists", json={"name": "Road trip"}, headers=auth_headers)
    assert again.status_code == 409

    blank = client.post(f"{PREFIX}/playlists", json={"name": "   "}, headers=auth_headers)
    assert blank.status_code == 400


def test_add_same_track_twice(client, auth_headers, context):
    url = f"{PREFIX}/playlists/Mis Favoritas/tracks"

    first = client.post(url, json={"track": track_body(1, "Yellow")}, headers=auth_headers)
    second = client.post(url, json={"track": track_body(1, "Yellow")}, headers=auth_headers)

    assert first.json() == {"message": 'Added to "Mis Favoritas"', "changed": True}
    assert second.json()["changed"] is False
    assert [t.id for t in context.playlists.get("Mis Favoritas")] == [1]
    assert context.toast.message == 'Added to "Mis Favoritas"'


def test_add_to_missing_playlist(client, auth_headers):
    response = client.post(f"{PREFIX}/playlists/Nope/tracks", json={"track": track_body(1)}, headers=auth_headers)

    assert response.status_code == 404


def test_create_and_add(client, auth_headers, context):
    response = client.post(
        f"{PREFIX}/playlists/create-and-add",
        json={"name": "Favs", "track": track_body(1, "Yellow")},
        headers=auth_headers,
    )

    assert response.status_code == 201
    assert [t["id"] for t in response.json()["tracks"]] == [1]
    assert context.toast.message == 'Added to "Favs"'


def test_remove_track_and_delete_playlist(client, auth_headers):
    client.post(f"{PREFIX}/playlists/Para Entrenar/tracks", json={"track": track_body(2)}, headers=auth_headers)

    removed = client.delete(f"{PREFIX}/playlists/Para Entrenar/tracks/2", headers=auth_headers)
    assert removed.json()["changed"] is True
    assert client.get(f"{PREFIX}/playlists/Para Entrenar", headers=auth_headers).json()["tracks"] == []

    deleted = client.delete(f"{PREFIX}/playlists/Para Entrenar", headers=auth_headers)
    assert deleted.json()["changed"] is True
    assert client.get(f"{PREFIX}/playlists/Para Entrenar", headers=auth_headers).status_code == 404

    missing = client.delete(f"{PREFIX}/playlists/Para Entrenar", headers=auth_headers)
    assert missing.status_code == 200
    assert missing.json()["changed"] is False


# ==================== PLAYBACK ====================

def test_play_and_traverse(client, auth_headers, backend):
    playlist = [track_body(1, "Yellow"), track_body(2, "Fix You"), track_body(3, "Clocks")]

    state = client.post(
        f"{PREFIX}/playback/play", json={"track": playlist[2], "playlist": playlist}, headers=auth_headers
    ).json()
    assert state["status"] == "playing"
    assert state["current_track"]["id"] == 3
    assert state["position_label"] == "0:00"

    state = client.post(f"{PREFIX}/playback/next", headers=auth_headers).json()
    assert state["current_track"]["id"] == 1

    state = client.post(f"{PREFIX}/playback/prev", headers=auth_headers).json()
    assert state["current_track"]["id"] == 3

    state = client.post(f"{PREFIX}/playback/toggle", headers=auth_headers).json()
    assert state["is_playing"] is False
    assert state["status"] == "paused"

    assert backend.count("load") == 3


def test_seek(client, auth_headers):
    client.post(f"{PREFIX}/playback/play", json={"track": track_body(1)}, headers=auth_headers)

    state = client.post(f"{PREFIX}/playback/seek", json={"seconds": 75}, headers=auth_headers).json()
    assert state["position_seconds"] == 75
    assert state["position_label"] == "1:15"

    negative = client.post(f"{PREFIX}/playback/seek", json={"seconds": -1}, headers=auth_headers)
    assert negative.status_code == 422


def test_initial_playback_state(client, auth_headers):
    state = client.get(f"{PREFIX}/playback/state", headers=auth_headers).json()

    assert state["status"] == "empty"
    assert state["current_track"] is None
    assert state["active_playlist"] == []


# ==================== THEME / TOAST / LYRICS ====================

def test_theme_toggle_is_public_and_persisted(client, storage, settings):
    assert client.get(f"{PREFIX}/theme").json() == {"theme": settings.system_theme}

    toggled = client.post(f"{PREFIX}/theme/toggle").json()["theme"]

    assert toggled != settings.system_theme
    assert storage.data["nttfy-theme"] == toggled


def test_toast_clear(client, auth_headers):
    client.post(f"{PREFIX}/playlists/Mis Favoritas/tracks", json={"track": track_body(1)}, headers=auth_headers)
    assert client.get(f"{PREFIX}/toast", headers=auth_headers).json()["message"] == 'Added to "Mis Favoritas"'

    cleared = client.post(f"{PREFIX}/toast/clear", headers=auth_headers).json()

    assert cleared == {"message": None}


def test_lyrics_for_current_track(client, auth_headers):
    assert client.post(f"{PREFIX}/lyrics/open", headers=auth_headers).status_code == 400

    client.post(f"{PREFIX}/playback/play", json={"track": track_body(1, "Yellow")}, headers=auth_headers)
    state = client.post(f"{PREFIX}/lyrics/open", headers=auth_headers).json()

    assert state["is_open"] is True
    assert state["lyrics"] == "Look at the stars"
    assert state["track"]["id"] == 1


def test_lyrics_not_found_and_close(client, auth_headers):
    track = make_track(9, "Nothing", artist="Unknown").to_storage()

    state = client.post(f"{PREFIX}/lyrics/open", json={"track": track}, headers=auth_headers).json()
    assert state["lyrics"] == LYRICS_NOT_FOUND

    closed = client.post(f"{PREFIX}/lyrics/close", headers=auth_headers).json()
    assert closed["is_open"] is False
    assert closed["track"] is None


# ==================== WEBSOCKET ====================

def test_websocket_sends_initial_state(client, settings):
    token = create_access_token(settings.demo_email)

    with client.websocket_connect(f"/ws?token={token}") as websocket:
        connected = ConnectedMessage.model_validate(websocket.receive_json())
        assert connected.data["user"] == settings.demo_email

        state = PlaybackStateMessage.model_validate(websocket.receive_json())
        assert state.data["status"] == "empty"

        assert ToastMessage.model_validate(websocket.receive_json()).data == {"message": None}
        assert ThemeMessage.model_validate(websocket.receive_json()).data == {"theme": settings.system_theme}

        websocket.send_text("ping")
        PongMessage.model_validate(websocket.receive_json())


def test_websocket_rejects_invalid_token(client):
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect("/ws?token=garbage") as websocket:
            websocket.receive_json()


def test_websocket_rejects_token_of_unknown_user(client):
    token = create_access_token("ghost@test.com")

    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect(f"/ws?token={token}") as websocket:
            websocket.receive_json()
