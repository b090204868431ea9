from fastapi import APIRouter, WebSocket, WebSocketDisconnect, Query
from nttfy.context import AppContext
from nttfy.core.logging import get_logger
from nttfy.services.jwt_service import verify_token
from nttfy.utils.formatters import format_playback_state

logger = get_logger("api.websocket")
router = APIRouter()


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket, token: str = Query(...)):
    """
    WebSocket endpoint for pushed client state.

    Clients receive:
    - Playback state changes (load, play/pause, position ticks)
    - Toast messages and their expiry
    - Theme changes
    """
    context: AppContext = websocket.app.state.context
    manager = context.websockets

    email = verify_token(token)
    if email is None:
        logger.warning("WebSocket connection rejected: invalid token")
        await websocket.close(code=1008, reason="Invalid or expired token")
        return

    if email != context.settings.demo_email:
        logger.warning(f"WebSocket connection rejected: unknown user {email}")
        await websocket.close(code=1008, reason="User not found")
        return

    await manager.connect(websocket)
    logger.info(f"UI client connected for {email} - {manager.get_connection_count()} total")

    try:
        await manager.send_personal_message(
            websocket,
            {"type": "connected", "data": {"message": "Connected", "user": email}}
        )
        await manager.send_personal_message(
            websocket,
            {"type": "playback_state", "data": format_playback_state(context.playback.snapshot())}
        )
        await manager.send_personal_message(
            websocket,
            {"type": "toast", "data": {"message": context.toast.message}}
        )
        await manager.send_personal_message(
            websocket,
            {"type": "theme", "data": {"theme": context.theme.theme.value}}
        )

        while True:
            data = await websocket.receive_text()
            if data == "ping":
                await manager.send_personal_message(websocket, {"type": "pong", "data": {}})

    except WebSocketDisconnect:
        logger.info(f"UI client disconnected for {email}")
    finally:
        manager.disconnect(websocket)
        logger.debug(f"{manager.get_connection_count()} UI client(s) remaining")
