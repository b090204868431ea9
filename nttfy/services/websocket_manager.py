from typing import List
from fastapi import WebSocket
from nttfy.core.logging import get_logger
import json

logger = get_logger("WebSocketManager")


class WebSocketManager:
    """
    Keeps the WebSocket connections of the UI clients.
    State changes of the services are pushed to all of them.
    """

    def __init__(self):
        self.active_connections: List[WebSocket] = []

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        self.active_connections.append(websocket)

    def disconnect(self, websocket: WebSocket):
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)

    async def broadcast(self, message: dict):
        """
        Send a message to every connected client.

        Args:
            message: Message dict to send (will be JSON serialized)
        """
        if not self.active_connections:
            return

        json_message = json.dumps(message)

        disconnected = []
        for connection in list(self.active_connections):
            try:
                await connection.send_text(json_message)
            except Exception as e:
                logger.warning(f"Failed to send {message.get('type')} to client: {e}")
                disconnected.append(connection)

        for connection in disconnected:
            self.disconnect(connection)

    async def send_personal_message(self, websocket: WebSocket, message: dict):
        try:
            await websocket.send_text(json.dumps(message))
        except Exception as e:
            logger.error(f"Failed to send {message.get('type')} message: {e}", exc_info=True)

    def get_connection_count(self) -> int:
        return len(self.active_connections)
