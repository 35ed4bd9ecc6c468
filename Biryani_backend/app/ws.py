import logging
from typing import Set
from fastapi import WebSocket

logger = logging.getLogger("biryani.ws")

POST_CREATED = "post:created"
POST_VOTED = "post:voted"


class ConnectionManager:
    def __init__(self):
        self.active: Set[WebSocket] = set()

    async def connect(self, websocket: WebSocket):
        # 先登记再 accept，握手完成后的第一次广播一定能收到
        self.active.add(websocket)
        try:
            await websocket.accept()
        except Exception:
            self.active.discard(websocket)
            raise
        logger.info("WS_CONNECT clients=%d", len(self.active))

    def disconnect(self, websocket: WebSocket):
        if websocket in self.active:
            self.active.discard(websocket)
            logger.info("WS_DISCONNECT clients=%d", len(self.active))

    async def publish(self, event: str, data: dict):
        message = {"type": event, "data": data}
        for ws in list(self.active):
            try:
                await ws.send_json(message)
            except Exception as exc:
                logger.warning("WS_SEND_FAILED event=%s error=%s", event, exc)
                self.disconnect(ws)
