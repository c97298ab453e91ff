import logging
from typing import Optional

from fastapi import HTTPException, Request, WebSocket, status
from google.cloud.firestore import AsyncClient

logger = logging.getLogger('uvicorn.error')


async def get_firestore_client(request: Request) -> AsyncClient:
    if not hasattr(request.app.state, 'db') or not request.app.state.db:
        logger.error("Firestore client not initialized or unavailable.")
        raise HTTPException(status_code=503, detail="Database service unavailable")
    return request.app.state.db


async def websocket_firestore_client(websocket: WebSocket) -> Optional[AsyncClient]:
    """Returns the client for an accepted websocket, or closes it with 1011 when there is none."""
    db = getattr(websocket.app.state, 'db', None)
    if not db:
        logger.error("Firestore client not initialized or unavailable for websocket.")
        await websocket.close(code=status.WS_1011_INTERNAL_ERROR, reason="Database service unavailable")
        return None
    return db
