"""
Progress stream WebSocket endpoint
"""

import logging
from typing import Optional

import anyio
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from toolsmith.core.dependencies import get_ws_container
from toolsmith.services.progress import Subscription

logger = logging.getLogger(__name__)
router = APIRouter()


async def _forward_frames(websocket: WebSocket, subscription: Subscription, scope: anyio.CancelScope) -> None:
    try:
        while True:
            frame = await subscription.get()
            await websocket.send_json(frame)
    except (WebSocketDisconnect, RuntimeError, OSError) as e:
        logger.debug(f"Progress observer went away while sending: {e.__class__.__name__}")
    finally:
        scope.cancel()


async def _drain_client(websocket: WebSocket, scope: anyio.CancelScope) -> None:
    # clients need not send anything; reading detects the disconnect
    try:
        while True:
            message = await websocket.receive_text()
            logger.debug(f"Ignoring client frame on progress stream: {message[:100]}")
    except WebSocketDisconnect:
        pass
    finally:
        scope.cancel()


@router.websocket("/ws")
async def progress_stream(websocket: WebSocket, request_id: Optional[int] = None):
    """Push progress frames for all requests, or for one when request_id is given"""
    container = get_ws_container(websocket)

    # subscribe before accepting so no frame published after the handshake is missed
    subscription = container.broadcaster.subscribe(request_id)
    container.repository.open_session()
    try:
        await websocket.accept()
        logger.info(f"Progress observer connected (request filter: {request_id})")

        # whichever loop ends first cancels the other
        async with anyio.create_task_group() as tg:
            tg.start_soon(_forward_frames, websocket, subscription, tg.cancel_scope)
            tg.start_soon(_drain_client, websocket, tg.cancel_scope)
    finally:
        container.broadcaster.unsubscribe(subscription)
        container.repository.close_session()
        logger.info("Progress observer disconnected")
