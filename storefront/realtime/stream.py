"""WebSocket forwarding of hub events"""

import asyncio

from fastapi import WebSocket, WebSocketDisconnect


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    # Client frames are ignored; this only notices the close
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        return


async def forward_events(websocket: WebSocket, queue: asyncio.Queue) -> None:
    """Send queued payloads until the client goes away"""
    closed = asyncio.create_task(_wait_for_disconnect(websocket))
    try:
        while True:
            next_payload = asyncio.create_task(queue.get())
            done, _ = await asyncio.wait({next_payload, closed}, return_when=asyncio.FIRST_COMPLETED)
            if closed in done:
                next_payload.cancel()
                return
            await websocket.send_json(next_payload.result())
    except WebSocketDisconnect:
        return
    finally:
        closed.cancel()
