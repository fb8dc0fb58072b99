"""
Notifier transports

WebSocket:  /socket/ws[?sid=<polling sid>][&token=<jwt>]
Polling:    POST /socket/polling, GET|DELETE /socket/polling/{sid},
            POST /socket/polling/{sid}/authenticate

Client -> server messages are {"event": ..., "data": {...}}; supported
events are ``authenticate`` ({token}) and ``ping``.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect
from pydantic import Field

from quizhub.core.exceptions import AuthenticationException
from quizhub.realtime.manager import POLLING, Connection, ConnectionManager, get_notifier
from quizhub.schemas.common import APIModel, ok

logger = logging.getLogger(__name__)

router = APIRouter()


class SocketAuth(APIModel):
    token: str = Field(..., min_length=1)


def handshake(notifier: ConnectionManager, connection: Connection) -> dict:
    return {
        "sid": connection.sid,
        "transport": connection.transport,
        "upgrades": ["websocket"] if connection.transport == POLLING else [],
        "pingInterval": notifier.ping_interval,
        "pingTimeout": notifier.ping_timeout,
    }


async def _authenticate_socket(
    websocket: WebSocket, notifier: ConnectionManager, connection: Connection, token: Optional[str]
) -> None:
    if not token:
        await websocket.send_json(
            {"event": "authenticated", "data": {"success": False, "message": "Token required"}}
        )
        return
    try:
        user_id = notifier.authenticate(connection.sid, token)
    except AuthenticationException as e:
        await websocket.send_json(
            {"event": "authenticated", "data": {"success": False, "message": e.message}}
        )
        return
    await websocket.send_json({"event": "authenticated", "data": {"success": True, "userId": user_id}})


@router.websocket("/ws")
async def websocket_endpoint(
    websocket: WebSocket, sid: Optional[str] = None, token: Optional[str] = None
):
    """Persistent notifier connection"""
    notifier: ConnectionManager = websocket.app.state.notifier
    await websocket.accept()
    connection = notifier.attach_websocket(websocket, sid)
    try:
        await websocket.send_json({"event": "connected", "data": handshake(notifier, connection)})
        await notifier.flush(connection)
        if token:
            await _authenticate_socket(websocket, notifier, connection, token)

        while True:
            try:
                message = await websocket.receive_json()
            except ValueError:
                await websocket.send_json({"event": "error", "data": {"message": "Invalid JSON"}})
                continue

            if not isinstance(message, dict):
                message = {}
            event = message.get("event")
            data = message.get("data")
            if not isinstance(data, dict):
                data = {}
            connection.touch()

            if event == "authenticate":
                await _authenticate_socket(websocket, notifier, connection, data.get("token"))
            elif event == "ping":
                await websocket.send_json({"event": "pong", "data": {}})
            else:
                await websocket.send_json(
                    {"event": "error", "data": {"message": f"Unknown event: {event}"}}
                )
    except WebSocketDisconnect:
        logger.debug(f"Websocket {connection.sid} disconnected")
    finally:
        notifier.disconnect(connection.sid)


@router.post("/polling", status_code=201)
async def open_polling_session(notifier: ConnectionManager = Depends(get_notifier)):
    """Open a polling session"""
    connection = notifier.open_polling()
    return ok(handshake(notifier, connection))


@router.post("/polling/{sid}/authenticate")
async def authenticate_polling_session(
    sid: str, body: SocketAuth, notifier: ConnectionManager = Depends(get_notifier)
):
    user_id = notifier.authenticate(sid, body.token)
    return ok({"success": True, "userId": user_id})


@router.get("/polling/{sid}")
async def poll_events(
    sid: str,
    timeout: float = Query(25, ge=0, le=60),
    notifier: ConnectionManager = Depends(get_notifier),
):
    """Return queued events, waiting up to ``timeout`` seconds for the first one"""
    events = await notifier.poll(sid, timeout)
    return ok({"events": events})


@router.delete("/polling/{sid}")
async def close_polling_session(sid: str, notifier: ConnectionManager = Depends(get_notifier)):
    notifier.get(sid)
    notifier.disconnect(sid)
    return ok(message="Session closed")
